"""Point records, extents and output raster grid geometry."""

import math
from dataclasses import dataclass
from typing import NamedTuple

from lasraster.exceptions import ValidationError


class PointRecord(NamedTuple):
    """A single decoded point cloud record."""

    x: float  # Easting
    y: float  # Northing
    z: float  # Elevation
    classification: int = 1
    intensity: float = 0.0


@dataclass(frozen=True)
class Extent:
    """An axis-aligned bounding box. Z bounds are unbounded for 2-D extents."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    min_z: float = -math.inf
    max_z: float = math.inf

    @property
    def has_z(self) -> bool:
        """Whether the extent constrains elevation."""
        return math.isfinite(self.min_z) or math.isfinite(self.max_z)

    def planar(self) -> "Extent":
        """Get a copy of this extent without elevation bounds."""
        return Extent(self.min_x, self.min_y, self.max_x, self.max_y)


def round_half_away(value: float) -> float:
    """Round to the nearest integer, with halves rounded away from zero."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(whole, value)


@dataclass(frozen=True)
class RasterGrid:
    """Geometry of the output raster: extent, resolution and cell counts."""

    extent: Extent
    resolution: float

    @property
    def width(self) -> int:
        return int(math.ceil((self.extent.max_x - self.extent.min_x) / self.resolution))

    @property
    def height(self) -> int:
        return int(math.ceil((self.extent.max_y - self.extent.min_y) / self.resolution))

    @property
    def size(self) -> int:
        """Number of cells in the grid."""
        return self.width * self.height

    @property
    def geo_transform(self) -> tuple[float, float, float, float, float, float]:
        """GDAL geo-transform (origin_x, pixel_width, 0, origin_y, 0, pixel_height)."""
        return (
            self.extent.min_x,
            self.resolution,
            0.0,
            self.extent.min_y,
            0.0,
            self.resolution,
        )

    def validate(self) -> None:
        """Check that the grid has at least one cell.

        Raises:
            ValidationError: If the resolution or raster dimensions are invalid.
        """
        if not self.resolution > 0:
            raise ValidationError(f"Resolution must be positive, got: {self.resolution}")
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Invalid raster dimensions: {self.width}x{self.height}. "
                "Check the extent and resolution."
            )

    def contains(self, x: float, y: float, z: float) -> bool:
        """Check whether a point lies inside the extent (bounds inclusive)."""
        e = self.extent
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        return (
            e.min_x <= x <= e.max_x
            and e.min_y <= y <= e.max_y
            and e.min_z <= z <= e.max_z
        )

    def cell_index(self, x: float, y: float) -> tuple[int, int]:
        """Get the (column, row) of the cell containing (x, y).

        Points on the max edge of the extent belong to the last column or row.
        """
        col = int(math.floor((x - self.extent.min_x) / self.resolution))
        row = int(math.floor((y - self.extent.min_y) / self.resolution))
        return min(col, self.width - 1), min(row, self.height - 1)

    def sample_positions(self, row: int) -> tuple[list[float], float]:
        """Get the sample x positions and the y position for a grid row.

        Samples sit on the lower-left corner of each cell, offset from the
        rounded minimum corner of the extent.
        """
        origin_x = round_half_away(self.extent.min_x)
        origin_y = round_half_away(self.extent.min_y)
        y = origin_y + self.resolution * row
        xs = [origin_x + self.resolution * col for col in range(self.width)]
        return xs, y
