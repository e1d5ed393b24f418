"""Configuration dataclasses for the lasraster package."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lasraster.geometry.grid import Extent, PointRecord

# Default NoData value written to output rasters
NODATA = -9999.0

# LAS classification code for high noise (ASPRS LAS 1.4, table 17)
HIGH_NOISE_CLASS = 18


class Variable(str, Enum):
    """Point attribute that is rasterized."""

    X = "x"
    Y = "y"
    Z = "z"
    INTENSITY = "intensity"

    def of(self, point: "PointRecord") -> float:
        """Get this variable's value from a point record."""
        if self is Variable.X:
            return point.x
        elif self is Variable.Y:
            return point.y
        elif self is Variable.Z:
            return point.z
        elif self is Variable.INTENSITY:
            return float(point.intensity)
        raise ValueError(f"Unknown variable: {self}")


class Function(str, Enum):
    """Aggregation function for binning."""

    MEAN = "mean"
    MEDIAN = "median"
    MIN = "min"
    MAX = "max"
    COUNT = "count"


class Method(str, Enum):
    """Rasterization method."""

    BIN = "bin"
    TRIANGULATE = "triangulate"


@dataclass
class RasterConfig:
    """Configuration for a single rasterization run."""

    input_file: Path
    output_file: Path
    resolution: float
    method: Method = Method.TRIANGULATE
    variable: Variable = Variable.Z
    function: Function = Function.MEDIAN
    classification: Optional[int] = None
    extent: Optional["Extent"] = None  # Defaults to the point cloud header bounds
    nodata: float = NODATA
    freeze_distance: Optional[float] = None
    insertion_buffer: Optional[float] = None
    verbose: bool = False

    def __post_init__(self) -> None:
        """Convert paths and validate configuration."""
        if isinstance(self.input_file, str):
            self.input_file = Path(self.input_file)
        if isinstance(self.output_file, str):
            self.output_file = Path(self.output_file)

        if self.method == Method.TRIANGULATE and (
            self.freeze_distance is None or self.insertion_buffer is None
        ):
            raise ValueError(
                "Triangulation requires both freeze_distance and insertion_buffer"
            )
