"""Per-cell statistical binning of raw point values."""

from typing import Iterable, Optional

import numpy as np

from lasraster.config import NODATA, Function, Variable
from lasraster.exceptions import InternalError
from lasraster.geometry.grid import PointRecord, RasterGrid
from lasraster.utils.logging import get_logger


def collapse_cell(values: list[float], function: Function, nodata: float = NODATA) -> float:
    """Reduce the values collected in one cell to a single value.

    Args:
        values: Values of the points that fell in the cell.
        function: Aggregation function.
        nodata: Value for an empty cell.

    Returns:
        The aggregated value, or nodata if the cell is empty.
    """
    if not values:
        return nodata

    if function == Function.MEAN:
        return float(np.mean(values))
    elif function == Function.MEDIAN:
        return float(np.median(values))
    elif function == Function.MIN:
        return float(min(values))
    elif function == Function.MAX:
        return float(max(values))
    elif function == Function.COUNT:
        return float(len(values))
    raise ValueError(f"Unknown aggregation function: {function}")


class PointBinner:
    """Rasterizes points by aggregating the values that fall in each cell."""

    def __init__(
        self,
        grid: RasterGrid,
        function: Function = Function.MEDIAN,
        variable: Variable = Variable.Z,
        classification: Optional[int] = None,
        nodata: float = NODATA,
    ):
        """Initialize the binner.

        Args:
            grid: Output raster geometry.
            function: Aggregation function applied to each cell.
            variable: Point attribute to aggregate.
            classification: Only keep points with this classification code.
            nodata: Value for empty cells.
        """
        self.grid = grid
        self.function = function
        self.variable = variable
        self.classification = classification
        self.nodata = nodata
        self.logger = get_logger(__name__)

    def bin(self, points: Iterable[PointRecord]) -> np.ndarray:
        """Bin a point stream.

        Returns:
            Array of shape (height, width), row 0 at the minimum y.

        Raises:
            InternalError: If a kept point maps outside the grid.
        """
        self.grid.validate()
        width, height = self.grid.width, self.grid.height
        size = self.grid.size
        self.logger.info(f"Binning points into {width}x{height} cells")

        cells: list[list[float]] = [[] for _ in range(size)]
        outside = 0
        for point in points:
            if self.classification is not None and point.classification != self.classification:
                continue
            if not self.grid.contains(point.x, point.y, point.z):
                outside += 1
                continue

            col, row = self.grid.cell_index(point.x, point.y)
            index = row * width + col
            if not (0 <= col < width and 0 <= row < height):
                raise InternalError(
                    f"Couldn't get index {index}/{size}: {col}, {row} {width}, {height}"
                )
            cells[index].append(self.variable.of(point))

        if outside:
            self.logger.info(f"Dropped {outside} points outside the extent")

        self.logger.info(f"Collapsing cells using function: {self.function.value}")
        data = np.array(
            [collapse_cell(cell, self.function, self.nodata) for cell in cells],
            dtype=np.float64,
        )
        return data.reshape((height, width))
