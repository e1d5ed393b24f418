"""TIN to raster interpolation."""

import numpy as np

from lasraster.config import NODATA
from lasraster.geometry.grid import RasterGrid
from lasraster.geometry.tin import Triangulation
from lasraster.utils.logging import get_logger


class RasterSampler:
    """Samples a finished triangulation onto a regular grid."""

    def __init__(self, triangulation: Triangulation, grid: RasterGrid, nodata: float = NODATA):
        """Initialize the sampler.

        Args:
            triangulation: The completed surface triangulation.
            grid: Output raster geometry.
            nodata: Value for cells outside the triangulated hull.
        """
        self.triangulation = triangulation
        self.grid = grid
        self.nodata = nodata
        self.logger = get_logger(__name__)

    def sample(self) -> np.ndarray:
        """Interpolate vertex values at every cell.

        Each cell is sampled at its lower-left corner, measured from the
        rounded minimum corner of the extent.

        Returns:
            Array of shape (height, width), row 0 at the minimum y.
        """
        self.grid.validate()
        width, height = self.grid.width, self.grid.height
        self.logger.info(f"Sampling raster: {width}x{height} cells")

        data = np.full((height, width), self.nodata, dtype=np.float64)
        for row in range(height):
            xs, y = self.grid.sample_positions(row)
            for col, x in enumerate(xs):
                value = self.triangulation.interpolate(x, y)
                if value is not None:
                    data[row, col] = value

        empty = int(np.count_nonzero(data == self.nodata))
        if empty:
            self.logger.debug(f"{empty} cells outside the triangulated hull")
        return data
