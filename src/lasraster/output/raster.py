"""Georeferenced raster output."""

from pathlib import Path

import numpy as np
import rasterio
from rasterio.drivers import raster_driver_extensions
from rasterio.errors import RasterioError
from rasterio.transform import Affine

from lasraster.config import NODATA
from lasraster.exceptions import DriverNotFoundError, InternalError, RasterWriteError
from lasraster.geometry.grid import RasterGrid
from lasraster.utils.logging import get_logger


class RasterWriter:
    """Writes a single-band float64 raster, picking the driver from the file extension."""

    def __init__(self, nodata: float = NODATA):
        """Initialize the writer.

        Args:
            nodata: NoData value recorded in the raster band.
        """
        self.nodata = nodata
        self.logger = get_logger(__name__)

    @staticmethod
    def driver_for(output_path: Path) -> str:
        """Find the raster driver for an output path.

        Raises:
            DriverNotFoundError: If no available driver handles the extension.
        """
        ext = Path(output_path).suffix.lower().lstrip(".")
        driver = raster_driver_extensions().get(ext)
        if driver is None:
            raise DriverNotFoundError(
                f"Couldn't find a valid raster driver for extension '{ext}'"
            )
        return driver

    def write(self, output_path: Path, grid: RasterGrid, data: np.ndarray) -> None:
        """Write the raster.

        Args:
            output_path: Output file path. Its extension selects the driver.
            grid: Raster geometry, used for the size and geo-transform.
            data: Cell values of shape (height, width), row 0 at the minimum y.
        """
        output_path = Path(output_path)
        driver = self.driver_for(output_path)

        if data.shape != (grid.height, grid.width):
            raise InternalError(
                f"Raster data shape {data.shape} does not match grid "
                f"{grid.height}x{grid.width}"
            )

        transform = Affine.from_gdal(*grid.geo_transform)

        self.logger.info(f"Writing {driver} raster to: {output_path}")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with rasterio.open(
                output_path,
                "w",
                driver=driver,
                height=grid.height,
                width=grid.width,
                count=1,
                dtype=np.float64,
                transform=transform,
                nodata=self.nodata,
            ) as dst:
                dst.write(data.astype(np.float64, copy=False), 1)
        except (RasterioError, OSError) as e:
            raise RasterWriteError(f"Error writing raster {output_path}: {e}") from e

        self.logger.info(f"Raster created: {output_path}")
