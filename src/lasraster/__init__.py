"""Point cloud to raster conversion by binning or constrained triangulation."""

__version__ = "0.1.0"

from lasraster.config import NODATA, Function, Method, RasterConfig, Variable
from lasraster.geometry.grid import Extent, PointRecord, RasterGrid
from lasraster.geometry.tin import Triangulation
from lasraster.geometry.builder import SurfaceBuilder
from lasraster.geometry.rasterize import RasterSampler
from lasraster.geometry.binning import PointBinner
from lasraster.parsers.las import LasPointReader
from lasraster.output.raster import RasterWriter

__all__ = [
    "__version__",
    "NODATA",
    "Function",
    "Method",
    "RasterConfig",
    "Variable",
    "Extent",
    "PointRecord",
    "RasterGrid",
    "Triangulation",
    "SurfaceBuilder",
    "RasterSampler",
    "PointBinner",
    "LasPointReader",
    "RasterWriter",
]
