"""Geometry data structures, surface construction and rasterization."""

from lasraster.geometry.grid import Extent, PointRecord, RasterGrid
from lasraster.geometry.tin import LocateResult, LocationKind, Triangulation, Vertex
from lasraster.geometry.builder import SurfaceBuilder, FreezeBuffer, InsertOutcome
from lasraster.geometry.rasterize import RasterSampler
from lasraster.geometry.binning import PointBinner, collapse_cell

__all__ = [
    "Extent",
    "PointRecord",
    "RasterGrid",
    "LocateResult",
    "LocationKind",
    "Triangulation",
    "Vertex",
    "SurfaceBuilder",
    "FreezeBuffer",
    "InsertOutcome",
    "RasterSampler",
    "PointBinner",
    "collapse_cell",
]
