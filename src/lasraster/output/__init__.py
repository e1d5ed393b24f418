"""Raster output."""

from lasraster.output.raster import RasterWriter

__all__ = ["RasterWriter"]
