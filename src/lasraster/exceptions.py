"""Custom exceptions for the lasraster package."""


class LasRasterError(Exception):
    """Base exception for all lasraster errors."""

    pass


class PointCloudReadError(LasRasterError):
    """Error reading or decoding a point cloud file."""

    pass


class InsertionError(LasRasterError):
    """A point was rejected by the triangulation."""

    pass


class ConfigurationError(LasRasterError):
    """Invalid run configuration, detected before any processing."""

    pass


class ValidationError(ConfigurationError):
    """Input validation error."""

    pass


class DriverNotFoundError(ConfigurationError):
    """No raster driver matches the output file extension."""

    pass


class RasterWriteError(LasRasterError):
    """Error writing the output raster."""

    pass


class InternalError(LasRasterError):
    """An internal invariant was violated. Indicates a bug, not bad input."""

    pass
