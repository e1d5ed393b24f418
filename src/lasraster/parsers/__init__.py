"""Point cloud readers."""

from lasraster.parsers.las import LasPointReader

__all__ = ["LasPointReader"]
