"""Utility modules."""

from lasraster.utils.validation import parse_extent, validate_classification, validate_input_file
from lasraster.utils.logging import setup_logging, get_logger

__all__ = [
    "parse_extent",
    "validate_classification",
    "validate_input_file",
    "setup_logging",
    "get_logger",
]
