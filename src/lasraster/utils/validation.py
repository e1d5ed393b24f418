"""Input validation utilities."""

import math
from pathlib import Path

from lasraster.exceptions import ValidationError
from lasraster.geometry.grid import Extent


def validate_input_file(file_path: Path) -> None:
    """Validate that the input file exists and is a LAS/LAZ file.

    Args:
        file_path: Path to the input file.

    Raises:
        ValidationError: If the file is invalid.
    """
    if not file_path.exists():
        raise ValidationError(f"Input file not found: {file_path}")

    if not file_path.is_file():
        raise ValidationError(f"Input path is not a file: {file_path}")

    valid_extensions = {".las", ".laz"}
    if file_path.suffix.lower() not in valid_extensions:
        raise ValidationError(
            f"Input file must be a LAS or LAZ file (.las or .laz), "
            f"got: {file_path.suffix}"
        )


def validate_positive_float(value: float, name: str) -> None:
    """Validate that a value is a positive float.

    Args:
        value: The value to validate.
        name: Name of the parameter for error messages.

    Raises:
        ValidationError: If the value is not positive.
    """
    if not value > 0:
        raise ValidationError(f"{name} must be positive, got: {value}")


def validate_classification(code: int) -> None:
    """Validate a LAS classification code.

    Raises:
        ValidationError: If the code does not fit in an unsigned byte.
    """
    if not 0 <= code <= 255:
        raise ValidationError(f"Classification code must be between 0 and 255, got: {code}")


def parse_extent(text: str) -> Extent:
    """Parse an extent string.

    Accepts ``minx,miny,minz,maxx,maxy,maxz`` or the 2-D form
    ``minx,miny,maxx,maxy``, which leaves elevation unbounded.

    Raises:
        ValidationError: If the string is malformed or a min exceeds its max.
    """
    parts = text.split(",")
    if len(parts) not in (4, 6):
        raise ValidationError(f"'{text}' has an invalid number of coordinates")

    try:
        values = [float(part) for part in parts]
    except ValueError as e:
        raise ValidationError(f"Invalid extent '{text}': {e}") from e

    if not all(math.isfinite(v) for v in values):
        raise ValidationError(f"Invalid extent '{text}': coordinates must be finite")

    if len(values) == 6:
        min_x, min_y, min_z, max_x, max_y, max_z = values
        extent = Extent(min_x, min_y, max_x, max_y, min_z=min_z, max_z=max_z)
    else:
        min_x, min_y, max_x, max_y = values
        extent = Extent(min_x, min_y, max_x, max_y)

    for low, high in (
        (extent.min_x, extent.max_x),
        (extent.min_y, extent.max_y),
        (extent.min_z, extent.max_z),
    ):
        if low > high:
            raise ValidationError(f"Invalid extent, {low} is greater than {high}")

    return extent
