import math
from pathlib import Path

import pytest

from lasraster.config import Method, RasterConfig
from lasraster.exceptions import ConfigurationError, ValidationError
from lasraster.utils.validation import (
    parse_extent,
    validate_classification,
    validate_input_file,
    validate_positive_float,
)


def test_validate_input_file(tmp_path: Path) -> None:
    las = tmp_path / "cloud.LAS"
    las.write_bytes(b"")
    validate_input_file(las)

    with pytest.raises(ValidationError, match="not found"):
        validate_input_file(tmp_path / "missing.las")

    with pytest.raises(ValidationError, match="not a file"):
        validate_input_file(tmp_path)

    text = tmp_path / "cloud.txt"
    text.write_text("x y z")
    with pytest.raises(ValidationError, match="LAS or LAZ"):
        validate_input_file(text)


@pytest.mark.parametrize("value", [0.0, -1.0, math.nan])
def test_validate_positive_float_rejects(value: float) -> None:
    with pytest.raises(ValidationError, match="Resolution"):
        validate_positive_float(value, "Resolution")


def test_validate_classification() -> None:
    validate_classification(0)
    validate_classification(255)
    with pytest.raises(ValidationError):
        validate_classification(256)


def test_parse_planar_extent() -> None:
    extent = parse_extent("0,1,10,11")
    assert (extent.min_x, extent.min_y, extent.max_x, extent.max_y) == (0.0, 1.0, 10.0, 11.0)
    assert not extent.has_z


def test_parse_extent_with_z() -> None:
    extent = parse_extent("-5,-6,0,5,6,100")
    assert extent.min_x == -5.0
    assert extent.max_y == 6.0
    assert (extent.min_z, extent.max_z) == (0.0, 100.0)
    assert extent.has_z


@pytest.mark.parametrize(
    "text, message",
    [
        ("1,2,3", "invalid number of coordinates"),
        ("1,2,3,4,5", "invalid number of coordinates"),
        ("a,2,3,4", "Invalid extent"),
        ("10,0,0,5", "greater than"),
        ("0,0,9,5,5,1", "greater than"),
        ("nan,0,10,10", "must be finite"),
        ("0,0,inf,10", "must be finite"),
        ("0,0,-inf,10,10,5", "must be finite"),
    ],
)
def test_parse_extent_errors(text: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        parse_extent(text)


def test_validation_error_is_configuration_error() -> None:
    assert issubclass(ValidationError, ConfigurationError)


def test_config_requires_triangulation_parameters(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        RasterConfig(
            input_file=tmp_path / "in.las",
            output_file=tmp_path / "out.tif",
            resolution=1.0,
            method=Method.TRIANGULATE,
        )

    config = RasterConfig(
        input_file=str(tmp_path / "in.las"),
        output_file=str(tmp_path / "out.tif"),
        resolution=1.0,
        method=Method.BIN,
    )
    assert isinstance(config.output_file, Path)
