import logging
from pathlib import Path

import numpy as np
import pytest
import rasterio

from lasraster.cli import build_config, main, parse_args
from lasraster.config import NODATA, Function, Method, Variable
from lasraster.exceptions import InternalError, RasterWriteError
from lasraster.geometry.grid import PointRecord

CORNERS = [(0.0, 0.0), (10.0, 0.0), (0.0, 10.0), (10.0, 10.0)]


@pytest.fixture
def cloud(las_file) -> Path:
    points = [PointRecord(x, y, 7.0, classification=2, intensity=50.0) for x, y in CORNERS]
    points.append(PointRecord(5.0, 5.0, 100.0, classification=18))
    return las_file(points)


def _read(path: Path) -> np.ndarray:
    with rasterio.open(path) as src:
        return src.read(1)


def test_triangulate(cloud: Path, tmp_path: Path) -> None:
    output = tmp_path / "dsm.tif"
    code = main([
        "triangulate", "-i", str(cloud), "-r", "5", "-d", "20", "-b", "1", "-q", str(output),
    ])

    assert code == 0
    # The noise spike at the center would otherwise lift the middle samples
    np.testing.assert_allclose(_read(output), 7.0)


def test_triangulate_extent_beyond_hull(cloud: Path, tmp_path: Path) -> None:
    output = tmp_path / "dsm.tif"
    code = main([
        "triangulate", "-i", str(cloud), "-r", "10", "-d", "20", "-b", "1",
        "--extent=-10,-10,10,10", str(output),
    ])

    assert code == 0
    with rasterio.open(output) as src:
        assert src.nodata == NODATA
        data = src.read(1)
    assert data.shape == (2, 2)
    assert np.count_nonzero(data == NODATA) == 3


def test_bin(cloud: Path, tmp_path: Path) -> None:
    output = tmp_path / "count.tif"
    code = main([
        "bin", "-i", str(cloud), "-r", "5", "-f", "count", "-c", "2", "-n", "0", str(output),
    ])

    assert code == 0
    np.testing.assert_array_equal(_read(output), np.ones((2, 2)))


def test_unknown_output_format(cloud: Path, tmp_path: Path) -> None:
    output = tmp_path / "dem.notaformat"
    code = main(["bin", "-i", str(cloud), "-r", "1", str(output)])

    assert code == 1
    assert not output.exists()


def test_missing_input(tmp_path: Path) -> None:
    code = main(["bin", "-i", str(tmp_path / "missing.las"), "-r", "1", str(tmp_path / "o.tif")])
    assert code == 1


def test_bad_extent(cloud: Path, tmp_path: Path) -> None:
    code = main(["bin", "-i", str(cloud), "-r", "1", "-e", "1,2,3", str(tmp_path / "o.tif")])
    assert code == 1


def test_empty_grid(cloud: Path, tmp_path: Path) -> None:
    code = main(["bin", "-i", str(cloud), "-r", "1", "-e", "0,0,0,0", str(tmp_path / "o.tif")])
    assert code == 1


def test_triangulate_requires_parameters(cloud: Path, tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        parse_args(["triangulate", "-i", str(cloud), "-r", "1", str(tmp_path / "o.tif")])


def test_build_config(cloud: Path, tmp_path: Path) -> None:
    parsed = parse_args([
        "triangulate", "-i", str(cloud), "-r", "0.5", "-d", "5", "-b", "2",
        "--var", "intensity", "-e", "0,0,10,10", str(tmp_path / "o.tif"),
    ])
    config = build_config(parsed)

    assert config.method == Method.TRIANGULATE
    assert config.variable == Variable.INTENSITY
    assert config.function == Function.MEDIAN
    assert (config.freeze_distance, config.insertion_buffer) == (5.0, 2.0)
    assert config.extent.max_x == 10.0


@pytest.mark.parametrize("extent", ["nan,0,10,10", "0,0,inf,10"])
def test_non_finite_extent(cloud: Path, tmp_path: Path, extent: str) -> None:
    output = tmp_path / "o.tif"
    code = main(["bin", "-i", str(cloud), "-r", "1", f"--extent={extent}", str(output)])

    assert code == 1
    assert not output.exists()


def test_truncated_point_records(las_file, tmp_path: Path) -> None:
    cloud = las_file([PointRecord(float(i), float(i % 7), 1.0) for i in range(100)])
    data = cloud.read_bytes()
    cloud.write_bytes(data[: len(data) - 40 * 34 - 7])

    output = tmp_path / "dsm.tif"
    code = main(["triangulate", "-i", str(cloud), "-r", "1", "-d", "5", "-b", "1", str(output)])

    assert code == 1
    assert not output.exists()


@pytest.mark.parametrize(
    "error, expected",
    [
        (InternalError("grid index out of range"), 2),
        (ValueError("unexpected"), 2),
        (RasterWriteError("disk full"), 1),
    ],
)
def test_exit_codes(
    cloud: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, error: Exception, expected: int
) -> None:
    def fail(config):
        raise error

    monkeypatch.setattr("lasraster.cli.run_rasterization", fail)
    assert main(["bin", "-i", str(cloud), "-r", "1", str(tmp_path / "o.tif")]) == expected


def test_stage_logging(cloud: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    code = main([
        "triangulate", "-i", str(cloud), "-r", "5", "-d", "20", "-b", "1",
        "--extent=0,0,0,10,10,50", str(tmp_path / "dsm.tif"),
    ])

    assert code == 0
    messages = [record.getMessage() for record in caplog.records]
    assert messages.count("Building triangulation...") == 1
    assert any(m.startswith("Keeping points with elevation in") for m in messages)
