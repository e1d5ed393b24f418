from pathlib import Path

import numpy as np
import pytest
import rasterio

from lasraster.exceptions import DriverNotFoundError, InternalError, PointCloudReadError
from lasraster.geometry.grid import Extent, PointRecord, RasterGrid
from lasraster.output.raster import RasterWriter
from lasraster.parsers.las import LasPointReader

POINTS = [
    PointRecord(1.0, 2.0, 3.0, classification=2, intensity=10.0),
    PointRecord(4.5, 5.5, 6.25, classification=18, intensity=20.0),
    PointRecord(-1.0, 0.0, 0.5, classification=1, intensity=30.0),
]


class TestLasPointReader:
    def test_header(self, las_file) -> None:
        reader = LasPointReader(las_file(POINTS))
        assert reader.point_count == 3
        assert reader.bounds.min_x == pytest.approx(-1.0)
        assert reader.bounds.max_y == pytest.approx(5.5)
        assert reader.bounds.max_z == pytest.approx(6.25)
        assert reader.bounds.planar().has_z is False

    def test_points(self, las_file) -> None:
        reader = LasPointReader(las_file(POINTS), chunk_size=2)
        points = list(reader.points())

        assert len(points) == 3
        for read, written in zip(points, POINTS):
            assert read.x == pytest.approx(written.x)
            assert read.y == pytest.approx(written.y)
            assert read.z == pytest.approx(written.z)
            assert read.classification == written.classification
            assert read.intensity == written.intensity

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PointCloudReadError, match="not found"):
            LasPointReader(tmp_path / "missing.las")

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "cloud.xyz"
        path.write_text("1 2 3\n")
        with pytest.raises(PointCloudReadError, match="Unsupported"):
            LasPointReader(path)

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "cloud.las"
        path.write_bytes(b"not a point cloud")
        with pytest.raises(PointCloudReadError):
            LasPointReader(path)


class TestRasterWriter:
    def test_driver_for(self) -> None:
        assert RasterWriter.driver_for(Path("dem.tif")) == "GTiff"
        assert RasterWriter.driver_for(Path("DEM.TIF")) == "GTiff"
        with pytest.raises(DriverNotFoundError):
            RasterWriter.driver_for(Path("dem.notaformat"))

    def test_write_and_read_back(self, tmp_path: Path) -> None:
        grid = RasterGrid(Extent(100.0, 200.0, 103.0, 202.0), 1.0)
        data = np.array([[1.0, 2.0, 3.0], [4.0, -9999.0, 6.0]])
        output = tmp_path / "nested" / "dem.tif"

        RasterWriter(nodata=-9999.0).write(output, grid, data)

        with rasterio.open(output) as src:
            assert (src.height, src.width) == (2, 3)
            assert src.nodata == -9999.0
            assert src.transform.to_gdal() == grid.geo_transform
            np.testing.assert_array_equal(src.read(1), data)

    def test_shape_mismatch(self, tmp_path: Path) -> None:
        grid = RasterGrid(Extent(0.0, 0.0, 2.0, 2.0), 1.0)
        with pytest.raises(InternalError):
            RasterWriter().write(tmp_path / "dem.tif", grid, np.zeros((3, 3)))
        assert not (tmp_path / "dem.tif").exists()


def test_truncated_records(las_file) -> None:
    points = [PointRecord(float(i), float(i), 1.0) for i in range(100)]
    path = las_file(points)
    data = path.read_bytes()
    # Cut the file in the middle of a record, 40 records before the end
    path.write_bytes(data[: len(data) - 40 * 34 - 7])

    reader = LasPointReader(path)
    with pytest.raises(PointCloudReadError):
        list(reader.points())
