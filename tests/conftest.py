from pathlib import Path
from typing import Callable, Sequence

import laspy
import numpy as np
import pytest

from lasraster.geometry.grid import PointRecord


def write_las(path: Path, points: Sequence[PointRecord]) -> Path:
    """Write point records to a LAS 1.2 file."""
    header = laspy.LasHeader(point_format=3, version="1.2")
    header.scales = np.array([0.001, 0.001, 0.001])
    header.offsets = np.array([0.0, 0.0, 0.0])

    las = laspy.LasData(header)
    las.x = np.array([p.x for p in points], dtype=np.float64)
    las.y = np.array([p.y for p in points], dtype=np.float64)
    las.z = np.array([p.z for p in points], dtype=np.float64)
    las.classification = np.array([p.classification for p in points], dtype=np.uint8)
    las.intensity = np.array([p.intensity for p in points], dtype=np.uint16)
    las.write(str(path))
    return path


@pytest.fixture
def las_file(tmp_path: Path) -> Callable[[Sequence[PointRecord]], Path]:
    """Factory writing points to a LAS file in the test's temp directory."""

    def factory(points: Sequence[PointRecord], name: str = "cloud.las") -> Path:
        return write_las(tmp_path / name, points)

    return factory
