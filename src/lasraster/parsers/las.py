"""LAS/LAZ point cloud reader."""

from pathlib import Path
from typing import Iterator

import laspy
import numpy as np
from laspy.errors import LaspyException

from lasraster.exceptions import PointCloudReadError
from lasraster.geometry.grid import Extent, PointRecord
from lasraster.utils.logging import get_logger


class LasPointReader:
    """Streams point records from a LAS or LAZ file."""

    SUPPORTED_EXTENSIONS = {".las", ".laz"}

    def __init__(self, file_path: Path, chunk_size: int = 1_000_000):
        """Initialize the reader and load the header.

        Args:
            file_path: Path to the LAS/LAZ file.
            chunk_size: Number of points decoded per chunk.
        """
        self.file_path = Path(file_path)
        self.chunk_size = chunk_size
        self.logger = get_logger(__name__)

        if not self.file_path.exists():
            raise PointCloudReadError(f"Point cloud file not found: {self.file_path}")

        ext = self.file_path.suffix.lower()
        if ext not in self.SUPPORTED_EXTENSIONS:
            raise PointCloudReadError(
                f"Unsupported file format: {ext}. "
                f"Supported formats: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}"
            )

        self._read_header()

    def _read_header(self) -> None:
        """Read the declared bounds and point count from the file header."""
        try:
            with laspy.open(self.file_path) as reader:
                header = reader.header
                self.point_count = int(header.point_count)
                mins, maxs = header.mins, header.maxs
                self.version = str(header.version)
        except (LaspyException, OSError) as e:
            raise PointCloudReadError(f"Error reading header of {self.file_path}: {e}") from e

        self.bounds = Extent(
            min_x=float(mins[0]),
            min_y=float(mins[1]),
            max_x=float(maxs[0]),
            max_y=float(maxs[1]),
            min_z=float(mins[2]),
            max_z=float(maxs[2]),
        )
        self.logger.info(f"LAS {self.version} file with {self.point_count} points")
        self.logger.debug(f"Declared bounds: {self.bounds}")

    def points(self) -> Iterator[PointRecord]:
        """Decode the points lazily, in file order.

        The iterator stops with PointCloudReadError on the first decode
        failure; it cannot be restarted.
        """
        read = 0
        try:
            with laspy.open(self.file_path) as reader:
                for chunk in reader.chunk_iterator(self.chunk_size):
                    xs = np.asarray(chunk.x, dtype=np.float64).tolist()
                    ys = np.asarray(chunk.y, dtype=np.float64).tolist()
                    zs = np.asarray(chunk.z, dtype=np.float64).tolist()
                    classes = np.asarray(chunk.classification, dtype=np.uint8).tolist()
                    intensities = np.asarray(chunk.intensity, dtype=np.float64).tolist()

                    for record in zip(xs, ys, zs, classes, intensities):
                        yield PointRecord(*record)
                    read += len(xs)
                    self.logger.debug(f"Decoded {read}/{self.point_count} points")
        except (LaspyException, OSError, ValueError) as e:
            raise PointCloudReadError(
                f"Error decoding {self.file_path} after {read} points: {e}"
            ) from e
