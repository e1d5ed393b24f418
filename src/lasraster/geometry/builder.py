"""Incremental constrained surface construction from a point cloud."""

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from lasraster.config import HIGH_NOISE_CLASS, Variable
from lasraster.geometry.grid import PointRecord, RasterGrid
from lasraster.geometry.tin import LocateResult, LocationKind, Triangulation
from lasraster.utils.logging import get_logger


class InsertOutcome(str, Enum):
    """What happened to a point offered to the surface."""

    INSERTED = "inserted"
    MERGED = "merged"
    SKIPPED = "skipped"


class SurfacePoint(NamedTuple):
    """A point prepared for insertion."""

    x: float
    y: float
    z: float
    value: float


@dataclass
class BuildStats:
    """Counters collected during a surface build."""

    total_points: int = 0
    noise_points: int = 0
    filtered_points: int = 0  # Rejected by the classification filter
    outside_points: int = 0  # Outside the raster extent
    inserted: int = 0
    merged: int = 0
    skipped: int = 0
    frozen_edges: int = 0
    peak_buffer: int = 0

    @property
    def kept_points(self) -> int:
        return self.total_points - self.noise_points - self.filtered_points - self.outside_points


class FreezeBuffer:
    """Edges created since the last freeze, oldest first."""

    def __init__(self) -> None:
        self._edges: deque[int] = deque()

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self):
        return iter(self._edges)

    def push(self, edges: Iterable[int]) -> None:
        """Append newly created edges at the back."""
        self._edges.extend(edges)

    def freeze(
        self,
        tin: Triangulation,
        height_limit: float,
        freeze_distance: float,
    ) -> int:
        """Freeze the settled part of the buffer.

        Scans from newest to oldest for the first edge whose origin lies
        above ``height_limit``. That edge and every older one are evicted,
        and those no longer than ``freeze_distance`` become constraints.

        Returns:
            Number of edges newly marked as constraints.
        """
        cutoff = None
        for age, edge in enumerate(reversed(self._edges)):
            if tin.elevation(tin.origin(edge)) > height_limit:
                cutoff = len(self._edges) - age
                break

        if cutoff is None:
            return 0

        frozen = 0
        for _ in range(cutoff):
            edge = self._edges.popleft()
            if tin.edge_length(edge) <= freeze_distance and tin.add_constraint(edge):
                frozen += 1
        return frozen


class SurfaceBuilder:
    """Builds a constrained TIN from points swept in descending elevation.

    Points are inserted high to low. Edges created by each insertion enter a
    freeze buffer; once an edge's origin sits more than ``insertion_buffer``
    above the lowest elevation inserted so far (the watermark), the region
    is considered settled and its short edges are frozen as constraints.
    Frozen regions block later, lower points from refining them.
    """

    def __init__(
        self,
        freeze_distance: float,
        insertion_buffer: float,
        variable: Variable = Variable.Z,
        classification: Optional[int] = None,
        grid: Optional[RasterGrid] = None,
    ):
        """Initialize the builder.

        Args:
            freeze_distance: Maximum planar length of an edge that can be frozen.
            insertion_buffer: Elevation slack above the watermark before an
                edge is considered for freezing.
            variable: Point attribute carried as the vertex value.
            classification: Only keep points with this classification code.
            grid: Only keep points inside this grid's extent.
        """
        self.freeze_distance = freeze_distance
        self.insertion_buffer = insertion_buffer
        self.variable = variable
        self.classification = classification
        self.grid = grid
        self.logger = get_logger(__name__)
        self.stats = BuildStats()

    def build(self, points: Iterable[PointRecord]) -> Triangulation:
        """Build the surface from a point stream.

        Args:
            points: Point records, consumed once.

        Returns:
            The completed triangulation.

        Raises:
            InsertionError: If the triangulation rejects a point.
        """
        self.stats = BuildStats()

        self.logger.info("Collecting points")
        surface_points, watermark = self.prepare(points)

        self.logger.info(f"Sorting {len(surface_points)} points")
        surface_points.sort(key=lambda p: p.z, reverse=True)

        self.logger.info(f"Inserting {len(surface_points)} points from the top down")
        tin = Triangulation()
        buffer = FreezeBuffer()
        for point in surface_points:
            self.stats.frozen_edges += buffer.freeze(
                tin, watermark + self.insertion_buffer, self.freeze_distance
            )
            outcome, watermark = self.place(tin, buffer, point, watermark)

            if outcome == InsertOutcome.INSERTED:
                self.stats.inserted += 1
            elif outcome == InsertOutcome.MERGED:
                self.stats.merged += 1
            else:
                self.stats.skipped += 1
            self.stats.peak_buffer = max(self.stats.peak_buffer, len(buffer))

        self.logger.info(
            f"Triangulation built: {tin.num_vertices} vertices, {tin.num_faces} faces, "
            f"{self.stats.frozen_edges} frozen edges"
        )
        self.logger.info(
            f"Points inserted: {self.stats.inserted}, merged: {self.stats.merged}, "
            f"skipped: {self.stats.skipped} (peak freeze buffer: {self.stats.peak_buffer})"
        )
        return tin

    def prepare(self, points: Iterable[PointRecord]) -> tuple[list[SurfacePoint], float]:
        """Filter the point stream and find the starting watermark.

        The watermark starts at the highest elevation of any point, including
        points that are filtered out.

        Returns:
            The kept points in input order, and the initial watermark.
        """
        kept: list[SurfacePoint] = []
        watermark = -math.inf

        for point in points:
            self.stats.total_points += 1
            watermark = max(watermark, point.z)

            if point.classification == HIGH_NOISE_CLASS:
                self.stats.noise_points += 1
                continue
            if self.classification is not None and point.classification != self.classification:
                self.stats.filtered_points += 1
                continue
            if self.grid is not None and not self.grid.contains(point.x, point.y, point.z):
                self.stats.outside_points += 1
                continue

            kept.append(SurfacePoint(point.x, point.y, point.z, self.variable.of(point)))

        if self.stats.noise_points:
            self.logger.info(f"Dropped {self.stats.noise_points} noise points")
        if self.stats.filtered_points:
            self.logger.info(
                f"Dropped {self.stats.filtered_points} points not in class {self.classification}"
            )
        if self.stats.outside_points:
            self.logger.info(f"Dropped {self.stats.outside_points} points outside the extent")

        return kept, watermark

    def place(
        self,
        tin: Triangulation,
        buffer: FreezeBuffer,
        point: SurfacePoint,
        watermark: float,
    ) -> tuple[InsertOutcome, float]:
        """Offer one point to the triangulation.

        Returns:
            The outcome and the updated watermark.
        """
        location = tin.locate(point.x, point.y)
        if not self.accepts(tin, location, point, watermark):
            return InsertOutcome.SKIPPED, watermark

        watermark = min(watermark, point.z)
        vertex = tin.insert(point.x, point.y, point.z, point.value, location)
        buffer.push(tin.out_edges(vertex))

        if location.kind == LocationKind.ON_VERTEX:
            return InsertOutcome.MERGED, watermark
        return InsertOutcome.INSERTED, watermark

    @staticmethod
    def accepts(
        tin: Triangulation,
        location: LocateResult,
        point: SurfacePoint,
        watermark: float,
    ) -> bool:
        """Decide whether a located point should be inserted."""
        kind = location.kind
        if kind == LocationKind.ON_FACE:
            # Fully frozen faces need no further refinement
            return not all(tin.is_constraint(e) for e in tin.face_edges(location.handle))
        elif kind == LocationKind.ON_VERTEX:
            return point.z - tin.elevation(location.handle) > watermark
        elif kind == LocationKind.ON_EDGE:
            return not tin.is_constraint(location.handle)
        elif kind in (LocationKind.OUTSIDE_HULL, LocationKind.NO_TRIANGULATION):
            return True
        raise ValueError(f"Unknown location kind: {kind}")
