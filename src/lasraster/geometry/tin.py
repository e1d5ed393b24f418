"""Arena-backed constrained Delaunay triangulation (TIN).

Vertices, half-edges and faces live in parallel lists and are addressed by
integer handles. A directed edge ``e`` has its twin at ``e ^ 1`` and its
undirected edge at ``e >> 1``. Face 0 is the unbounded outer face; the
outer half-edges form a single ring around the convex hull.

Handles are never invalidated: flips rotate an edge in place and splits
reuse the split edge and faces, so nothing is ever freed.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from lasraster.exceptions import InsertionError
from lasraster.geometry.predicates import incircle, orient2d

OUTER_FACE = 0
NO_EDGE = -1

# Coordinate range accepted by the predicates without overflow or underflow
MAX_ALLOWED_VALUE = 2.0 ** 201
MIN_ALLOWED_VALUE = 2.0 ** -142


class LocationKind(str, Enum):
    """Where a query position lies relative to the triangulation."""

    ON_FACE = "on_face"
    ON_EDGE = "on_edge"
    ON_VERTEX = "on_vertex"
    OUTSIDE_HULL = "outside_hull"
    NO_TRIANGULATION = "no_triangulation"


@dataclass(frozen=True)
class LocateResult:
    """Result of a point location query.

    ``handle`` is a face for ON_FACE, a directed edge for ON_EDGE, a vertex
    for ON_VERTEX, and a directed hull edge that sees the query position
    for OUTSIDE_HULL. It is unused for NO_TRIANGULATION.
    """

    kind: LocationKind
    handle: int = NO_EDGE


@dataclass(frozen=True)
class Vertex:
    """Snapshot of a triangulation vertex."""

    x: float  # Easting
    y: float  # Northing
    z: float  # Elevation
    value: float  # Rasterized variable


class Triangulation:
    """An incrementally built constrained Delaunay triangulation."""

    def __init__(self) -> None:
        # Vertices
        self._x: list[float] = []
        self._y: list[float] = []
        self._z: list[float] = []
        self._value: list[float] = []
        self._vertex_edge: list[int] = []

        # Half-edges
        self._origin: list[int] = []
        self._next: list[int] = []
        self._prev: list[int] = []
        self._face: list[int] = []

        # Undirected edges
        self._constraint: list[bool] = []

        # Faces
        self._face_edge: list[int] = [NO_EDGE]

        self._walk_face = NO_EDGE

    # -- size --

    @property
    def num_vertices(self) -> int:
        return len(self._x)

    @property
    def num_edges(self) -> int:
        """Number of undirected edges."""
        return len(self._constraint)

    @property
    def num_faces(self) -> int:
        """Number of inner (triangular) faces."""
        return len(self._face_edge) - 1

    @property
    def num_constraints(self) -> int:
        return sum(self._constraint)

    @property
    def has_faces(self) -> bool:
        return len(self._face_edge) > 1

    # -- accessors --

    def vertex(self, handle: int) -> Vertex:
        return Vertex(
            self._x[handle], self._y[handle], self._z[handle], self._value[handle]
        )

    def elevation(self, vertex: int) -> float:
        return self._z[vertex]

    def origin(self, edge: int) -> int:
        """Vertex the directed edge starts from."""
        return self._origin[edge]

    def destination(self, edge: int) -> int:
        """Vertex the directed edge points to."""
        return self._origin[edge ^ 1]

    def edge_vertices(self, edge: int) -> tuple[int, int]:
        return self._origin[edge], self._origin[edge ^ 1]

    def edge_face(self, edge: int) -> int:
        """Face to the left of the directed edge."""
        return self._face[edge]

    def edge_length(self, edge: int) -> float:
        a, b = self.edge_vertices(edge)
        return math.hypot(self._x[b] - self._x[a], self._y[b] - self._y[a])

    def is_constraint(self, edge: int) -> bool:
        return self._constraint[edge >> 1]

    def face_edges(self, face: int) -> tuple[int, int, int]:
        """The three directed edges of an inner face, counterclockwise."""
        e0 = self._face_edge[face]
        e1 = self._next[e0]
        return e0, e1, self._next[e1]

    def face_vertices(self, face: int) -> tuple[int, int, int]:
        e0, e1, e2 = self.face_edges(face)
        return self._origin[e0], self._origin[e1], self._origin[e2]

    def iter_faces(self) -> Iterator[int]:
        """Iterate over inner face handles."""
        return iter(range(1, len(self._face_edge)))

    def iter_edges(self) -> Iterator[int]:
        """Iterate over one directed edge per undirected edge."""
        return iter(range(0, len(self._origin), 2))

    def out_edges(self, vertex: int) -> Iterator[int]:
        """Iterate over the directed edges leaving a vertex."""
        start = self._vertex_edge[vertex]
        if start == NO_EDGE:
            return
        edge = start
        while True:
            yield edge
            edge = self._prev[edge] ^ 1
            if edge == start:
                break

    def hull_edges(self) -> Iterator[int]:
        """Iterate over the outer half-edges of the convex hull."""
        start = self._face_edge[OUTER_FACE]
        if start == NO_EDGE:
            return
        edge = start
        while True:
            yield edge
            edge = self._next[edge]
            if edge == start:
                break

    # -- constraints --

    def add_constraint(self, edge: int) -> bool:
        """Mark an existing edge as a constraint.

        Returns:
            True if the edge was not already a constraint.
        """
        if self._constraint[edge >> 1]:
            return False
        self._constraint[edge >> 1] = True
        return True

    # -- location --

    def locate(self, x: float, y: float) -> LocateResult:
        """Locate a planar position in the triangulation.

        Walks from the most recently visited face towards the position. The
        edge to cross is chosen in rotating order so the walk cannot cycle
        forever in a constrained (non-Delaunay) mesh; a linear scan is used
        as a last resort.
        """
        if not self.has_faces:
            for v in range(self.num_vertices):
                if self._x[v] == x and self._y[v] == y:
                    return LocateResult(LocationKind.ON_VERTEX, v)
            return LocateResult(LocationKind.NO_TRIANGULATION)

        face = self._walk_face
        for step in range(len(self._face_edge) + 3):
            edges = self.face_edges(face)
            orients = [self._orient_edge(e, x, y) for e in edges]

            crossed = NO_EDGE
            for k in range(3):
                i = (step + k) % 3
                if orients[i] < 0:
                    crossed = edges[i]
                    break

            if crossed == NO_EDGE:
                self._walk_face = face
                return self._classify(face, edges, orients)

            neighbor = self._face[crossed ^ 1]
            if neighbor == OUTER_FACE:
                self._walk_face = face
                return LocateResult(LocationKind.OUTSIDE_HULL, crossed)
            face = neighbor

        return self._locate_linear(x, y)

    def _locate_linear(self, x: float, y: float) -> LocateResult:
        for face in self.iter_faces():
            edges = self.face_edges(face)
            orients = [self._orient_edge(e, x, y) for e in edges]
            if min(orients) >= 0:
                self._walk_face = face
                return self._classify(face, edges, orients)

        for outer in self.hull_edges():
            if self._orient_edge(outer, x, y) > 0:
                return LocateResult(LocationKind.OUTSIDE_HULL, outer ^ 1)

        # Unreachable for a valid triangulation
        return LocateResult(LocationKind.NO_TRIANGULATION)

    def _classify(
        self, face: int, edges: tuple[int, int, int], orients: list[float]
    ) -> LocateResult:
        zeros = [i for i in range(3) if orients[i] == 0]
        if not zeros:
            return LocateResult(LocationKind.ON_FACE, face)
        if len(zeros) == 1:
            return LocateResult(LocationKind.ON_EDGE, edges[zeros[0]])

        # On two edges: the shared corner
        if zeros == [0, 2]:
            corner = edges[0]
        else:
            corner = edges[zeros[1]]
        return LocateResult(LocationKind.ON_VERTEX, self._origin[corner])

    def _orient_edge(self, edge: int, x: float, y: float) -> float:
        a = self._origin[edge]
        b = self._origin[edge ^ 1]
        return orient2d(self._x[a], self._y[a], self._x[b], self._y[b], x, y)

    # -- insertion --

    def insert(
        self,
        x: float,
        y: float,
        z: float,
        value: float,
        location: Optional[LocateResult] = None,
    ) -> int:
        """Insert a vertex and restore the constrained Delaunay property.

        Inserting at the position of an existing vertex replaces that
        vertex's elevation and value.

        Args:
            x, y: Planar position.
            z: Elevation.
            value: Rasterized variable carried by the vertex.
            location: Result of ``locate(x, y)`` if already known.

        Returns:
            Handle of the inserted (or merged) vertex.

        Raises:
            InsertionError: If the position cannot be triangulated.
        """
        self._check_position(x, y)
        if location is None:
            location = self.locate(x, y)

        kind = location.kind
        if kind == LocationKind.ON_VERTEX:
            vertex = location.handle
            self._z[vertex] = z
            self._value[vertex] = value
            return vertex
        elif kind == LocationKind.ON_FACE:
            vertex = self._split_face(location.handle, x, y, z, value)
        elif kind == LocationKind.ON_EDGE:
            vertex = self._split_edge(location.handle, x, y, z, value)
        elif kind == LocationKind.OUTSIDE_HULL:
            vertex = self._extend_hull(location.handle, x, y, z, value)
        elif kind == LocationKind.NO_TRIANGULATION:
            vertex = self._insert_degenerate(x, y, z, value)
        else:
            raise ValueError(f"Unknown location kind: {kind}")

        if self.has_faces:
            edge = self._vertex_edge[vertex]
            face = self._face[edge]
            self._walk_face = face if face != OUTER_FACE else self._face[edge ^ 1]
        return vertex

    @staticmethod
    def _check_position(x: float, y: float) -> None:
        for value in (x, y):
            if math.isnan(value):
                raise InsertionError("Cannot insert a point with a NaN coordinate")
            if math.isinf(value):
                raise InsertionError("Cannot insert a point with an infinite coordinate")
            magnitude = abs(value)
            if magnitude > MAX_ALLOWED_VALUE:
                raise InsertionError(f"Coordinate too large to triangulate: {value}")
            if 0.0 < magnitude < MIN_ALLOWED_VALUE:
                raise InsertionError(f"Coordinate too small to triangulate: {value}")

    def _new_vertex(self, x: float, y: float, z: float, value: float) -> int:
        self._x.append(x)
        self._y.append(y)
        self._z.append(z)
        self._value.append(value)
        self._vertex_edge.append(NO_EDGE)
        return len(self._x) - 1

    def _new_edge_pair(self, a: int, b: int) -> int:
        """Create the directed edge a->b and its twin b->a."""
        edge = len(self._origin)
        self._origin.extend((a, b))
        self._next.extend((NO_EDGE, NO_EDGE))
        self._prev.extend((NO_EDGE, NO_EDGE))
        self._face.extend((OUTER_FACE, OUTER_FACE))
        self._constraint.append(False)
        return edge

    def _link(self, first: int, second: int) -> None:
        self._next[first] = second
        self._prev[second] = first

    def _set_face(self, face: int, e0: int, e1: int, e2: int) -> None:
        self._link(e0, e1)
        self._link(e1, e2)
        self._link(e2, e0)
        self._face[e0] = self._face[e1] = self._face[e2] = face
        self._face_edge[face] = e0

    def _new_face(self, e0: int, e1: int, e2: int) -> int:
        face = len(self._face_edge)
        self._face_edge.append(e0)
        self._set_face(face, e0, e1, e2)
        return face

    def _insert_degenerate(self, x: float, y: float, z: float, value: float) -> int:
        """Insert while all vertices are still collinear (no faces yet)."""
        vertex = self._new_vertex(x, y, z, value)
        if vertex < 2:
            return vertex

        ax, ay = self._x[0], self._y[0]
        bx, by = self._x[1], self._y[1]
        if orient2d(ax, ay, bx, by, x, y) != 0:
            self._build_fan(vertex)
        return vertex

    def _build_fan(self, apex: int) -> None:
        """Triangulate a line of collinear vertices against a new apex."""
        ax, ay = self._x[0], self._y[0]
        dx, dy = self._x[1] - ax, self._y[1] - ay
        line = sorted(
            range(apex),
            key=lambda v: (self._x[v] - ax) * dx + (self._y[v] - ay) * dy,
        )
        first, last = line[0], line[-1]
        if orient2d(
            self._x[first], self._y[first],
            self._x[last], self._y[last],
            self._x[apex], self._y[apex],
        ) < 0:
            line.reverse()

        spokes = [self._new_edge_pair(v, apex) for v in line]
        chain = [self._new_edge_pair(line[i], line[i + 1]) for i in range(len(line) - 1)]
        for i, edge in enumerate(chain):
            self._new_face(edge, spokes[i + 1], spokes[i] ^ 1)

        ring = [spokes[0], spokes[-1] ^ 1] + [edge ^ 1 for edge in reversed(chain)]
        for i, edge in enumerate(ring):
            self._link(edge, ring[(i + 1) % len(ring)])
            self._face[edge] = OUTER_FACE
        self._face_edge[OUTER_FACE] = spokes[0]

        for v, spoke in zip(line, spokes):
            self._vertex_edge[v] = spoke
        self._vertex_edge[apex] = spokes[0] ^ 1
        self._walk_face = 1

    def _split_face(self, face: int, x: float, y: float, z: float, value: float) -> int:
        e0, e1, e2 = self.face_edges(face)
        a, b, c = self._origin[e0], self._origin[e1], self._origin[e2]
        vertex = self._new_vertex(x, y, z, value)

        ha = self._new_edge_pair(a, vertex)
        hb = self._new_edge_pair(b, vertex)
        hc = self._new_edge_pair(c, vertex)
        self._set_face(face, e0, hb, ha ^ 1)
        self._new_face(e1, hc, hb ^ 1)
        self._new_face(e2, ha, hc ^ 1)
        self._vertex_edge[vertex] = ha ^ 1

        self._legalize([e0, e1, e2])
        return vertex

    def _split_edge(self, edge: int, x: float, y: float, z: float, value: float) -> int:
        if self._face[edge] == OUTER_FACE:
            edge ^= 1
        twin = edge ^ 1
        u, v = self._origin[edge], self._origin[twin]
        n1, p1 = self._next[edge], self._prev[edge]
        c = self._origin[p1]
        vertex = self._new_vertex(x, y, z, value)

        # edge becomes u->vertex, twin becomes vertex->u, upper half is vertex->v
        upper = self._new_edge_pair(vertex, v)
        to_c = self._new_edge_pair(vertex, c)
        self._constraint[upper >> 1] = self._constraint[edge >> 1]

        if self._face[twin] != OUTER_FACE:
            n2, p2 = self._next[twin], self._prev[twin]
            d = self._origin[p2]
            to_d = self._new_edge_pair(vertex, d)
            self._origin[twin] = vertex

            self._set_face(self._face[edge], edge, to_c, p1)
            self._new_face(upper, n1, to_c ^ 1)
            self._set_face(self._face[twin], twin, n2, to_d ^ 1)
            self._new_face(upper ^ 1, to_d, p2)
            flips = [p1, n1, n2, p2]
        else:
            before, after = self._prev[twin], self._next[twin]
            self._origin[twin] = vertex

            self._set_face(self._face[edge], edge, to_c, p1)
            self._new_face(upper, n1, to_c ^ 1)

            self._link(before, upper ^ 1)
            self._link(upper ^ 1, twin)
            self._link(twin, after)
            self._face[upper ^ 1] = OUTER_FACE
            self._face_edge[OUTER_FACE] = twin
            flips = [p1, n1]

        self._vertex_edge[vertex] = upper
        self._vertex_edge[u] = edge
        self._vertex_edge[v] = n1

        self._legalize(flips)
        return vertex

    def _extend_hull(self, hull_edge: int, x: float, y: float, z: float, value: float) -> int:
        """Connect a position outside the hull to every hull edge it sees."""

        def visible(outer: int) -> bool:
            return self._orient_edge(outer, x, y) > 0

        outer = hull_edge ^ 1
        start = end = outer
        while visible(self._prev[start]) and self._prev[start] != end:
            start = self._prev[start]
        while visible(self._next[end]) and self._next[end] != start:
            end = self._next[end]
        before, after = self._prev[start], self._next[end]

        chain = [start]
        while chain[-1] != end:
            chain.append(self._next[chain[-1]])
        corners = [self._origin[e] for e in chain] + [self._origin[end ^ 1]]

        vertex = self._new_vertex(x, y, z, value)
        spokes = [self._new_edge_pair(corner, vertex) for corner in corners]
        for i, edge in enumerate(chain):
            self._new_face(edge, spokes[i + 1], spokes[i] ^ 1)

        self._link(before, spokes[0])
        self._link(spokes[0], spokes[-1] ^ 1)
        self._link(spokes[-1] ^ 1, after)
        self._face[spokes[0]] = OUTER_FACE
        self._face[spokes[-1] ^ 1] = OUTER_FACE
        self._face_edge[OUTER_FACE] = spokes[0]
        self._vertex_edge[vertex] = spokes[0] ^ 1

        self._legalize(chain)
        return vertex

    # -- Delaunay restoration --

    def _legalize(self, edges: list[int]) -> None:
        """Flip non-constraint edges opposite a new vertex until locally Delaunay.

        Every edge on the stack lies in a face whose third corner is the new
        vertex.
        """
        stack = list(edges)
        while stack:
            edge = stack.pop()
            if self._constraint[edge >> 1]:
                continue
            twin = edge ^ 1
            if self._face[twin] == OUTER_FACE:
                continue

            a, b = self._origin[edge], self._origin[twin]
            c = self._origin[self._prev[edge]]
            d = self._origin[self._prev[twin]]
            if incircle(
                self._x[a], self._y[a],
                self._x[b], self._y[b],
                self._x[c], self._y[c],
                self._x[d], self._y[d],
            ) > 0:
                stack.extend(self._flip(edge))

    def _flip(self, edge: int) -> tuple[int, int]:
        """Flip the diagonal of the quad around an edge.

        Returns:
            The two edges of the quad that are now opposite the corner which
            was opposite ``edge`` before the flip.
        """
        twin = edge ^ 1
        e1, e2 = self._next[edge], self._prev[edge]
        t1, t2 = self._next[twin], self._prev[twin]
        a, b = self._origin[edge], self._origin[twin]
        c, d = self._origin[e2], self._origin[t2]

        self._origin[edge] = d
        self._origin[twin] = c
        self._set_face(self._face[edge], t1, edge, e2)
        self._set_face(self._face[twin], t2, e1, twin)

        self._vertex_edge[a] = t1
        self._vertex_edge[b] = e1
        self._vertex_edge[c] = twin
        self._vertex_edge[d] = edge
        return t1, t2

    # -- interpolation --

    def interpolate(self, x: float, y: float) -> Optional[float]:
        """Barycentric interpolation of vertex values at a planar position.

        Returns:
            The interpolated value, or None outside the convex hull.
        """
        location = self.locate(x, y)
        kind = location.kind
        if kind == LocationKind.ON_VERTEX:
            return self._value[location.handle]
        elif kind == LocationKind.ON_EDGE:
            a, b = self.edge_vertices(location.handle)
            dx, dy = self._x[b] - self._x[a], self._y[b] - self._y[a]
            t = ((x - self._x[a]) * dx + (y - self._y[a]) * dy) / (dx * dx + dy * dy)
            return (1.0 - t) * self._value[a] + t * self._value[b]
        elif kind == LocationKind.ON_FACE:
            a, b, c = self.face_vertices(location.handle)
            return self._barycentric(a, b, c, x, y)
        elif kind in (LocationKind.OUTSIDE_HULL, LocationKind.NO_TRIANGULATION):
            return None
        raise ValueError(f"Unknown location kind: {kind}")

    def _barycentric(self, a: int, b: int, c: int, x: float, y: float) -> float:
        ax, ay = self._x[a], self._y[a]
        bx, by = self._x[b], self._y[b]
        cx, cy = self._x[c], self._y[c]
        area = (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)
        wa = ((bx - x) * (cy - y) - (by - y) * (cx - x)) / area
        wb = ((cx - x) * (ay - y) - (cy - y) * (ax - x)) / area
        wc = 1.0 - wa - wb
        return wa * self._value[a] + wb * self._value[b] + wc * self._value[c]
