"""Closed-outline geometry for pattern pieces.

Outlines are ordered sequences of :class:`PatternPoint` forming an implicit
closed polygon: the last point connects back to the first. Every function in
this module is pure and returns new values.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np

from .options import DEFAULT_OFFSET_OPTIONS, OffsetOptions

logger = logging.getLogger(__name__)

__all__ = [
    "OutlineFrame",
    "PatternPoint",
    "Point",
    "PointType",
    "as_pattern_point",
    "as_point",
    "mirror_point",
    "offset_polygon",
    "outline_centroid",
    "outline_point_frame",
    "perimeter_length",
    "point_at_fraction",
    "polygon_area",
]


class PointType(str, Enum):
    """Rendering hint attached to an outline vertex."""

    CORNER = "corner"
    CURVE = "curve"
    CONTROL = "control"
    SMOOTH = "smooth"
    SYMMETRIC = "symmetric"


@dataclass(frozen=True, slots=True)
class Point:
    """Plain 2D coordinate."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)


@dataclass(frozen=True, slots=True)
class PatternPoint:
    """Outline vertex with an optional label and Bezier control handles."""

    x: float
    y: float
    type: PointType = PointType.CORNER
    label: str | None = None
    curve_control1: Point | None = None
    curve_control2: Point | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "type", PointType(self.type))
        for name in ("curve_control1", "curve_control2"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Point):
                object.__setattr__(self, name, as_point(value))

    def moved_to(self, x: float, y: float) -> "PatternPoint":
        """Return a copy at ``(x, y)`` with control handles shifted alongside."""

        x = float(x)
        y = float(y)
        dx = x - self.x
        dy = y - self.y
        return PatternPoint(
            x=x,
            y=y,
            type=self.type,
            label=self.label,
            curve_control1=None if self.curve_control1 is None else self.curve_control1.translated(dx, dy),
            curve_control2=None if self.curve_control2 is None else self.curve_control2.translated(dx, dy),
        )

    def translated(self, dx: float, dy: float) -> "PatternPoint":
        return PatternPoint(
            x=self.x + dx,
            y=self.y + dy,
            type=self.type,
            label=self.label,
            curve_control1=None if self.curve_control1 is None else self.curve_control1.translated(dx, dy),
            curve_control2=None if self.curve_control2 is None else self.curve_control2.translated(dx, dy),
        )


@dataclass(frozen=True, slots=True)
class OutlineFrame:
    """Position on an outline with its unit tangent and unit outward normal."""

    position: Point
    tangent: tuple[float, float]
    normal: tuple[float, float]


def as_point(value: Any) -> Point:
    """Coerce a ``Point``, ``PatternPoint``, mapping or ``(x, y)`` pair."""

    if isinstance(value, Point):
        return value
    if isinstance(value, PatternPoint):
        return Point(value.x, value.y)
    if isinstance(value, Mapping):
        return Point(float(value["x"]), float(value["y"]))
    x, y = value[:2]
    return Point(float(x), float(y))


def as_pattern_point(value: Any, point_type: PointType | str = PointType.CORNER) -> PatternPoint:
    """Coerce *value* to a :class:`PatternPoint`, keeping existing metadata."""

    if isinstance(value, PatternPoint):
        return value
    if isinstance(value, Mapping):
        return PatternPoint(
            x=float(value["x"]),
            y=float(value["y"]),
            type=value.get("type", point_type),
            label=value.get("label"),
            curve_control1=value.get("curve_control1"),
            curve_control2=value.get("curve_control2"),
        )
    point = as_point(value)
    return PatternPoint(point.x, point.y, point_type)


def _coordinates(outline: Sequence[Any]) -> np.ndarray:
    points = [as_point(point) for point in outline]
    return np.array([(point.x, point.y) for point in points], dtype=float).reshape(-1, 2)


def _edge_lengths(coords: np.ndarray) -> np.ndarray:
    edges = np.roll(coords, -1, axis=0) - coords
    return np.hypot(edges[:, 0], edges[:, 1])


def polygon_area(outline: Sequence[Any]) -> float:
    """Signed shoelace area; positive for counter-clockwise winding."""

    if len(outline) < 3:
        return 0.0
    coords = _coordinates(outline)
    following = np.roll(coords, -1, axis=0)
    cross = coords[:, 0] * following[:, 1] - following[:, 0] * coords[:, 1]
    return float(cross.sum() * 0.5)


def perimeter_length(outline: Sequence[Any]) -> float:
    """Closed perimeter length, including the edge from the last point back to the first."""

    if len(outline) < 2:
        return 0.0
    return float(_edge_lengths(_coordinates(outline)).sum())


def outline_centroid(outline: Sequence[Any]) -> Point:
    """Vertex average of *outline*; the origin for an empty outline."""

    if not outline:
        return Point(0.0, 0.0)
    coords = _coordinates(outline)
    cx, cy = coords.mean(axis=0)
    return Point(float(cx), float(cy))


def _locate(coords: np.ndarray, fraction: float, epsilon: float) -> tuple[int, float, np.ndarray]:
    lengths = _edge_lengths(coords)
    total = float(lengths.sum())
    if total <= epsilon:
        return 0, 0.0, lengths
    target = fraction * total
    cumulative = np.cumsum(lengths)
    index = min(int(np.searchsorted(cumulative, target, side="left")), len(coords) - 1)
    start = float(cumulative[index] - lengths[index])
    length = float(lengths[index])
    ratio = (target - start) / length if length > epsilon else 0.0
    return index, min(max(ratio, 0.0), 1.0), lengths


def point_at_fraction(outline: Sequence[Any], t: float) -> Point | None:
    """Walk the closed perimeter to arc-length fraction *t* (clamped to ``[0, 1]``).

    ``t = 0`` and ``t = 1`` both return the first vertex. Returns ``None`` when
    the outline has fewer than two points.
    """

    if len(outline) < 2:
        return None
    t = min(max(float(t), 0.0), 1.0)
    first = as_point(outline[0])
    if t <= 0.0 or t >= 1.0:
        return first
    coords = _coordinates(outline)
    index, ratio, _ = _locate(coords, t, DEFAULT_OFFSET_OPTIONS.epsilon)
    start = coords[index]
    end = coords[(index + 1) % len(coords)]
    x, y = start + (end - start) * ratio
    return Point(float(x), float(y))


def outline_point_frame(outline: Sequence[Any], t: float) -> OutlineFrame | None:
    """Return the point at fraction *t* with the tangent and outward normal of its edge."""

    position = point_at_fraction(outline, t)
    if position is None:
        return None
    epsilon = DEFAULT_OFFSET_OPTIONS.epsilon
    coords = _coordinates(outline)
    clamped = min(max(float(t), 0.0), 1.0)
    index, _, lengths = _locate(coords, 0.0 if clamped >= 1.0 else clamped, epsilon)
    count = len(coords)
    # Skip zero-length edges so the frame follows the first real edge.
    for step in range(count):
        candidate = (index + step) % count
        if lengths[candidate] > epsilon:
            index = candidate
            break
    else:
        return OutlineFrame(position=position, tangent=(1.0, 0.0), normal=(0.0, -1.0))
    edge = coords[(index + 1) % count] - coords[index]
    tx, ty = edge / lengths[index]
    orientation = 1.0 if polygon_area(outline) >= 0.0 else -1.0
    return OutlineFrame(
        position=position,
        tangent=(float(tx), float(ty)),
        normal=(float(orientation * ty), float(-orientation * tx)),
    )


def _line_intersection(
    point_a: np.ndarray,
    direction_a: np.ndarray,
    point_b: np.ndarray,
    direction_b: np.ndarray,
) -> np.ndarray | None:
    det = direction_a[0] * direction_b[1] - direction_a[1] * direction_b[0]
    if math.isclose(det, 0.0, abs_tol=1e-12):
        return None
    diff = point_b - point_a
    t = (diff[0] * direction_b[1] - diff[1] * direction_b[0]) / det
    return point_a + direction_a * t


def offset_polygon(
    outline: Sequence[Any],
    distance: float,
    *,
    options: OffsetOptions | None = None,
) -> list[PatternPoint]:
    """Miter-join offset of a closed outline.

    Each edge moves by *distance* along its outward normal and every vertex is
    placed at the intersection of its two adjacent offset edges. Positive
    distances expand the outline, negative ones shrink it, zero copies it.
    Where adjacent offset edges are parallel or meet beyond
    ``options.miter_limit * |distance|`` the vertex is instead translated along
    the averaged normal. The result keeps the input point count; tight concave
    corners may self-intersect.
    """

    options = options or DEFAULT_OFFSET_OPTIONS
    points = [as_pattern_point(point) for point in outline]
    distance = float(distance)
    if distance == 0.0 or len(points) < 3:
        if distance != 0.0:
            logger.debug("Outline has %d points; offset returns an unchanged copy.", len(points))
        return list(points)

    epsilon = options.epsilon
    coords = _coordinates(points)
    orientation = 1.0 if polygon_area(points) >= 0.0 else -1.0

    edges_next = np.roll(coords, -1, axis=0) - coords
    edges_prev = np.roll(edges_next, 1, axis=0)
    lengths_next = np.hypot(edges_next[:, 0], edges_next[:, 1])
    lengths_prev = np.roll(lengths_next, 1)
    normals_next = orientation * np.column_stack((edges_next[:, 1], -edges_next[:, 0]))
    normals_next = np.divide(
        normals_next,
        lengths_next[:, None],
        out=np.zeros_like(normals_next),
        where=lengths_next[:, None] > epsilon,
    )
    normals_prev = np.roll(normals_next, 1, axis=0)

    miter_limit = options.miter_limit * abs(distance)
    result: list[PatternPoint] = []
    for idx, point in enumerate(points):
        current = coords[idx]
        has_prev = lengths_prev[idx] > epsilon
        has_next = lengths_next[idx] > epsilon
        if not has_prev and not has_next:
            result.append(point)
            continue
        if not has_prev or not has_next:
            normal = normals_next[idx] if has_next else normals_prev[idx]
            target = current + normal * distance
        else:
            target = _line_intersection(
                current + normals_prev[idx] * distance,
                edges_prev[idx],
                current + normals_next[idx] * distance,
                edges_next[idx],
            )
            if target is None or float(np.hypot(*(target - current))) > miter_limit:
                average = normals_prev[idx] + normals_next[idx]
                magnitude = float(np.hypot(*average))
                if magnitude <= epsilon:
                    average, magnitude = normals_prev[idx], 1.0
                logger.debug("Offset vertex %d falls back to the averaged normal.", idx)
                target = current + average / magnitude * distance
        result.append(point.moved_to(float(target[0]), float(target[1])))
    return result


def mirror_point(point: Any, axis_start: Any, axis_end: Any) -> PatternPoint:
    """Reflect *point* across the line through *axis_start* and *axis_end*."""

    source = as_pattern_point(point)
    start = as_point(axis_start)
    end = as_point(axis_end)
    ax = end.x - start.x
    ay = end.y - start.y
    length = math.hypot(ax, ay)
    if length <= DEFAULT_OFFSET_OPTIONS.epsilon:
        return source
    nx = ax / length
    ny = ay / length
    dot = (source.x - start.x) * nx + (source.y - start.y) * ny
    x = 2.0 * (start.x + dot * nx) - source.x
    y = 2.0 * (start.y + dot * ny) - source.y

    def _reflect(control: Point | None) -> Point | None:
        if control is None:
            return None
        reflected = mirror_point(control, start, end)
        return Point(reflected.x, reflected.y)

    return PatternPoint(
        x=x,
        y=y,
        type=source.type,
        label=source.label,
        curve_control1=_reflect(source.curve_control1),
        curve_control2=_reflect(source.curve_control2),
    )
