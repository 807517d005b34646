"""Axis-aligned boxes and collision volumes (unions of boxes)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

import numpy as np

from archshape.geombase.direction import Direction

Vec3 = tuple[float, float, float]


def _vec3(value) -> Vec3:
    x, y, z = (float(c) for c in value)
    return (x, y, z)


class AABB:
    """Immutable axis-aligned bounding box."""

    __slots__ = ("_min", "_max")

    def __init__(self, min_corner, max_corner):
        lo = _vec3(min_corner)
        hi = _vec3(max_corner)
        if any(a > b for a, b in zip(lo, hi)):
            raise ValueError(f"AABB min {lo} exceeds max {hi}")
        self._min = lo
        self._max = hi

    @property
    def min(self) -> Vec3:
        return self._min

    @property
    def max(self) -> Vec3:
        return self._max

    @property
    def size(self) -> Vec3:
        return _vec3(b - a for a, b in zip(self._min, self._max))

    @property
    def center(self) -> Vec3:
        return _vec3((a + b) * 0.5 for a, b in zip(self._min, self._max))

    @property
    def volume(self) -> float:
        sx, sy, sz = self.size
        return sx * sy * sz

    @property
    def is_degenerate(self) -> bool:
        """True if the box has zero extent along some axis."""
        return self.volume <= 0.0

    @staticmethod
    def unit() -> "AABB":
        return AABB((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))

    @staticmethod
    def from_points(points) -> "AABB":
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        if len(pts) == 0:
            raise ValueError("AABB.from_points needs at least one point")
        return AABB(pts.min(axis=0), pts.max(axis=0))

    def corners(self) -> np.ndarray:
        """8 corners as (8, 3) array."""
        (x0, y0, z0), (x1, y1, z1) = self._min, self._max
        return np.array([
            [x0, y0, z0], [x1, y0, z0], [x0, y1, z0], [x1, y1, z0],
            [x0, y0, z1], [x1, y0, z1], [x0, y1, z1], [x1, y1, z1],
        ], dtype=float)

    def offset(self, delta) -> "AABB":
        d = _vec3(delta)
        return AABB(
            [a + b for a, b in zip(self._min, d)],
            [a + b for a, b in zip(self._max, d)],
        )

    def merge(self, other: "AABB") -> "AABB":
        return AABB(
            [min(a, b) for a, b in zip(self._min, other._min)],
            [max(a, b) for a, b in zip(self._max, other._max)],
        )

    def intersects(self, other: "AABB") -> bool:
        """Overlap with positive volume (touching faces do not count)."""
        return all(
            a0 < b1 and b0 < a1
            for a0, a1, b0, b1 in zip(self._min, self._max, other._min, other._max)
        )

    def contains(self, point) -> bool:
        p = _vec3(point)
        return all(a <= c <= b for a, c, b in zip(self._min, p, self._max))

    def __eq__(self, other) -> bool:
        if not isinstance(other, AABB):
            return NotImplemented
        return self._min == other._min and self._max == other._max

    def __hash__(self) -> int:
        return hash((self._min, self._max))

    def __repr__(self) -> str:
        return f"AABB(min={self._min}, max={self._max})"


class Frame(Enum):
    """Reference frame a collision volume is expressed in."""

    LOCAL = "local"
    GLOBAL = "global"


@dataclass(frozen=True)
class RayHit:
    """Nearest intersection of a segment with a collision volume."""

    box_index: int
    distance: float
    point: Vec3
    face: Direction


class CollisionVolume:
    """
    Immutable union of axis-aligned boxes in a known reference frame.

    Operations never mutate a volume; they return a new one.
    """

    __slots__ = ("_boxes", "_frame")

    def __init__(self, boxes: Iterable[AABB] = (), frame: Frame = Frame.LOCAL):
        self._boxes = tuple(boxes)
        self._frame = frame

    @staticmethod
    def empty(frame: Frame = Frame.LOCAL) -> "CollisionVolume":
        return CollisionVolume((), frame)

    @staticmethod
    def full_cube(frame: Frame = Frame.LOCAL, origin=(0.0, 0.0, 0.0)) -> "CollisionVolume":
        """Unit cell box with its minimum corner at origin."""
        return CollisionVolume((AABB.unit().offset(origin),), frame)

    @property
    def boxes(self) -> tuple[AABB, ...]:
        return self._boxes

    @property
    def frame(self) -> Frame:
        return self._frame

    @property
    def is_empty(self) -> bool:
        """True if no box encloses positive volume."""
        return all(box.is_degenerate for box in self._boxes)

    def __len__(self) -> int:
        return len(self._boxes)

    def __iter__(self) -> Iterator[AABB]:
        return iter(self._boxes)

    def bounds(self) -> Optional[AABB]:
        """Enclosing box of all parts, None for an empty volume."""
        if not self._boxes:
            return None
        result = self._boxes[0]
        for box in self._boxes[1:]:
            result = result.merge(box)
        return result

    def total_volume(self) -> float:
        """Sum of part volumes (parts produced by the voxelizer never overlap)."""
        return sum(box.volume for box in self._boxes)

    def offset(self, delta) -> "CollisionVolume":
        return CollisionVolume((box.offset(delta) for box in self._boxes), self._frame)

    def union(self, other: "CollisionVolume") -> "CollisionVolume":
        if other._frame is not self._frame:
            raise ValueError(
                f"Cannot unite {self._frame.value} and {other._frame.value} volumes"
            )
        return CollisionVolume(self._boxes + other._boxes, self._frame)

    def contains(self, point) -> bool:
        return any(box.contains(point) for box in self._boxes)

    def as_array(self) -> np.ndarray:
        """(N, 2, 3) array of [min, max] corners."""
        if not self._boxes:
            return np.zeros((0, 2, 3), dtype=float)
        return np.array([[box.min, box.max] for box in self._boxes], dtype=float)

    def raycast(self, start, end) -> Optional[RayHit]:
        """
        Nearest hit of the segment start→end against the parts.

        Uses the slab method per box. Returns None when nothing is hit.
        """
        p0 = np.asarray(start, dtype=float)
        p1 = np.asarray(end, dtype=float)
        direction = p1 - p0
        length = float(np.linalg.norm(direction))
        if length == 0.0:
            return None

        best: Optional[RayHit] = None
        for index, box in enumerate(self._boxes):
            hit = _segment_box(p0, direction, np.array(box.min), np.array(box.max))
            if hit is None:
                continue
            t, axis = hit
            distance = t * length
            if best is None or distance < best.distance:
                sign = -1 if direction[axis] > 0 else 1
                face_vec = [0, 0, 0]
                face_vec[axis] = sign
                point = p0 + direction * t
                best = RayHit(index, distance, _vec3(point), Direction(tuple(face_vec)))
        return best

    def __eq__(self, other) -> bool:
        if not isinstance(other, CollisionVolume):
            return NotImplemented
        return self._frame is other._frame and self._boxes == other._boxes

    def __hash__(self) -> int:
        return hash((self._frame, self._boxes))

    def __repr__(self) -> str:
        return f"CollisionVolume({self._frame.value}, {list(self._boxes)})"


def _segment_box(origin: np.ndarray, direction: np.ndarray, lo: np.ndarray, hi: np.ndarray):
    """Entry parameter t in [0, 1] and entry axis, or None."""
    t_enter = 0.0
    t_exit = 1.0
    enter_axis = 0
    for axis in range(3):
        d = direction[axis]
        if abs(d) < 1e-12:
            if origin[axis] < lo[axis] or origin[axis] > hi[axis]:
                return None
            continue
        t0 = (lo[axis] - origin[axis]) / d
        t1 = (hi[axis] - origin[axis]) / d
        if t0 > t1:
            t0, t1 = t1, t0
        if t0 > t_enter:
            t_enter = t0
            enter_axis = axis
        t_exit = min(t_exit, t1)
        if t_enter > t_exit:
            return None
    return t_enter, enter_axis


def volume_from_arrays(mins: Sequence, maxs: Sequence, frame: Frame) -> CollisionVolume:
    """Build a volume from parallel (N, 3) min/max arrays."""
    return CollisionVolume((AABB(lo, hi) for lo, hi in zip(mins, maxs)), frame)
