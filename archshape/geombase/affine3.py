"""AffineTransform3 - rotation + translation acting on points, boxes and volumes.

Composition formula:
    parent * child:
        new_rot = parent.rot @ child.rot
        new_lin = parent.lin + parent.rot @ child.lin

So (A * B).transform_point(p) == A.transform_point(B.transform_point(p)):
the right operand is applied first.
"""

from __future__ import annotations

import math

import numpy
from scipy.spatial.transform import Rotation

from archshape.geombase.direction import Direction
from archshape.geombase.volume import AABB, CollisionVolume, Frame, volume_from_arrays

_AXES = {
    "x": numpy.array([1.0, 0.0, 0.0]),
    "y": numpy.array([0.0, 1.0, 0.0]),
    "z": numpy.array([0.0, 0.0, 1.0]),
}

CELL_CENTER = (0.5, 0.5, 0.5)


def _frozen(array: numpy.ndarray) -> numpy.ndarray:
    # -0.0 + 0.0 == +0.0, keeps tobytes() hashing consistent with ==
    array = array + 0.0
    array.setflags(write=False)
    return array


class AffineTransform3:
    """A 3D affine transform represented by a 3x3 rotation matrix and a translation vector."""

    __slots__ = ("rot", "lin")

    def __init__(self, rot: numpy.ndarray = None, lin: numpy.ndarray = None):
        if rot is None:
            rot = numpy.eye(3)
        if lin is None:
            lin = numpy.zeros(3)
        rot = numpy.array(rot, dtype=float)
        lin = numpy.array(lin, dtype=float).reshape(3)
        if rot.shape != (3, 3):
            raise ValueError("Rotation must be a 3x3 matrix.")
        self.rot = _frozen(rot)
        self.lin = _frozen(lin)

    # --- Factory methods ---

    @staticmethod
    def identity() -> "AffineTransform3":
        return AffineTransform3()

    @staticmethod
    def from_translation(vec) -> "AffineTransform3":
        """Create a translation transform."""
        return AffineTransform3(lin=numpy.asarray(vec, dtype=float))

    @staticmethod
    def translation(x: float, y: float, z: float) -> "AffineTransform3":
        return AffineTransform3(lin=numpy.array([x, y, z], dtype=float))

    @staticmethod
    def rotation(axis, angle: float) -> "AffineTransform3":
        """Create a free rotation around a given axis by a given angle (radians)."""
        axis = _AXES[axis] if isinstance(axis, str) else numpy.asarray(axis, dtype=float)
        axis = axis / numpy.linalg.norm(axis)
        return AffineTransform3(rot=Rotation.from_rotvec(axis * angle).as_matrix())

    @staticmethod
    def quarter_turns(axis: str, turns: int) -> "AffineTransform3":
        """
        Grid-aligned rotation by turns * 90 degrees around x, y or z.

        Matrix entries are exact integers so compositions stay exact.
        """
        angle = (turns % 4) * (math.pi / 2)
        rot = numpy.rint(Rotation.from_rotvec(_AXES[axis] * angle).as_matrix())
        return AffineTransform3(rot=rot)

    @staticmethod
    def about_point(transform: "AffineTransform3", point) -> "AffineTransform3":
        """Apply transform with point as the fixed centre: T(p) * transform * T(-p)."""
        p = numpy.asarray(point, dtype=float)
        return (
            AffineTransform3.from_translation(p)
            * transform
            * AffineTransform3.from_translation(-p)
        )

    @staticmethod
    def from_matrix(matrix: numpy.ndarray) -> "AffineTransform3":
        """Create from a 4x4 or 3x4 homogeneous matrix."""
        matrix = numpy.asarray(matrix, dtype=float)
        if matrix.shape not in ((4, 4), (3, 4)):
            raise ValueError("Expected a 4x4 or 3x4 matrix.")
        return AffineTransform3(rot=matrix[:3, :3], lin=matrix[:3, 3])

    # --- Algebra ---

    def __mul__(self, other: "AffineTransform3") -> "AffineTransform3":
        if not isinstance(other, AffineTransform3):
            raise TypeError("Can only multiply AffineTransform3 with AffineTransform3")
        return AffineTransform3(
            rot=self.rot @ other.rot,
            lin=self.lin + self.rot @ other.lin,
        )

    def __matmul__(self, other: "AffineTransform3") -> "AffineTransform3":
        return self * other

    def compose(self, other: "AffineTransform3") -> "AffineTransform3":
        """Apply other first, then self."""
        return self * other

    def translate(self, vec) -> "AffineTransform3":
        """self * T(vec): the translation happens first, in the local frame."""
        return self * AffineTransform3.from_translation(vec)

    def rotate(self, rotation) -> "AffineTransform3":
        """self * R, rotation given as AffineTransform3 or 3x3 matrix."""
        if not isinstance(rotation, AffineTransform3):
            rotation = AffineTransform3(rot=rotation)
        return self * rotation

    def inverse(self) -> "AffineTransform3":
        inv_rot = numpy.linalg.inv(self.rot)
        return AffineTransform3(rot=inv_rot, lin=-(inv_rot @ self.lin))

    # --- Application ---

    def transform_point(self, point) -> numpy.ndarray:
        return self.rot @ numpy.asarray(point, dtype=float) + self.lin

    def transform_points(self, points) -> numpy.ndarray:
        """Transform an (N, 3) array of points."""
        pts = numpy.asarray(points, dtype=float).reshape(-1, 3)
        return pts @ self.rot.T + self.lin

    def apply_direction(self, vector) -> numpy.ndarray:
        """Rotate a vector, ignoring translation."""
        return self.rot @ numpy.asarray(vector, dtype=float)

    def transform_face(self, direction: Direction) -> Direction:
        """Image of a grid face; requires a grid-aligned rotation."""
        return Direction.from_vector(self.apply_direction(direction.as_array()))

    def transform_box(self, box: AABB) -> AABB:
        """Enclosing box of the transformed corners (exact for grid rotations)."""
        return AABB.from_points(self.transform_points(box.corners()))

    def transform_volume(self, volume: CollisionVolume, frame: Frame = None) -> CollisionVolume:
        """
        Map every part of the volume. The result keeps the source frame
        unless another frame is given.
        """
        if frame is None:
            frame = volume.frame
        if not volume.boxes:
            return CollisionVolume.empty(frame)
        corners = numpy.stack([box.corners() for box in volume.boxes])  # (N, 8, 3)
        moved = corners @ self.rot.T + self.lin
        return volume_from_arrays(moved.min(axis=1), moved.max(axis=1), frame)

    def apply(self, target):
        """Dispatch on the argument: volume, box, direction or point."""
        if isinstance(target, CollisionVolume):
            return self.transform_volume(target)
        if isinstance(target, AABB):
            return self.transform_box(target)
        if isinstance(target, Direction):
            return self.transform_face(target)
        return self.transform_point(target)

    # --- Inspection ---

    @property
    def is_grid_aligned(self) -> bool:
        """True if the rotation only permutes and flips axes."""
        rounded = numpy.rint(self.rot)
        if not numpy.allclose(self.rot, rounded, atol=1e-9):
            return False
        return bool(numpy.all(numpy.abs(rounded).sum(axis=0) == 1))

    def as_matrix(self) -> numpy.ndarray:
        mat = numpy.eye(4)
        mat[:3, :3] = self.rot
        mat[:3, 3] = self.lin
        return mat

    def almost_equal(self, other: "AffineTransform3", tol: float = 1e-9) -> bool:
        return bool(
            numpy.allclose(self.rot, other.rot, atol=tol)
            and numpy.allclose(self.lin, other.lin, atol=tol)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, AffineTransform3):
            return NotImplemented
        return bool(numpy.array_equal(self.rot, other.rot) and numpy.array_equal(self.lin, other.lin))

    def __hash__(self) -> int:
        return hash((self.rot.tobytes(), self.lin.tobytes()))

    def __repr__(self):
        return f"AffineTransform3(rot={self.rot.tolist()}, lin={self.lin.tolist()})"


def cell_turn(axis: str, turns: int) -> AffineTransform3:
    """Quarter turns about the centre of the unit cell."""
    return AffineTransform3.about_point(AffineTransform3.quarter_turns(axis, turns), CELL_CENTER)
