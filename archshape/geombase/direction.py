"""Grid face directions. Y is up, north is -Z, east is +X."""

from __future__ import annotations

from enum import Enum

import numpy as np


class Direction(Enum):
    DOWN = (0, -1, 0)
    UP = (0, 1, 0)
    NORTH = (0, 0, -1)
    SOUTH = (0, 0, 1)
    WEST = (-1, 0, 0)
    EAST = (1, 0, 0)

    @property
    def vector(self) -> tuple[int, int, int]:
        return self.value

    def as_array(self) -> np.ndarray:
        return np.array(self.value, dtype=float)

    @property
    def axis(self) -> str:
        """Axis name: "x", "y" or "z"."""
        return "xyz"[self.axis_index]

    @property
    def axis_index(self) -> int:
        return next(i for i, c in enumerate(self.value) if c != 0)

    @property
    def sign(self) -> int:
        return self.value[self.axis_index]

    @property
    def is_horizontal(self) -> bool:
        return self.value[1] == 0

    @property
    def opposite(self) -> "Direction":
        x, y, z = self.value
        return Direction((-x, -y, -z))

    @property
    def label(self) -> str:
        return self.name.lower()

    @staticmethod
    def from_vector(vec, tol: float = 1e-6) -> "Direction":
        """Direction matching a (near) unit axis vector."""
        v = np.asarray(vec, dtype=float)
        rounded = np.rint(v)
        if np.max(np.abs(v - rounded)) > tol or np.sum(np.abs(rounded)) != 1:
            raise ValueError(f"Vector {tuple(v)} is not a grid direction")
        return Direction(tuple(int(c) for c in rounded))

    @staticmethod
    def from_label(label: str) -> "Direction":
        return Direction[label.upper()]


HORIZONTALS = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)
