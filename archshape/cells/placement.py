"""Placement input: what the placer looked at and where the click landed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from archshape.geombase import Direction


def normalize_hit(click, position) -> tuple[float, float, float]:
    """
    Hit offset of an absolute click location relative to the cell centre.

    Each component is clamped to [-0.5, 0.5].
    """
    offset = np.asarray(click, dtype=float) - (np.asarray(position, dtype=float) + 0.5)
    x, y, z = (float(c) for c in np.clip(offset, -0.5, 0.5))
    return (x, y, z)


@dataclass(frozen=True)
class PlacementContext:
    facing: Direction
    hit_point: tuple[float, float, float] = (0.0, 0.0, 0.0)
    placer: Any = None

    @staticmethod
    def from_click(facing: Direction, click, position, placer: Any = None) -> "PlacementContext":
        return PlacementContext(facing, normalize_hit(click, position), placer)
