from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from archshape.geombase import Direction


@dataclass(frozen=True, eq=False)
class BakedQuad:
    """
    One baked quad in cell-local space.

    Attributes:
        vertices: (4, 3) positions; a triangle repeats its last vertex.
        uvs: (4, 2) texture coordinates within the sprite.
        normal: Unit normal.
        tint_index: Mesh texture index the quad came from.
        cull_face: Cell face the quad lies on, None for interior quads.
        sprite: Opaque texture handle supplied by the host.
    """

    vertices: np.ndarray
    uvs: np.ndarray
    normal: np.ndarray
    tint_index: int = 0
    cull_face: Optional[Direction] = None
    sprite: Any = None

    @staticmethod
    def from_polygon(positions, uvs, normal, tint_index: int = 0, sprite: Any = None) -> "BakedQuad":
        pts = np.asarray(positions, dtype=float).reshape(-1, 3)
        uv = np.asarray(uvs, dtype=float).reshape(-1, 2)
        if len(pts) not in (3, 4) or len(uv) != len(pts):
            raise ValueError(f"A quad needs 3 or 4 vertices with UVs, got {len(pts)}")
        if len(pts) == 3:
            pts = np.vstack([pts, pts[2:]])
            uv = np.vstack([uv, uv[2:]])
        n = np.asarray(normal, dtype=float).reshape(3)
        for array in (pts, uv, n):
            array.setflags(write=False)
        return BakedQuad(pts, uv, n, int(tint_index), _cull_face(pts, n), sprite)


def _cull_face(points: np.ndarray, normal: np.ndarray, tol: float = 1e-6) -> Optional[Direction]:
    """Cell face the polygon lies on, if it lies flat on the cell boundary facing out."""
    try:
        direction = Direction.from_vector(normal, tol=1e-3)
    except ValueError:
        return None
    axis = direction.axis_index
    plane = 1.0 if direction.sign > 0 else 0.0
    if np.all(np.abs(points[:, axis] - plane) < tol):
        return direction
    return None
