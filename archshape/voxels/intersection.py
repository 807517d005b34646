"""
Intersection tests for voxelization.

Both tests take one triangle and many voxel centers at once and return a
boolean mask, so the per-triangle loop stays in Python and the per-voxel work
stays in numpy.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

# Epsilon for numerical stability at box boundaries
_EPSILON = 1e-9

# Off-axis ray jitter, keeps parity rays away from shared triangle edges
_RAY_JITTER = np.array([0.0, 1.234e-6, 2.345e-6])


def triangle_aabb(
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    AABB of a triangle.

    Returns:
        (min_corner, max_corner)
    """
    min_corner = np.minimum(np.minimum(v0, v1), v2)
    max_corner = np.maximum(np.maximum(v0, v1), v2)
    return min_corner, max_corner


def triangle_boxes_intersect(
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
    centers: np.ndarray,
    half_size: np.ndarray,
) -> np.ndarray:
    """
    Triangle against many equal axis-aligned boxes.

    Tomas Akenine-Möller SAT test: 3 box axes, the triangle normal and
    the 9 edge x axis cross products.

    Args:
        v0, v1, v2: Triangle vertices.
        centers: (N, 3) box centers.
        half_size: (3,) half extents shared by all boxes.

    Returns:
        (N,) bool mask of boxes that overlap the triangle.
    """
    # Move the triangle so every box center sits at the origin
    a = v0[None, :] - centers
    b = v1[None, :] - centers
    c = v2[None, :] - centers
    h = np.asarray(half_size, dtype=float)

    # --- Test 1: box axes ---
    lo = np.minimum(np.minimum(a, b), c)
    hi = np.maximum(np.maximum(a, b), c)
    mask = np.all((lo <= h + _EPSILON) & (hi >= -h - _EPSILON), axis=1)

    # --- Test 2: triangle normal ---
    e0 = v1 - v0
    e1 = v2 - v1
    e2 = v0 - v2
    normal = np.cross(e0, e1)
    d = a @ normal
    r = float(np.dot(h, np.abs(normal)))
    mask &= np.abs(d) <= r + _EPSILON

    # --- Test 3: edge x axis cross products ---
    for edge in (e0, e1, e2):
        for axis in range(3):
            unit = np.zeros(3)
            unit[axis] = 1.0
            direction = np.cross(edge, unit)
            if not np.any(direction):
                continue
            pa = a @ direction
            pb = b @ direction
            pc = c @ direction
            p_min = np.minimum(np.minimum(pa, pb), pc)
            p_max = np.maximum(np.maximum(pa, pb), pc)
            r = float(np.dot(h, np.abs(direction)))
            mask &= ~((p_min > r + _EPSILON) | (p_max < -r - _EPSILON))

    return mask


def ray_crossings(
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
    points: np.ndarray,
) -> np.ndarray:
    """
    Whether a +X ray from each point crosses the triangle.

    Summing this over a closed mesh gives an odd count exactly for points inside.
    """
    p = points + _RAY_JITTER
    normal = np.cross(v1 - v0, v2 - v0)
    if abs(normal[0]) < 1e-12:
        return np.zeros(len(p), dtype=bool)

    # Point-in-triangle in the YZ projection, via signed areas
    def edge_side(pa, pb):
        return (pb[1] - pa[1]) * (p[:, 2] - pa[2]) - (pb[2] - pa[2]) * (p[:, 1] - pa[1])

    s0 = edge_side(v0, v1)
    s1 = edge_side(v1, v2)
    s2 = edge_side(v2, v0)
    inside = ((s0 >= 0) & (s1 >= 0) & (s2 >= 0)) | ((s0 <= 0) & (s1 <= 0) & (s2 <= 0))

    # X of the triangle plane at the point's (y, z)
    x_plane = v0[0] - (normal[1] * (p[:, 1] - v0[1]) + normal[2] * (p[:, 2] - v0[2])) / normal[0]
    return inside & (x_plane > p[:, 0])
