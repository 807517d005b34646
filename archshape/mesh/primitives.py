"""Procedural unit-cell shapes: Cube, Slab, Post, Wedge (roof tile), Corner.

All shapes live in the unit cell [0, 1]^3 and are authored facing north (-Z):
the tall side of sloped shapes is on the north face.
"""

from typing import Callable, Dict

from .mesh import ShapeMesh


def _box_polygons(lo, hi):
    x0, y0, z0 = lo
    x1, y1, z1 = hi
    return [
        [(x0, y0, z0), (x0, y0, z1), (x0, y1, z1), (x0, y1, z0)],  # -X
        [(x1, y0, z0), (x1, y1, z0), (x1, y1, z1), (x1, y0, z1)],  # +X
        [(x0, y0, z0), (x1, y0, z0), (x1, y0, z1), (x0, y0, z1)],  # -Y
        [(x0, y1, z0), (x0, y1, z1), (x1, y1, z1), (x1, y1, z0)],  # +Y
        [(x0, y0, z0), (x0, y1, z0), (x1, y1, z0), (x1, y0, z0)],  # -Z
        [(x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1)],  # +Z
    ]


def cube_mesh(name: str = "cube") -> ShapeMesh:
    return ShapeMesh.from_polygons(name, _box_polygons((0, 0, 0), (1, 1, 1)))


def slab_mesh(name: str = "slab") -> ShapeMesh:
    """Lower half of the cell."""
    return ShapeMesh.from_polygons(name, _box_polygons((0, 0, 0), (1, 0.5, 1)))


def post_mesh(name: str = "post") -> ShapeMesh:
    """Vertical square post, half a cell wide."""
    return ShapeMesh.from_polygons(name, _box_polygons((0.25, 0, 0.25), (0.75, 1, 0.75)))


def wedge_mesh(name: str = "wedge") -> ShapeMesh:
    """Roof tile: slope from the top of the north face down to the bottom south edge."""
    return ShapeMesh.from_polygons(name, [
        [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)],   # bottom
        [(0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)],   # north
        [(0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 0)],   # slope
        [(0, 0, 0), (0, 0, 1), (0, 1, 0)],              # west
        [(1, 0, 0), (1, 1, 0), (1, 0, 1)],              # east
    ])


def corner_mesh(name: str = "corner") -> ShapeMesh:
    """Outer roof corner: pyramid with its apex above the north-west bottom corner."""
    apex = (0, 1, 0)
    return ShapeMesh.from_polygons(name, [
        [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)],   # bottom
        [(0, 0, 0), apex, (1, 0, 0)],                   # north
        [(0, 0, 0), (0, 0, 1), apex],                   # west
        [apex, (1, 0, 1), (1, 0, 0)],                   # east slope
        [apex, (0, 0, 1), (1, 0, 1)],                   # south slope
    ])


PRIMITIVES: Dict[str, Callable[..., ShapeMesh]] = {
    "cube": cube_mesh,
    "slab": slab_mesh,
    "post": post_mesh,
    "wedge": wedge_mesh,
    "corner": corner_mesh,
}
