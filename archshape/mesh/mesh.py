"""Local-space polygon meshes used by procedural mesh models."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from archshape.geombase import AABB


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def polygon_normal(points: np.ndarray) -> np.ndarray:
    """Newell normal of a planar polygon, unit length (zero for degenerate input)."""
    normal = np.zeros(3)
    for i in range(len(points)):
        cur = points[i]
        nxt = points[(i + 1) % len(points)]
        normal[0] += (cur[1] - nxt[1]) * (cur[2] + nxt[2])
        normal[1] += (cur[2] - nxt[2]) * (cur[0] + nxt[0])
        normal[2] += (cur[0] - nxt[0]) * (cur[1] + nxt[1])
    length = np.linalg.norm(normal)
    if length > 1e-12:
        normal /= length
    return normal


def planar_uvs(points: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Project points onto the plane of the dominant normal axis."""
    axis = int(np.argmax(np.abs(normal)))
    u_axis, v_axis = [(2, 1), (0, 2), (0, 1)][axis]
    return np.stack([points[:, u_axis], points[:, v_axis]], axis=1)


class MeshFace:
    """
    One planar face of a mesh.

    Attributes:
        texture: Index into the texture names of the model spec; also the tint index.
        normal: Unit face normal.
        vertices: (N, 3) positions.
        uvs: (N, 2) texture coordinates.
        triangles: (M, 3) indices into vertices.
    """

    __slots__ = ("texture", "normal", "vertices", "uvs", "triangles")

    def __init__(
        self,
        vertices,
        triangles,
        uvs=None,
        normal=None,
        texture: int = 0,
    ):
        verts = np.asarray(vertices, dtype=float).reshape(-1, 3)
        tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        if len(tris) and (tris.min() < 0 or tris.max() >= len(verts)):
            raise ValueError("Triangle index out of range.")
        if normal is None:
            normal = polygon_normal(verts[tris[0]]) if len(tris) else np.zeros(3)
        if uvs is None:
            uvs = planar_uvs(verts, np.asarray(normal, dtype=float))
        uv = np.asarray(uvs, dtype=float).reshape(-1, 2)
        if len(uv) != len(verts):
            raise ValueError("UVs must have one entry per vertex.")

        self.texture = int(texture)
        self.normal = _readonly(np.asarray(normal, dtype=float).reshape(3).copy())
        self.vertices = _readonly(verts.copy())
        self.uvs = _readonly(uv.copy())
        self.triangles = _readonly(tris.copy())

    @staticmethod
    def from_polygon(points, texture: int = 0, uvs=None) -> "MeshFace":
        """Convex polygon, fan triangulated."""
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        if len(pts) < 3:
            raise ValueError("A polygon needs at least three points.")
        tris = [(0, i, i + 1) for i in range(1, len(pts) - 1)]
        return MeshFace(pts, tris, uvs=uvs, normal=polygon_normal(pts), texture=texture)

    def triangle_vertices(self) -> np.ndarray:
        """(M, 3, 3) corner positions of every triangle."""
        return self.vertices[self.triangles]

    def __repr__(self) -> str:
        return (
            f"MeshFace(texture={self.texture}, vertices={len(self.vertices)}, "
            f"triangles={len(self.triangles)})"
        )


class ShapeMesh:
    """Immutable named collection of faces in local (cell) space."""

    __slots__ = ("name", "faces")

    def __init__(self, name: str, faces: Iterable[MeshFace] = ()):
        self.name = name
        self.faces: tuple[MeshFace, ...] = tuple(faces)

    @staticmethod
    def from_polygons(name: str, polygons: Sequence) -> "ShapeMesh":
        """Build from (points, texture) pairs or bare point lists."""
        faces = []
        for polygon in polygons:
            if isinstance(polygon, tuple) and len(polygon) == 2 and np.ndim(polygon[1]) == 0:
                points, texture = polygon
            else:
                points, texture = polygon, 0
            faces.append(MeshFace.from_polygon(points, texture=texture))
        return ShapeMesh(name, faces)

    @property
    def is_empty(self) -> bool:
        return not any(len(face.triangles) for face in self.faces)

    @property
    def triangle_count(self) -> int:
        return sum(len(face.triangles) for face in self.faces)

    def triangles(self) -> np.ndarray:
        """All triangles as (T, 3, 3)."""
        parts = [face.triangle_vertices() for face in self.faces if len(face.triangles)]
        if not parts:
            return np.zeros((0, 3, 3), dtype=float)
        return np.concatenate(parts, axis=0)

    @property
    def bounds(self) -> Optional[AABB]:
        points = [face.vertices for face in self.faces if len(face.vertices)]
        if not points:
            return None
        return AABB.from_points(np.concatenate(points, axis=0))

    @property
    def textures(self) -> tuple[int, ...]:
        return tuple(sorted({face.texture for face in self.faces}))

    def __repr__(self) -> str:
        return f"ShapeMesh({self.name!r}, faces={len(self.faces)})"
