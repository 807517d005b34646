"""
ProceduralMeshModel: a named static mesh plus its voxelized collision volume.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable, Optional

from archshape import log
from archshape.geombase import AABB, AffineTransform3, CollisionVolume, Frame
from archshape.mesh import MeshFace, ShapeMesh
from archshape.voxels import MeshVoxelizer

if TYPE_CHECKING:
    from archshape.render.target import RenderTarget


class ProceduralMeshModel:
    """
    Immutable mesh model.

    The local collision volume is derived on first access and then reused.
    Derivation happens at most once even when several threads ask at the same
    time.
    """

    def __init__(self, mesh: ShapeMesh, voxelizer: Optional[MeshVoxelizer] = None):
        self._mesh = mesh
        self._voxelizer = voxelizer
        self._lock = threading.Lock()
        self._volume: Optional[CollisionVolume] = None

    @property
    def name(self) -> str:
        return self._mesh.name

    @property
    def mesh(self) -> ShapeMesh:
        return self._mesh

    @property
    def bounds(self) -> Optional[AABB]:
        return self._mesh.bounds

    @property
    def collision_volume(self) -> CollisionVolume:
        """Local-frame voxelized volume; empty for a mesh with no solid voxels."""
        volume = self._volume
        if volume is not None:
            return volume
        with self._lock:
            if self._volume is None:
                voxelizer = self._voxelizer or MeshVoxelizer()
                self._volume = voxelizer.volume(self._mesh)
                log.debug(f"[ProceduralMeshModel] '{self.name}' -> {len(self._volume)} boxes")
            return self._volume

    @property
    def is_volume_ready(self) -> bool:
        return self._volume is not None

    def shape(self, transform: AffineTransform3, frame: Frame = Frame.GLOBAL) -> CollisionVolume:
        """Collision volume mapped through transform."""
        return transform.transform_volume(self.collision_volume, frame)

    def render(
        self,
        target: "RenderTarget",
        transform: AffineTransform3,
        faces: Callable[[MeshFace], bool] = lambda face: True,
    ) -> int:
        """
        Emit the selected faces into a render target.

        Positions and normals are mapped through transform; the texture index
        is passed through as the tint index. Returns the number of faces drawn.
        """
        drawn = 0
        for face in self._mesh.faces:
            if not faces(face):
                continue
            positions = transform.transform_points(face.vertices)
            normal = transform.apply_direction(face.normal)
            if len(face.vertices) <= 4 and len(face.triangles) == len(face.vertices) - 2:
                # Fan of a triangle or quad: emit the polygon itself
                target.add_polygon(positions, face.uvs, normal, face.texture)
            else:
                for tri in face.triangles:
                    target.add_polygon(positions[tri], face.uvs[tri], normal, face.texture)
            drawn += 1
        return drawn

    def __repr__(self) -> str:
        return f"ProceduralMeshModel({self.name!r})"
