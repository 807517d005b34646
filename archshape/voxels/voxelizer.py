"""
Voxelizer: converts a ShapeMesh to voxels, and voxels to a box collision volume.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from archshape import log
from archshape.geombase import AABB, CollisionVolume, Frame
from archshape.mesh import ShapeMesh
from archshape.voxels.grid import VoxelGrid
from archshape.voxels.intersection import ray_crossings, triangle_aabb, triangle_boxes_intersect

# Snap tolerance when mapping mesh bounds onto the voxel lattice
_GRID_EPSILON = 1e-9

# Voxels are shrunk by this factor for the surface test, so triangles lying on
# a voxel face do not mark the neighbour on the far side
_SURFACE_SHRINK = 1e-4


class MeshVoxelizer:
    """
    Mesh to voxel converter.

    A voxel is solid if its center is inside the mesh (ray parity along +X)
    or if the mesh surface passes through it (triangle-box SAT). Surface
    voxels make the result conservative for sloped faces.
    """

    def __init__(self, resolution: Optional[int] = None) -> None:
        if resolution is None:
            from archshape.settings import get_settings
            resolution = get_settings().voxel.resolution
        if resolution <= 0:
            raise ValueError("Voxel resolution must be positive.")
        self._resolution = int(resolution)

    @property
    def resolution(self) -> int:
        return self._resolution

    def voxelize(self, mesh: ShapeMesh) -> VoxelGrid:
        """Occupancy grid covering the mesh bounds."""
        triangles = mesh.triangles()
        bounds = mesh.bounds
        if len(triangles) == 0 or bounds is None:
            return VoxelGrid(self._resolution)

        res = self._resolution
        lo = np.floor(np.asarray(bounds.min) * res + _GRID_EPSILON).astype(np.int64)
        hi = np.ceil(np.asarray(bounds.max) * res - _GRID_EPSILON).astype(np.int64)
        shape = tuple(int(n) for n in np.maximum(hi - lo, 0))
        grid = VoxelGrid(res, tuple(int(v) for v in lo), shape)
        if 0 in shape:
            return grid

        centers = grid.centers().reshape(-1, 3)
        half = np.full(3, 0.5 / res * (1.0 - _SURFACE_SHRINK))

        crossings = np.zeros(len(centers), dtype=np.int64)
        surface = np.zeros(len(centers), dtype=bool)

        for v0, v1, v2 in triangles:
            crossings += ray_crossings(v0, v1, v2, centers)

            # Only test voxels near the triangle
            t_min, t_max = triangle_aabb(v0, v1, v2)
            near = np.all(
                (centers >= t_min - 0.5 / res) & (centers <= t_max + 0.5 / res),
                axis=1,
            )
            candidates = np.flatnonzero(near & ~surface)
            if len(candidates):
                hit = triangle_boxes_intersect(v0, v1, v2, centers[candidates], half)
                surface[candidates[hit]] = True

        solid = (crossings % 2 == 1) | surface
        grid.occupancy[...] = solid.reshape(shape)

        if log.is_debug_enabled():
            log.debug(
                f"[MeshVoxelizer] '{mesh.name}': {len(triangles)} triangles, "
                f"grid {shape}, {grid.voxel_count} solid voxels"
            )
        return grid

    def to_volume(self, grid: VoxelGrid, frame: Frame = Frame.LOCAL) -> CollisionVolume:
        """Merge solid voxels into a small set of non-overlapping boxes."""
        occupancy = grid.occupancy
        remaining = occupancy.copy()
        nx, ny, nz = occupancy.shape
        base = grid.base
        res = grid.resolution
        boxes = []

        # Greedy merge: grow along X, then Y, then Z
        for z in range(nz):
            for y in range(ny):
                for x in range(nx):
                    if not remaining[x, y, z]:
                        continue

                    x1 = x + 1
                    while x1 < nx and remaining[x1, y, z]:
                        x1 += 1

                    y1 = y + 1
                    while y1 < ny and remaining[x:x1, y1, z].all():
                        y1 += 1

                    z1 = z + 1
                    while z1 < nz and remaining[x:x1, y:y1, z1].all():
                        z1 += 1

                    remaining[x:x1, y:y1, z:z1] = False
                    lo = (base + np.array([x, y, z])) / res
                    hi = (base + np.array([x1, y1, z1])) / res
                    boxes.append(AABB(lo, hi))

        return CollisionVolume(boxes, frame)

    def volume(self, mesh: ShapeMesh) -> CollisionVolume:
        """Local-frame collision volume of a mesh."""
        return self.to_volume(self.voxelize(mesh), Frame.LOCAL)
