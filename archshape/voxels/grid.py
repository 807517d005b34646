"""
VoxelGrid: dense occupancy grid with world coordinates.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class VoxelGrid:
    """
    Dense boolean voxel grid.

    Voxel (i, j, k) of the array covers the world box
    [(base + (i, j, k)) / resolution, (base + (i, j, k) + 1) / resolution].

    Attributes:
        resolution: Voxels per world unit.
        base: Integer voxel index of array element (0, 0, 0).
        occupancy: (nx, ny, nz) bool array.
    """

    __slots__ = ("_resolution", "_base", "_occupancy")

    def __init__(
        self,
        resolution: int,
        base: tuple[int, int, int] = (0, 0, 0),
        shape: tuple[int, int, int] = (0, 0, 0),
    ) -> None:
        if resolution <= 0:
            raise ValueError("Voxel resolution must be positive.")
        self._resolution = int(resolution)
        self._base = np.array(base, dtype=np.int64)
        self._occupancy = np.zeros(shape, dtype=bool)

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def cell_size(self) -> float:
        """Voxel edge length in world units."""
        return 1.0 / self._resolution

    @property
    def base(self) -> np.ndarray:
        return self._base

    @property
    def shape(self) -> tuple[int, int, int]:
        return self._occupancy.shape

    @property
    def occupancy(self) -> np.ndarray:
        return self._occupancy

    @property
    def voxel_count(self) -> int:
        """Number of solid voxels."""
        return int(np.count_nonzero(self._occupancy))

    def world_to_voxel(self, world_pos) -> tuple[int, int, int]:
        """Array index of the voxel containing world_pos."""
        idx = np.floor(np.asarray(world_pos, dtype=float) * self._resolution).astype(np.int64) - self._base
        return int(idx[0]), int(idx[1]), int(idx[2])

    def voxel_to_world(self, vx: int, vy: int, vz: int) -> np.ndarray:
        """World position of the voxel center."""
        return (self._base + np.array([vx, vy, vz]) + 0.5) / self._resolution

    def centers(self) -> np.ndarray:
        """(nx, ny, nz, 3) world positions of all voxel centers."""
        axes = [
            (self._base[i] + np.arange(n) + 0.5) / self._resolution
            for i, n in enumerate(self.shape)
        ]
        return np.stack(np.meshgrid(*axes, indexing="ij"), axis=-1)

    def get(self, vx: int, vy: int, vz: int) -> bool:
        if not self._in_range(vx, vy, vz):
            return False
        return bool(self._occupancy[vx, vy, vz])

    def set(self, vx: int, vy: int, vz: int, value: bool) -> None:
        if not self._in_range(vx, vy, vz):
            raise IndexError(f"Voxel ({vx}, {vy}, {vz}) outside grid of shape {self.shape}")
        self._occupancy[vx, vy, vz] = value

    def world_bounds(self) -> Optional[tuple[np.ndarray, np.ndarray]]:
        """World (min, max) of the solid voxels, None if there are none."""
        solid = np.argwhere(self._occupancy)
        if len(solid) == 0:
            return None
        lo = (self._base + solid.min(axis=0)) / self._resolution
        hi = (self._base + solid.max(axis=0) + 1) / self._resolution
        return lo, hi

    def _in_range(self, vx: int, vy: int, vz: int) -> bool:
        nx, ny, nz = self.shape
        return 0 <= vx < nx and 0 <= vy < ny and 0 <= vz < nz

    def __repr__(self) -> str:
        return f"VoxelGrid(resolution={self._resolution}, shape={self.shape}, solid={self.voxel_count})"
