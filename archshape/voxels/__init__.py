"""
Voxelization of shape meshes into box collision volumes.
"""

from archshape.voxels.grid import VoxelGrid
from archshape.voxels.intersection import ray_crossings, triangle_aabb, triangle_boxes_intersect
from archshape.voxels.voxelizer import MeshVoxelizer

__all__ = [
    "MeshVoxelizer",
    "VoxelGrid",
    "ray_crossings",
    "triangle_aabb",
    "triangle_boxes_intersect",
]
