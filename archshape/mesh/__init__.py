from .mesh import MeshFace, ShapeMesh, planar_uvs, polygon_normal
from .primitives import (
    PRIMITIVES,
    corner_mesh,
    cube_mesh,
    post_mesh,
    slab_mesh,
    wedge_mesh,
)

__all__ = [
    "MeshFace",
    "ShapeMesh",
    "planar_uvs",
    "polygon_normal",
    "PRIMITIVES",
    "corner_mesh",
    "cube_mesh",
    "post_mesh",
    "slab_mesh",
    "wedge_mesh",
]
