"""
OBJSON loader: JSON polygon meshes.

Format:
    {
        "faces": [
            {
                "texture": 0,
                "normal": [0, 1, 0],              # optional
                "vertices": [[x, y, z, u, v], ...] or [[x, y, z, nx, ny, nz, u, v], ...],
                "triangles": [[0, 1, 2], ...]
            }
        ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np

from archshape.exceptions import MeshLoadError
from archshape.mesh import MeshFace, ShapeMesh


def parse_objson(data: dict, name: str) -> ShapeMesh:
    """Build a ShapeMesh from decoded OBJSON data."""
    if not isinstance(data, dict) or not isinstance(data.get("faces"), list):
        raise MeshLoadError(f"{name}: OBJSON root must be an object with a 'faces' list")

    faces = []
    for i, face_data in enumerate(data["faces"]):
        try:
            vertices = np.asarray(face_data["vertices"], dtype=float)
            if vertices.ndim != 2 or vertices.shape[1] not in (5, 8):
                raise ValueError("vertices must be rows of 5 or 8 numbers")
            uvs = vertices[:, -2:]
            faces.append(MeshFace(
                vertices=vertices[:, :3],
                triangles=face_data["triangles"],
                uvs=uvs,
                normal=face_data.get("normal"),
                texture=face_data.get("texture", 0),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise MeshLoadError(f"{name}: face {i}: {e}") from e

    return ShapeMesh(name, faces)


def load_objson_file(path, name: str = None) -> ShapeMesh:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise MeshLoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MeshLoadError(f"{path}: invalid JSON: {e}") from e
    return parse_objson(data, name or path.stem)
