# archshape/loaders/obj_loader.py
"""Pure Python OBJ loader producing ShapeMesh faces."""

from pathlib import Path
from typing import Iterable

from archshape.exceptions import MeshLoadError
from archshape.mesh import MeshFace, ShapeMesh


def parse_obj(lines: Iterable[str], name: str) -> ShapeMesh:
    """
    Parse OBJ text.

    Every `f` record becomes one face (fan triangulated). `usemtl` selects the
    texture index of following faces: an integer material name is used as is,
    other names are numbered in order of first appearance.
    """
    positions = []  # v
    tex_coords = []  # vt
    materials: dict[str, int] = {}
    texture = 0
    faces = []

    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        cmd = parts[0]

        try:
            if cmd == "v" and len(parts) >= 4:
                positions.append((float(parts[1]), float(parts[2]), float(parts[3])))

            elif cmd == "vt" and len(parts) >= 3:
                tex_coords.append((float(parts[1]), float(parts[2])))

            elif cmd == "usemtl" and len(parts) >= 2:
                material = parts[1]
                if material.isdigit():
                    texture = int(material)
                else:
                    texture = materials.setdefault(material, len(materials))

            elif cmd == "f":
                if len(parts) < 4:
                    raise MeshLoadError(f"{name}:{lineno}: face needs at least 3 vertices")
                points = []
                uvs = []
                for vert in parts[1:]:
                    # Format: v, v/vt, v/vt/vn, v//vn
                    indices_str = vert.split("/")
                    v_idx = _resolve_index(int(indices_str[0]), len(positions))
                    points.append(positions[v_idx])
                    if len(indices_str) > 1 and indices_str[1]:
                        vt_idx = _resolve_index(int(indices_str[1]), len(tex_coords))
                        uvs.append(tex_coords[vt_idx])
                face_uvs = uvs if len(uvs) == len(points) else None
                faces.append(MeshFace.from_polygon(points, texture=texture, uvs=face_uvs))
        except (ValueError, IndexError) as e:
            raise MeshLoadError(f"{name}:{lineno}: {e}") from e

    return ShapeMesh(name, faces)


def _resolve_index(index: int, count: int) -> int:
    """OBJ indices are 1-based; negative values count from the end."""
    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = count + index
    else:
        raise IndexError("OBJ index 0 is invalid")
    if not 0 <= resolved < count:
        raise IndexError(f"OBJ index {index} out of range")
    return resolved


def load_obj_file(path, name: str = None) -> ShapeMesh:
    """Load OBJ file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return parse_obj(f, name or path.stem)
    except OSError as e:
        raise MeshLoadError(f"Cannot read {path}: {e}") from e
