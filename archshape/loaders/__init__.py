from .obj_loader import load_obj_file, parse_obj
from .objson_loader import load_objson_file, parse_objson

MESH_LOADERS = {
    ".objson": load_objson_file,
    ".obj": load_obj_file,
}

__all__ = [
    "MESH_LOADERS",
    "load_obj_file",
    "load_objson_file",
    "parse_obj",
    "parse_objson",
]
