from .procedural_model import ProceduralMeshModel
from .registry import ModelRegistry, default_registry

__all__ = [
    "ModelRegistry",
    "ProceduralMeshModel",
    "default_registry",
]
