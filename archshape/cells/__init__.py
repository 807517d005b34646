from .cell_type import CellType
from .model_spec import ModelSpec
from .placement import PlacementContext, normalize_hit

__all__ = [
    "CellType",
    "ModelSpec",
    "PlacementContext",
    "normalize_hit",
]
