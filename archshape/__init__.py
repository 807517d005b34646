"""
Archshape - parametric shapes for voxel-grid cells.

Main modules:
- geombase - directions, affine transforms, boxes and collision volumes
- state - property slots and interned cell configurations
- orientation - placement and orientation handlers
- models - procedural mesh models and their registry
- cache - memoized global collision volumes
- render - baked geometry composition
"""

from .cells import CellType, ModelSpec, PlacementContext, normalize_hit
from .cache import ShapeCache
from .geombase import AABB, AffineTransform3, CollisionVolume, Direction, Frame
from .models import ModelRegistry, ProceduralMeshModel, default_registry
from .orientation import orientation_handler
from .render import BakedGeometry, BakedGeometryBuilder, bake_cell
from .state import Configuration, PropertySlot, StateDefinition

__version__ = '0.1.0'

__all__ = [
    # Geombase
    'AABB',
    'AffineTransform3',
    'CollisionVolume',
    'Direction',
    'Frame',
    # State
    'Configuration',
    'PropertySlot',
    'StateDefinition',
    # Cells
    'CellType',
    'ModelSpec',
    'PlacementContext',
    'normalize_hit',
    'orientation_handler',
    # Models
    'ModelRegistry',
    'ProceduralMeshModel',
    'default_registry',
    'ShapeCache',
    # Render
    'BakedGeometry',
    'BakedGeometryBuilder',
    'bake_cell',
]
