"""
Base geometric classes (Geometric Base).

- Direction - the six grid faces
- AffineTransform3 - rotation + translation
- AABB, CollisionVolume - union-of-boxes collision geometry
"""

from .direction import Direction, HORIZONTALS
from .volume import AABB, CollisionVolume, Frame, RayHit
from .affine3 import AffineTransform3, CELL_CENTER, cell_turn

__all__ = [
    'Direction',
    'HORIZONTALS',
    'AABB',
    'CollisionVolume',
    'Frame',
    'RayHit',
    'AffineTransform3',
    'CELL_CENTER',
    'cell_turn',
]
