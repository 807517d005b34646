from .memo import ComputeOnceTable, MemoStats
from .shape_cache import ShapeCache, ShapeCacheStats

__all__ = [
    "ComputeOnceTable",
    "MemoStats",
    "ShapeCache",
    "ShapeCacheStats",
]
