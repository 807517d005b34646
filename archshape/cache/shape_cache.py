"""
ShapeCache: memoized global collision volumes of placed cells.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from archshape import log
from archshape.cache.memo import ComputeOnceTable
from archshape.exceptions import MeshLoadError
from archshape.geombase import AffineTransform3, CollisionVolume, Frame
from archshape.state import Configuration

if TYPE_CHECKING:
    from archshape.cells import CellType
    from archshape.models import ModelRegistry
    from archshape.settings import ShapeCacheSettings

ShapeKey = Tuple["CellType", Configuration, Tuple[int, int, int]]


@dataclass
class ShapeCacheStats:
    hits: int = 0
    misses: int = 0
    loads: int = 0
    fallbacks: int = 0


def _grid_position(position) -> tuple[int, int, int]:
    coords = tuple(float(c) for c in position)
    if len(coords) != 3 or not all(c.is_integer() for c in coords):
        raise ValueError(f"Grid position must be three integers, got {tuple(position)}")
    x, y, z = (int(c) for c in coords)
    return (x, y, z)


class ShapeCache:
    """
    Global collision volume per (cell type, configuration, grid position).

    Each key is derived at most once while its entry lives, also when many
    threads ask for it at the same time. A derivation that yields an empty
    volume is never stored: its callers get a full unit cube at the position
    and the model is evicted from the registry so the next request re-reads
    the mesh.

    Args:
        registry: Model registry; the process-wide one by default.
        settings: Cache settings; read from the global settings by default.
    """

    def __init__(
        self,
        registry: Optional["ModelRegistry"] = None,
        settings: Optional["ShapeCacheSettings"] = None,
    ):
        if registry is None:
            from archshape.models import default_registry
            registry = default_registry()
        if settings is None:
            from archshape.settings import get_settings
            settings = get_settings().shape_cache
        self._registry = registry
        self._settings = settings
        self._table: ComputeOnceTable[ShapeKey, CollisionVolume] = ComputeOnceTable()
        self._lock = threading.Lock()
        self._stats = ShapeCacheStats()
        self._retry_after: Dict[ShapeKey, float] = {}

    @property
    def registry(self) -> "ModelRegistry":
        return self._registry

    def get_shape(self, cell_type: "CellType", configuration: Configuration, position) -> CollisionVolume:
        """
        Global collision volume of a cell placed at an integer grid position.

        Raises:
            ValueError: position is not three integral coordinates.
        """
        pos = _grid_position(position)
        key: ShapeKey = (cell_type, configuration, pos)

        volume = self._table.peek(key)
        if volume is not None:
            with self._lock:
                self._stats.hits += 1
            return volume

        if self._in_backoff(key):
            with self._lock:
                self._stats.fallbacks += 1
            return CollisionVolume.full_cube(Frame.GLOBAL, pos)
        with self._lock:
            self._stats.misses += 1
        volume = self._table.get_or_compute(
            key,
            lambda: self._derive(key),
            keep=lambda v: not v.is_empty,
        )

        if volume.is_empty:
            with self._lock:
                self._stats.fallbacks += 1
            return CollisionVolume.full_cube(Frame.GLOBAL, pos)
        return volume

    def _derive(self, key: ShapeKey) -> CollisionVolume:
        cell_type, configuration, pos = key
        with self._lock:
            self._stats.loads += 1
        spec = cell_type.model_spec(configuration)
        try:
            model = self._registry.get(spec.mesh_name)
            local = model.collision_volume
        except MeshLoadError as e:
            log.error(e, f"[ShapeCache] Cannot derive shape of {cell_type.name} at {pos}")
            local = CollisionVolume.empty()

        if local.is_empty:
            # Runs once per derivation; the empty result itself is never stored
            self._on_empty(key, spec.mesh_name)
            return CollisionVolume.empty(Frame.GLOBAL)

        transform = AffineTransform3.from_translation(pos) * cell_type.orientation.transform_for(
            configuration, spec.local_origin
        )
        return transform.transform_volume(local, Frame.GLOBAL)

    def _on_empty(self, key: ShapeKey, mesh_name: str) -> None:
        cell_type, configuration, _ = key
        log.warn(
            f"[ShapeCache] Empty shape for {cell_type.name} {configuration!r} at {key[2]}, "
            f"using full cube; reloading '{mesh_name}' on next request"
        )
        self._registry.evict(mesh_name)
        interval = self._settings.empty_retry_interval
        if interval > 0:
            with self._lock:
                self._retry_after[key] = time.monotonic() + interval

    def _in_backoff(self, key: ShapeKey) -> bool:
        with self._lock:
            deadline = self._retry_after.get(key)
            if deadline is None:
                return False
            if time.monotonic() < deadline:
                return True
            del self._retry_after[key]
            return False

    def invalidate(self, cell_type: "CellType", configuration: Configuration, position) -> bool:
        key = (cell_type, configuration, _grid_position(position))
        with self._lock:
            self._retry_after.pop(key, None)
        return self._table.invalidate(key)

    def invalidate_cell_type(self, cell_type: "CellType") -> int:
        """
        Drop every entry of one cell type, e.g. after set_model().

        Derivations of that cell type still in flight are not stored.
        """
        count = self._table.invalidate_where(lambda key: key[0] is cell_type)
        with self._lock:
            for key in [k for k in self._retry_after if k[0] is cell_type]:
                del self._retry_after[key]
        return count

    def clear(self) -> None:
        self._table.clear()
        with self._lock:
            self._retry_after.clear()

    @property
    def stats(self) -> ShapeCacheStats:
        with self._lock:
            return ShapeCacheStats(
                self._stats.hits, self._stats.misses, self._stats.loads, self._stats.fallbacks
            )

    def __len__(self) -> int:
        return len(self._table)
