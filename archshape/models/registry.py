"""
ModelRegistry: name -> ProceduralMeshModel, loaded lazily from a mesh store.
"""

from __future__ import annotations

import threading
from typing import MutableMapping, Optional

from archshape import log
from archshape.cache.memo import ComputeOnceTable
from archshape.exceptions import MeshLoadError
from archshape.models.procedural_model import ProceduralMeshModel
from archshape.resources import MeshResourceStore, builtin_store
from archshape.voxels import MeshVoxelizer


class ModelRegistry:
    """
    Registry of procedural mesh models.

    The first get() of a name loads the mesh from the store and wraps it;
    later calls return the same instance. Loads run at most once per name,
    even under concurrent first access. Load errors are not cached.

    Args:
        store: Mesh resource store used to load unknown names.
        models: Mapping that holds loaded models (a plain dict by default).
        voxelizer: Shared voxelizer for collision volumes; the default one
            reads its resolution from settings.
    """

    def __init__(
        self,
        store: Optional[MeshResourceStore] = None,
        models: Optional[MutableMapping[str, ProceduralMeshModel]] = None,
        voxelizer: Optional[MeshVoxelizer] = None,
    ):
        self._store = store if store is not None else builtin_store()
        self._table: ComputeOnceTable[str, ProceduralMeshModel] = ComputeOnceTable(models)
        self._voxelizer = voxelizer
        self._load_count = 0
        self._count_lock = threading.Lock()

    @property
    def store(self) -> MeshResourceStore:
        return self._store

    @property
    def load_count(self) -> int:
        """Number of store loads performed, failed ones included."""
        with self._count_lock:
            return self._load_count

    def get(self, name: str) -> ProceduralMeshModel:
        """
        Model for name.

        Raises:
            MeshResourceNotFound: The store has no such mesh.
            MeshLoadError: The mesh resource is malformed.
        """
        return self._table.get_or_compute(name, lambda: self._load(name))

    def _load(self, name: str) -> ProceduralMeshModel:
        with self._count_lock:
            self._load_count += 1
        try:
            mesh = self._store.load(name)
        except MeshLoadError as e:
            log.warn(f"[ModelRegistry] Failed to load mesh '{name}': {e}")
            raise
        log.debug(f"[ModelRegistry] Loaded '{name}': {mesh.triangle_count} triangles")
        return ProceduralMeshModel(mesh, self._voxelizer)

    def evict(self, name: str) -> bool:
        """Forget a loaded model, or a load in flight, so the next get() reloads it."""
        evicted = self._table.invalidate(name)
        if evicted:
            log.debug(f"[ModelRegistry] Evicted '{name}'")
        return evicted

    def clear(self) -> None:
        self._table.clear()

    def names(self) -> list[str]:
        """Names of loaded models."""
        return sorted(self._table.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)


_default_registry: Optional[ModelRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> ModelRegistry:
    """Process-wide registry over the builtin primitives, created on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = ModelRegistry()
        return _default_registry
