"""
Mesh resource stores.

A store resolves a mesh name to a freshly loaded ShapeMesh. Stores never cache:
caching lives in ModelRegistry, which calls load() at most once per name.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Protocol, Union, runtime_checkable

from archshape import log
from archshape.exceptions import MeshResourceNotFound
from archshape.loaders import MESH_LOADERS
from archshape.mesh import PRIMITIVES, ShapeMesh

MeshSource = Union[ShapeMesh, Callable[[], ShapeMesh]]


@runtime_checkable
class MeshResourceStore(Protocol):
    def load(self, name: str) -> ShapeMesh:
        """Load mesh by name. Raises MeshResourceNotFound if absent, MeshLoadError if malformed."""
        ...


class DirectoryMeshStore:
    """
    Meshes stored as files under a root directory.

    A name maps to `<root>/<name>.objson`, falling back to `<root>/<name>.obj`.
    Names may contain '/' to address subdirectories.
    """

    def __init__(self, root):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path | None:
        for suffix in MESH_LOADERS:
            candidate = self._root / f"{name}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def load(self, name: str) -> ShapeMesh:
        path = self.path_for(name)
        if path is None:
            raise MeshResourceNotFound(name, f"searched {self._root}")
        log.debug(f"[DirectoryMeshStore] Loading '{name}' from {path}")
        return MESH_LOADERS[path.suffix](path, name=name)

    def names(self) -> list[str]:
        found = set()
        for suffix in MESH_LOADERS:
            for path in self._root.rglob(f"*{suffix}"):
                found.add(path.relative_to(self._root).with_suffix("").as_posix())
        return sorted(found)


class InMemoryMeshStore:
    """
    Meshes held in memory, either as ready meshes or as factories.

    Thread-safe: entries may be replaced while other threads load.
    """

    def __init__(self, entries: Dict[str, MeshSource] | None = None):
        self._lock = threading.Lock()
        self._entries: Dict[str, MeshSource] = dict(entries or {})

    def put(self, name: str, source: MeshSource) -> None:
        with self._lock:
            self._entries[name] = source

    def remove(self, name: str) -> None:
        with self._lock:
            self._entries.pop(name, None)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def load(self, name: str) -> ShapeMesh:
        with self._lock:
            source = self._entries.get(name)
        if source is None:
            raise MeshResourceNotFound(name)
        mesh = source if isinstance(source, ShapeMesh) else source()
        if mesh.name != name:
            mesh = ShapeMesh(name, mesh.faces)
        return mesh


class ChainedMeshStore:
    """Tries each store in order; the first one that knows the name wins."""

    def __init__(self, stores: Iterable[MeshResourceStore]):
        self._stores = tuple(stores)

    def load(self, name: str) -> ShapeMesh:
        for store in self._stores:
            try:
                return store.load(name)
            except MeshResourceNotFound:
                continue
        raise MeshResourceNotFound(name, f"not found in {len(self._stores)} stores")


def builtin_store() -> InMemoryMeshStore:
    """Store with the procedural primitives (cube, slab, post, wedge, corner)."""
    return InMemoryMeshStore(dict(PRIMITIVES))
