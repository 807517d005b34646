from .store import (
    ChainedMeshStore,
    DirectoryMeshStore,
    InMemoryMeshStore,
    MeshResourceStore,
    builtin_store,
)

__all__ = [
    "ChainedMeshStore",
    "DirectoryMeshStore",
    "InMemoryMeshStore",
    "MeshResourceStore",
    "builtin_store",
]
