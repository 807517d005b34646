"""Tests for ProceduralMeshModel and ModelRegistry."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from archshape.exceptions import MeshLoadError, MeshResourceNotFound
from archshape.geombase import AABB, AffineTransform3, Frame
from archshape.mesh import cube_mesh, slab_mesh
from archshape.models import ModelRegistry, ProceduralMeshModel, default_registry
from archshape.resources import InMemoryMeshStore
from archshape.voxels import MeshVoxelizer


class CountingStore:
    """Store that counts loads and can be slowed down or made to fail."""

    def __init__(self, delay=0.0):
        self.inner = InMemoryMeshStore({"cube": cube_mesh, "slab": slab_mesh})
        self.delay = delay
        self.calls = 0
        self.failures = 0
        self._lock = threading.Lock()

    def load(self, name):
        with self._lock:
            self.calls += 1
            fail = self.failures > 0
            if fail:
                self.failures -= 1
        time.sleep(self.delay)
        if fail:
            raise MeshLoadError(f"transient failure for {name}")
        return self.inner.load(name)


class TestProceduralMeshModel:
    def test_collision_volume_is_cached(self):
        model = ProceduralMeshModel(slab_mesh(), MeshVoxelizer(8))
        assert not model.is_volume_ready
        first = model.collision_volume
        assert model.is_volume_ready
        assert model.collision_volume is first
        assert first.boxes == (AABB((0, 0, 0), (1, 0.5, 1)),)

    def test_concurrent_volume_derivation_once(self, monkeypatch):
        voxelizer = MeshVoxelizer(8)
        calls = []
        original = voxelizer.volume

        def slow_volume(mesh):
            calls.append(mesh.name)
            time.sleep(0.05)
            return original(mesh)

        monkeypatch.setattr(voxelizer, "volume", slow_volume)
        model = ProceduralMeshModel(cube_mesh(), voxelizer)
        with ThreadPoolExecutor(max_workers=8) as pool:
            volumes = list(pool.map(lambda _: model.collision_volume, range(16)))
        assert calls == ["cube"]
        assert all(v is volumes[0] for v in volumes)

    def test_shape_transforms_volume(self):
        model = ProceduralMeshModel(cube_mesh(), MeshVoxelizer(4))
        shape = model.shape(AffineTransform3.translation(2, 0, 5))
        assert shape.frame is Frame.GLOBAL
        assert shape.boxes == (AABB((2, 0, 5), (3, 1, 6)),)

    def test_bounds(self):
        assert ProceduralMeshModel(slab_mesh()).bounds == AABB((0, 0, 0), (1, 0.5, 1))


class TestModelRegistry:
    def test_same_instance(self):
        store = CountingStore()
        registry = ModelRegistry(store)
        assert registry.get("cube") is registry.get("cube")
        assert store.calls == 1
        assert "cube" in registry
        assert registry.names() == ["cube"]

    def test_concurrent_first_access_loads_once(self):
        store = CountingStore(delay=0.1)
        registry = ModelRegistry(store)
        barrier = threading.Barrier(8)

        def get(_):
            barrier.wait()
            return registry.get("slab")

        with ThreadPoolExecutor(max_workers=8) as pool:
            models = list(pool.map(get, range(8)))
        assert store.calls == 1
        assert registry.load_count == 1
        assert all(m is models[0] for m in models)

    def test_unrelated_names_do_not_block(self):
        store = CountingStore(delay=0.05)
        registry = ModelRegistry(store)
        with ThreadPoolExecutor(max_workers=2) as pool:
            cube, slab = pool.map(registry.get, ["cube", "slab"])
        assert cube.name == "cube"
        assert slab.name == "slab"
        assert store.calls == 2

    def test_missing_mesh_propagates(self):
        registry = ModelRegistry(CountingStore())
        with pytest.raises(MeshResourceNotFound):
            registry.get("ghost")
        assert "ghost" not in registry

    def test_failure_is_not_cached(self):
        store = CountingStore()
        store.failures = 1
        registry = ModelRegistry(store)
        with pytest.raises(MeshLoadError):
            registry.get("cube")
        model = registry.get("cube")
        assert model.name == "cube"
        assert store.calls == 2

    def test_failure_reaches_every_waiter(self):
        store = CountingStore(delay=0.1)
        store.failures = 1
        registry = ModelRegistry(store)
        barrier = threading.Barrier(4)

        def get(_):
            barrier.wait()
            try:
                return registry.get("cube")
            except MeshLoadError as e:
                return e

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(get, range(4)))
        assert store.calls == 1
        assert all(isinstance(r, MeshLoadError) for r in results)

    def test_evict_reloads(self):
        store = CountingStore()
        registry = ModelRegistry(store)
        first = registry.get("cube")
        assert registry.evict("cube")
        assert not registry.evict("cube")
        second = registry.get("cube")
        assert second is not first
        assert store.calls == 2

    def test_evict_during_load_discards_result(self):
        entered = threading.Event()
        gate = threading.Event()
        inner = InMemoryMeshStore({"cube": cube_mesh})

        class GatedStore:
            def load(self, name):
                mesh = inner.load(name)
                entered.set()
                gate.wait(timeout=5)
                return mesh

        registry = ModelRegistry(GatedStore())
        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(registry.get, "cube")
            assert entered.wait(timeout=5)
            assert not registry.evict("cube")
            gate.set()
            stale = pending.result()
        assert stale.name == "cube"
        assert "cube" not in registry
        assert registry.get("cube") is not stale

    def test_injected_storage(self):
        storage = {}
        registry = ModelRegistry(CountingStore(), models=storage)
        model = registry.get("cube")
        assert storage == {"cube": model}
        registry.clear()
        assert storage == {}
        assert len(registry) == 0

    def test_default_registry_is_shared(self):
        registry = default_registry()
        assert registry is default_registry()
        assert registry.get("wedge").name == "wedge"
