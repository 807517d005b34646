"""Tests for mesh loaders and mesh resource stores."""

import json

import numpy as np
import pytest

from archshape.exceptions import MeshLoadError, MeshResourceNotFound
from archshape.loaders import load_obj_file, load_objson_file, parse_obj, parse_objson
from archshape.mesh import PRIMITIVES, ShapeMesh, cube_mesh
from archshape.resources import (
    ChainedMeshStore,
    DirectoryMeshStore,
    InMemoryMeshStore,
    builtin_store,
)

CUBE_OBJ = """\
# unit cube
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
v 0 0 1
v 1 0 1
v 1 1 1
v 0 1 1
vt 0 0
vt 1 0
vt 1 1
vt 0 1
usemtl side
f 1/1 4/4 8/3 5/2
f 2/1 6/2 7/3 3/4
f 1 2 3 4
f 5 8 7 6
usemtl cap
f 1 5 6 2
f 4 3 7 8
"""

SLAB_OBJSON = {
    "faces": [
        {
            "texture": 1,
            "normal": [0, 1, 0],
            "vertices": [
                [0, 0.5, 0, 0, 0],
                [0, 0.5, 1, 0, 1],
                [1, 0.5, 1, 1, 1],
                [1, 0.5, 0, 1, 0],
            ],
            "triangles": [[0, 1, 2], [0, 2, 3]],
        },
        {
            "vertices": [
                [0, 0, 0, 0, -1, 0, 0, 0],
                [1, 0, 0, 0, -1, 0, 1, 0],
                [1, 0, 1, 0, -1, 0, 1, 1],
            ],
            "triangles": [[0, 1, 2]],
        },
    ]
}


class TestObjLoader:
    def test_parse_cube(self):
        mesh = parse_obj(CUBE_OBJ.splitlines(), "cube")
        assert mesh.name == "cube"
        assert len(mesh.faces) == 6
        assert mesh.triangle_count == 12
        assert mesh.textures == (0, 1)

    def test_uvs_from_vt(self):
        mesh = parse_obj(CUBE_OBJ.splitlines(), "cube")
        np.testing.assert_allclose(mesh.faces[0].uvs, [[0, 0], [0, 1], [1, 1], [1, 0]])

    def test_numeric_material_is_texture_index(self):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nusemtl 3\nf 1 2 3\n"
        assert parse_obj(text.splitlines(), "tri").faces[0].texture == 3

    def test_negative_indices(self):
        text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf -3 -2 -1\n"
        mesh = parse_obj(text.splitlines(), "tri")
        np.testing.assert_allclose(mesh.faces[0].vertices[2], [0, 1, 0])

    def test_bad_index(self):
        with pytest.raises(MeshLoadError):
            parse_obj(["v 0 0 0", "f 1 2 3"], "broken")

    def test_short_face(self):
        with pytest.raises(MeshLoadError):
            parse_obj(["v 0 0 0", "v 1 0 0", "f 1 2"], "broken")

    def test_bad_number(self):
        with pytest.raises(MeshLoadError):
            parse_obj(["v 0 zero 0"], "broken")

    def test_load_file(self, tmp_path):
        path = tmp_path / "box.obj"
        path.write_text(CUBE_OBJ, encoding="utf-8")
        mesh = load_obj_file(path)
        assert mesh.name == "box"
        assert mesh.bounds.size == (1.0, 1.0, 1.0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MeshLoadError):
            load_obj_file(tmp_path / "none.obj")


class TestObjsonLoader:
    def test_parse(self):
        mesh = parse_objson(SLAB_OBJSON, "slab_top")
        assert len(mesh.faces) == 2
        top, bottom = mesh.faces
        assert top.texture == 1
        np.testing.assert_allclose(top.normal, [0, 1, 0])
        np.testing.assert_allclose(top.uvs[2], [1, 1])
        assert bottom.texture == 0
        np.testing.assert_allclose(bottom.uvs[1], [1, 0])

    def test_computed_normal(self):
        mesh = parse_objson(SLAB_OBJSON, "slab_top")
        np.testing.assert_allclose(np.abs(mesh.faces[1].normal), [0, 1, 0])

    @pytest.mark.parametrize("data", [
        [],
        {"faces": "nope"},
        {"faces": [{"vertices": [[0, 0, 0]], "triangles": [[0, 0, 0]]}]},
        {"faces": [{"vertices": [[0, 0, 0, 0, 0]], "triangles": [[0, 1, 2]]}]},
        {"faces": [{"triangles": []}]},
    ])
    def test_malformed(self, data):
        with pytest.raises(MeshLoadError):
            parse_objson(data, "bad")

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "bad.objson"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MeshLoadError):
            load_objson_file(path)


class TestStores:
    def test_directory_store_prefers_objson(self, tmp_path):
        (tmp_path / "tile.objson").write_text(json.dumps(SLAB_OBJSON), encoding="utf-8")
        (tmp_path / "tile.obj").write_text(CUBE_OBJ, encoding="utf-8")
        (tmp_path / "roof").mkdir()
        (tmp_path / "roof" / "ridge.obj").write_text(CUBE_OBJ, encoding="utf-8")

        store = DirectoryMeshStore(tmp_path)
        assert len(store.load("tile").faces) == 2
        assert store.load("roof/ridge").name == "roof/ridge"
        assert store.names() == ["roof/ridge", "tile"]

    def test_directory_store_missing(self, tmp_path):
        store = DirectoryMeshStore(tmp_path)
        with pytest.raises(MeshResourceNotFound) as info:
            store.load("ghost")
        assert info.value.name == "ghost"
        assert isinstance(info.value, LookupError)
        assert isinstance(info.value, MeshLoadError)

    def test_in_memory_store(self):
        store = InMemoryMeshStore()
        store.put("box", cube_mesh())
        store.put("lazy", lambda: cube_mesh("whatever"))
        assert store.load("box").name == "box"
        assert store.load("lazy").name == "lazy"
        assert "box" in store
        store.remove("box")
        with pytest.raises(MeshResourceNotFound):
            store.load("box")

    def test_builtin_store(self):
        store = builtin_store()
        assert store.names() == sorted(PRIMITIVES)
        for name in PRIMITIVES:
            mesh = store.load(name)
            assert isinstance(mesh, ShapeMesh)
            assert not mesh.is_empty

    def test_chained_store(self, tmp_path):
        (tmp_path / "cube.obj").write_text(CUBE_OBJ, encoding="utf-8")
        chained = ChainedMeshStore([DirectoryMeshStore(tmp_path), builtin_store()])
        assert len(chained.load("cube").faces) == 6
        assert chained.load("wedge").name == "wedge"
        with pytest.raises(MeshResourceNotFound):
            chained.load("ghost")

    def test_chained_store_propagates_parse_errors(self, tmp_path):
        (tmp_path / "cube.objson").write_text("[]", encoding="utf-8")
        chained = ChainedMeshStore([DirectoryMeshStore(tmp_path), builtin_store()])
        with pytest.raises(MeshLoadError):
            chained.load("cube")
