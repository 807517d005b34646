"""Tests for baked quads, render targets and BakedGeometry composition."""

import numpy as np
import pytest

from archshape.cells import CellType, ModelSpec
from archshape.geombase import Direction
from archshape.mesh import MeshFace, ShapeMesh, slab_mesh
from archshape.models import ModelRegistry
from archshape.render import (
    BakedGeometry,
    BakedGeometryBuilder,
    BakedQuad,
    BakedRenderTarget,
    ModelRenderer,
    RenderFragment,
    bake_cell,
)
from archshape.resources import InMemoryMeshStore

TOP_QUAD = [(0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)]
UV4 = [(0, 0), (0, 1), (1, 1), (1, 0)]


def fragment_with(*quads, sprite=None):
    target = BakedRenderTarget((0, 0, 0), sprite)
    for positions, normal in quads:
        target.add_polygon(positions, UV4[:len(positions)], normal, 0)
    return target.fragment()


class TestBakedQuad:
    def test_triangle_repeats_last_vertex(self):
        quad = BakedQuad.from_polygon([(0, 0, 0), (1, 0, 0), (0, 1, 0)], UV4[:3], (0, 0, 1))
        assert quad.vertices.shape == (4, 3)
        np.testing.assert_allclose(quad.vertices[3], quad.vertices[2])
        np.testing.assert_allclose(quad.uvs[3], quad.uvs[2])

    def test_cull_face_on_boundary(self):
        quad = BakedQuad.from_polygon(TOP_QUAD, UV4, (0, 1, 0))
        assert quad.cull_face is Direction.UP

    def test_interior_quad_has_no_cull_face(self):
        middle = [(x, 0.5, z) for x, _, z in TOP_QUAD]
        assert BakedQuad.from_polygon(middle, UV4, (0, 1, 0)).cull_face is None

    def test_sloped_quad_has_no_cull_face(self):
        slope = [(0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 0)]
        assert BakedQuad.from_polygon(slope, UV4, (0, 0.7071, 0.7071)).cull_face is None

    def test_rejects_pentagon(self):
        with pytest.raises(ValueError):
            BakedQuad.from_polygon([(0, 0, 0)] * 5, [(0, 0)] * 5, (0, 1, 0))


class TestBakedGeometry:
    def test_first_match_wins(self):
        a = fragment_with((TOP_QUAD, (0, 1, 0)), sprite="a")
        b = fragment_with((TOP_QUAD, (0, 1, 0)), sprite="b")
        geometry = BakedGeometryBuilder().add(a).add(b).build()
        for part in (Direction.UP, Direction.NORTH, None):
            assert geometry.quads(part) == a.quads(part)
        assert [q.sprite for q in geometry.quads(Direction.UP)] == ["a"]
        assert geometry.particle_sprite == "a"

    def test_zero_fragments(self):
        geometry = BakedGeometryBuilder().build()
        for part in (None, *Direction):
            assert geometry.quads(part) == []
        assert geometry.particle_sprite is None

    def test_third_fragment_rejected(self):
        builder = BakedGeometryBuilder()
        builder.add(RenderFragment({}))
        builder.add(RenderFragment({}))
        with pytest.raises(ValueError):
            builder.add(RenderFragment({}))

    def test_predicate_dispatch(self):
        top = fragment_with((TOP_QUAD, (0, 1, 0)), sprite="top")
        rest = fragment_with((TOP_QUAD, (0, 1, 0)), sprite="rest")
        geometry = (
            BakedGeometryBuilder()
            .add(top, lambda part: part is Direction.UP)
            .add(rest, lambda part: part is not Direction.DOWN)
            .build()
        )
        assert [q.sprite for q in geometry.quads(Direction.UP)] == ["top"]
        assert geometry.quads(Direction.NORTH) == []
        assert geometry.quads(Direction.DOWN) == []

    def test_fixed_flags(self):
        geometry = BakedGeometry()
        assert geometry.ambient_occlusion is True
        assert geometry.is_3d is True
        assert geometry.is_builtin_renderer is False


class TestBakeCell:
    def setup_method(self):
        faces = list(slab_mesh().faces)
        # Top face (+Y) becomes the secondary material
        top = faces[3]
        faces[3] = MeshFace(top.vertices, top.triangles, top.uvs, top.normal, texture=1)
        self.registry = ModelRegistry(InMemoryMeshStore({"two_tone": ShapeMesh("two_tone", faces)}))
        self.renderer = ModelRenderer(self.registry)
        self.cell = CellType(
            "step",
            orientation="facing",
            model=ModelSpec("two_tone", texture_names=("stone", "moss")),
        )

    def test_two_passes(self):
        geometry = bake_cell(
            self.renderer, self.cell, self.cell.default_configuration, (5, 6, 7),
            lambda position, primary: "stone" if primary else "moss",
        )
        assert len(geometry) == 2
        primary, secondary = geometry.fragments
        assert len(primary) == 5
        assert len(secondary) == 1
        assert all(q.tint_index == 0 for q in primary.all_quads())
        assert [q.tint_index for q in secondary.all_quads()] == [1]
        # Bottom face lies on the cell boundary; the half-height top does not
        assert len(primary.quads(Direction.DOWN)) == 1
        assert secondary.quads(None)[0].sprite == "moss"
        assert geometry.quads(Direction.DOWN) == primary.quads(Direction.DOWN)

    def test_missing_sprite_skips_pass(self):
        geometry = bake_cell(
            self.renderer, self.cell, self.cell.default_configuration, (0, 0, 0),
            lambda position, primary: "stone" if primary else None,
        )
        assert len(geometry) == 1

    def test_no_sprites(self):
        geometry = bake_cell(
            self.renderer, self.cell, self.cell.default_configuration, (0, 0, 0),
            lambda position, primary: None,
        )
        assert geometry.quads(Direction.UP) == []

    def test_orientation_rotates_quads(self):
        east = self.cell.configuration(facing="east")
        geometry = bake_cell(
            self.renderer, self.cell, east, (0, 0, 0),
            lambda position, primary: "stone",
        )
        primary = geometry.fragments[0]
        # The slab is symmetric about Y, so every side keeps a boundary quad
        for side in (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST):
            assert len(primary.quads(side)) == 1
