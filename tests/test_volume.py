"""Tests for AABB, CollisionVolume and raycasts."""

import pytest

from archshape.geombase import AABB, CollisionVolume, Direction, Frame


class TestAABB:
    def test_rejects_inverted_box(self):
        with pytest.raises(ValueError):
            AABB((1, 0, 0), (0, 1, 1))

    def test_size_and_volume(self):
        box = AABB((0, 0, 0), (1, 0.5, 2))
        assert box.size == (1.0, 0.5, 2.0)
        assert box.volume == pytest.approx(1.0)
        assert box.center == (0.5, 0.25, 1.0)

    def test_degenerate(self):
        assert AABB((0, 0, 0), (1, 0, 1)).is_degenerate
        assert not AABB.unit().is_degenerate

    def test_intersects_excludes_touching(self):
        a = AABB.unit()
        assert not a.intersects(AABB((1, 0, 0), (2, 1, 1)))
        assert a.intersects(AABB((0.5, 0.5, 0.5), (2, 2, 2)))

    def test_merge_and_offset(self):
        a = AABB.unit()
        assert a.merge(a.offset((1, 0, 0))) == AABB((0, 0, 0), (2, 1, 1))

    def test_from_points_needs_points(self):
        with pytest.raises(ValueError):
            AABB.from_points([])


class TestCollisionVolume:
    def test_empty(self):
        assert CollisionVolume.empty().is_empty
        assert CollisionVolume([AABB((0, 0, 0), (1, 1, 0))]).is_empty
        assert CollisionVolume.empty().bounds() is None

    def test_full_cube_at_origin(self):
        cube = CollisionVolume.full_cube(Frame.GLOBAL, (2, 0, 5))
        assert cube.frame is Frame.GLOBAL
        assert cube.bounds() == AABB((2, 0, 5), (3, 1, 6))

    def test_union_requires_same_frame(self):
        local = CollisionVolume.full_cube(Frame.LOCAL)
        with pytest.raises(ValueError):
            local.union(CollisionVolume.full_cube(Frame.GLOBAL))
        assert len(local.union(local.offset((1, 0, 0)))) == 2

    def test_equality_includes_frame(self):
        assert CollisionVolume.full_cube(Frame.LOCAL) != CollisionVolume.full_cube(Frame.GLOBAL)
        assert CollisionVolume.full_cube(Frame.LOCAL) == CollisionVolume.full_cube(Frame.LOCAL)

    def test_total_volume_and_contains(self):
        volume = CollisionVolume([AABB((0, 0, 0), (1, 0.5, 1)), AABB((0, 0.5, 0), (1, 1, 0.5))])
        assert volume.total_volume() == pytest.approx(0.75)
        assert volume.contains((0.5, 0.75, 0.25))
        assert not volume.contains((0.5, 0.75, 0.75))

    def test_as_array_shape(self):
        volume = CollisionVolume.full_cube()
        assert volume.as_array().shape == (1, 2, 3)


class TestRaycast:
    def test_nearest_box_wins(self):
        volume = CollisionVolume([
            AABB((3, 0, 0), (4, 1, 1)),
            AABB((1, 0, 0), (2, 1, 1)),
        ])
        hit = volume.raycast((0, 0.5, 0.5), (10, 0.5, 0.5))
        assert hit is not None
        assert hit.box_index == 1
        assert hit.distance == pytest.approx(1.0)
        assert hit.face is Direction.WEST
        assert hit.point == pytest.approx((1.0, 0.5, 0.5))

    def test_hit_from_above(self):
        volume = CollisionVolume.full_cube()
        hit = volume.raycast((0.5, 3, 0.5), (0.5, -3, 0.5))
        assert hit.face is Direction.UP
        assert hit.distance == pytest.approx(2.0)

    def test_miss(self):
        volume = CollisionVolume.full_cube()
        assert volume.raycast((2, 2, 2), (3, 3, 3)) is None

    def test_segment_too_short(self):
        volume = CollisionVolume.full_cube()
        assert volume.raycast((-2, 0.5, 0.5), (-1, 0.5, 0.5)) is None

    def test_zero_length_segment(self):
        assert CollisionVolume.full_cube().raycast((0.5, 0.5, 0.5), (0.5, 0.5, 0.5)) is None
