"""
Tests for the agent/obstacle overlap model.
"""

import pytest

from core.collision import BoundingBox, CollisionModel, Obstacle
from core.robot_state import Vector3


@pytest.fixture
def crate():
    # x, z in [1.5, 2.5], y in [0, 1]
    return Obstacle(Vector3(2, 0.5, 2), Vector3(1, 1, 1))


class TestBoundingBox:

    def test_from_center(self):
        box = BoundingBox.from_center(Vector3(1, 2, 3), Vector3(2, 4, 6))
        assert (box.min_x, box.min_y, box.min_z) == (0, 0, 0)
        assert (box.max_x, box.max_y, box.max_z) == (2, 4, 6)

    def test_touching_faces_intersect(self):
        a = BoundingBox(0, 0, 0, 1, 1, 1)
        b = BoundingBox(1, 0, 0, 2, 1, 1)
        c = BoundingBox(1.01, 0, 0, 2, 1, 1)
        assert a.intersects(b)
        assert not a.intersects(c)


class TestObstacle:

    def test_from_dict(self):
        obstacle = Obstacle.from_dict({"position": {"x": 1, "y": 2, "z": 3},
                                       "size": {"x": 2, "y": 2, "z": 2}})
        assert obstacle.bounds == BoundingBox(0, 1, 2, 2, 3, 4)
        assert obstacle.to_dict()["size"] == {"x": 2.0, "y": 2.0, "z": 2.0}

    def test_from_dict_defaults_to_unit_cube_at_origin(self):
        obstacle = Obstacle.from_dict({})
        assert obstacle.bounds == BoundingBox(-0.5, -0.5, -0.5, 0.5, 0.5, 0.5)


class TestCollisionModel:

    def test_no_obstacles_never_collides(self):
        assert not CollisionModel().collides(Vector3(0, 0, 0))

    def test_overlap_and_clearance(self, crate):
        model = CollisionModel([crate], agent_size=(1.0, 0.5, 1.0))
        assert model.collides(Vector3(2, 0, 2))
        assert model.collides(Vector3(1, 0, 2))  # faces touch at x = 1.5
        assert not model.collides(Vector3(0.9, 0, 2))

    def test_footprint_uses_larger_horizontal_extent(self, crate):
        # depth 1.5 widens the footprint along x as well
        model = CollisionModel([crate], agent_size=(0.5, 0.5, 1.5))
        assert model.collides(Vector3(0.8, 0, 2))
        assert not model.collides(Vector3(0.7, 0, 2))

    def test_vertical_extent(self, crate):
        model = CollisionModel([crate], agent_size=(1.0, 0.5, 1.0))
        assert model.collides(Vector3(2, 1.0, 2))
        assert not model.collides(Vector3(2, 1.1, 2))
        assert not model.collides(Vector3(2, -0.6, 2))

    def test_set_obstacles_and_agent_size(self, crate):
        model = CollisionModel()
        model.set_obstacles([crate])
        assert not model.collides(Vector3(0.5, 0, 2))
        model.set_agent_size((2.2, 0.5, 0.2))
        assert model.collides(Vector3(0.5, 0, 2))

    def test_agent_bounds(self):
        model = CollisionModel(agent_size=(1.0, 0.5, 1.5))
        assert model.agent_bounds(Vector3(0, 0, 0)) == BoundingBox(-0.75, 0, -0.75, 0.75, 0.5, 0.75)


class TestSweep:

    @pytest.fixture
    def model(self, crate):
        return CollisionModel([crate], agent_size=(1.0, 0.5, 1.0))

    def test_clear_move(self, model):
        assert model.sweep(Vector3(0, 0, 0), Vector3(0, 0, 5)) is None

    def test_first_contact_fraction(self, model):
        # Footprint reaches x = 1.5 when the agent centre is at x = 1
        assert model.sweep(Vector3(-2, 0, 2), Vector3(2, 0, 2)) == pytest.approx(0.75)

    def test_move_that_jumps_past_the_obstacle_still_hits(self, model):
        assert model.sweep(Vector3(2, 0, -5), Vector3(2, 0, 20)) == pytest.approx(6.0 / 25)

    def test_move_stopping_short(self, model):
        assert model.sweep(Vector3(-2, 0, 2), Vector3(0.9, 0, 2)) is None

    def test_passing_beside_or_above(self, model, crate):
        assert model.sweep(Vector3(3.1, 0, -5), Vector3(3.1, 0, 5)) is None
        assert model.sweep(Vector3(2, 1.2, -5), Vector3(2, 1.2, 5)) is None

    def test_diagonal_contact(self, model):
        hit = model.sweep(Vector3(0, 0, 0), Vector3(4, 0, 4))
        assert hit == pytest.approx(0.25)

    def test_ignored_obstacle(self, model, crate):
        assert model.sweep(Vector3(-2, 0, 2), Vector3(2, 0, 2), ignore=[crate]) is None

    def test_overlapping(self, model, crate):
        assert model.overlapping(Vector3(2, 0, 2)) == [crate]
        assert model.overlapping(Vector3(0, 0, 0)) == []
