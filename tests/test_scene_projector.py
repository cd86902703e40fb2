import math

import numpy as np
import pytest

from wall_scanner.catalog import DEFAULT_WALL_COLOR, ElementType, PatternType
from wall_scanner.detection_decoder import Element
from wall_scanner.room_model import RoomModel, Wall
from wall_scanner.scene_projector import (
    CEILING_COLOR,
    FLOOR_COLOR,
    Rotation,
    SceneProjector,
)


def room(walls=()):
    return RoomModel(width=3.5, depth=3.5, height=2.7, walls=tuple(walls))


def test_six_faces_of_four_points():
    faces = SceneProjector().project(room(), Rotation(pitch=20, yaw=45))

    assert len(faces) == 6
    assert {f.name for f in faces} == {"Front", "Right", "Back", "Left", "Floor", "Ceiling"}
    assert all(len(f.points) == 4 for f in faces)
    assert all(len(f.polygon()) == 4 for f in faces)


def test_faces_sorted_far_to_near():
    faces = SceneProjector().project(room(), Rotation(pitch=20, yaw=45))
    depths = [f.avg_z for f in faces]
    assert depths == sorted(depths)


def test_sort_is_stable_for_equal_depths():
    faces = SceneProjector().project(room(), Rotation(pitch=0, yaw=0))
    assert [f.name for f in faces] == ["Back", "Right", "Left", "Floor", "Ceiling", "Front"]


def test_perspective_divide():
    projector = SceneProjector(focal_distance=800, scale=60)
    faces = {f.name: f for f in projector.project(room(), Rotation(0, 0))}
    p0 = faces["Front"].points[0]

    factor = 800 / (800 + 1.75)
    assert p0.x == pytest.approx(-1.75 * 60 * factor)
    assert p0.y == pytest.approx(-1.35 * 60 * factor)
    assert p0.z == pytest.approx(1.75)


def test_pitch_applied_before_yaw():
    rotation = Rotation(pitch=30, yaw=60)
    point = np.array([[1.0, 2.0, 3.0]])
    got = SceneProjector(focal_distance=800, scale=1).project_points(point, rotation)[0]

    a, b = math.radians(30), math.radians(60)
    y1 = 2 * math.cos(a) - 3 * math.sin(a)
    z1 = 2 * math.sin(a) + 3 * math.cos(a)
    x2 = 1 * math.cos(b) + z1 * math.sin(b)
    z2 = -1 * math.sin(b) + z1 * math.cos(b)
    factor = 800 / (800 + z2)

    assert got.z == pytest.approx(z2)
    assert got.x == pytest.approx(x2 * factor)
    assert got.y == pytest.approx(y1 * factor)


def test_fill_colors_and_opacity():
    walls = [Wall(id=1, texture="brick-red", position=0), Wall(id=2, texture="no-such", position=1)]
    faces = {f.name: f for f in SceneProjector().project(room(walls), Rotation())}

    assert faces["Front"].fill_color == "#b91c1c"
    assert faces["Right"].fill_color == DEFAULT_WALL_COLOR
    assert faces["Back"].fill_color == DEFAULT_WALL_COLOR
    assert faces["Back"].wall is None
    assert faces["Floor"].fill_color == FLOOR_COLOR
    assert faces["Ceiling"].fill_color == CEILING_COLOR
    assert faces["Front"].opacity == 0.9
    assert faces["Floor"].opacity == 0.6
    assert faces["Front"].pattern is PatternType.BRICK
    assert faces["Right"].pattern is PatternType.SOLID


def test_marker_placement_is_affine():
    el = Element(0, ElementType.SWITCH, 0.5, 0.5, 0.03, 0.06, 0.9, 0.05, "#f59e0b")
    corner = Element(1, ElementType.DOOR, 0.0, 0.0, 0.3, 0.9, 0.9, 0.05, "#8b5cf6")
    walls = [Wall(id=1, elements=(el, corner), position=0)]
    front = {f.name: f for f in SceneProjector().project(room(walls), Rotation(0, 0))}["Front"]

    center, origin = front.markers
    assert center.x == pytest.approx(0.0, abs=1e-9)
    assert center.y == pytest.approx(0.0, abs=1e-9)
    assert (origin.x, origin.y) == pytest.approx((front.points[0].x, front.points[0].y))
    assert center.icon == "💡"
    assert center.element is el


def test_floor_has_no_markers():
    faces = SceneProjector().project(room(), Rotation())
    assert all(f.markers == () for f in faces)


def test_rotation_clamp_and_advance():
    assert Rotation(pitch=120).pitch == 90
    assert Rotation(pitch=-100).pitch == -90
    assert Rotation(20, 359.5).advanced(1).yaw == pytest.approx(0.5)
    assert Rotation(20, 45).advanced().pitch == 20


def test_path_data():
    face = SceneProjector().project(room(), Rotation())[0]
    path = face.path_data()
    assert path.startswith("M ")
    assert path.endswith(" Z")
    assert path.count("L ") == 4
