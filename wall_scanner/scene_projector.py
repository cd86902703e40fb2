"""
Scene Projection Module
=======================
Projects the room box to 2D drawable geometry:
1. Rotate corners by pitch (X axis) then yaw (Y axis)
2. Perspective divide with a fixed focal distance
3. Order faces back-to-front (painter's algorithm)
4. Place element markers inside each wall face
"""

import numpy as np
from typing import List, NamedTuple, Optional, Tuple
from dataclasses import dataclass, field
import logging

from .catalog import ELEMENT_STYLES, DEFAULT_WALL_COLOR, PatternType, get_texture, texture_color
from .detection_decoder import Element
from .room_model import RoomModel, Wall

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


FLOOR_COLOR = "#94a3b8"
CEILING_COLOR = "#e2e8f0"
WALL_OPACITY = 0.9
PLANE_OPACITY = 0.6  # floor and ceiling

PITCH_LIMIT = 90.0


@dataclass(frozen=True)
class Rotation:
    """View rotation in degrees. Pitch is clamped to [-90, 90]."""
    pitch: float = 20.0
    yaw: float = 45.0

    def __post_init__(self):
        object.__setattr__(self, 'pitch', max(-PITCH_LIMIT, min(PITCH_LIMIT, float(self.pitch))))

    def advanced(self, step: float = 1.0) -> "Rotation":
        """Next auto-rotate frame: yaw moves by step, wrapping at 360."""
        return Rotation(self.pitch, (self.yaw + step) % 360)

    def matrix(self) -> np.ndarray:
        """Combined rotation, pitch applied first then yaw."""
        px, py = np.radians(self.pitch), np.radians(self.yaw)
        cx, sx = np.cos(px), np.sin(px)
        cy, sy = np.cos(py), np.sin(py)

        rot_x = np.array([
            [1, 0, 0],
            [0, cx, -sx],
            [0, sx, cx]
        ])
        rot_y = np.array([
            [cy, 0, sy],
            [0, 1, 0],
            [-sy, 0, cy]
        ])
        return rot_y @ rot_x


class ProjectedPoint(NamedTuple):
    x: float
    y: float
    z: float  # rotated depth, kept for sorting


@dataclass(frozen=True)
class ElementMarker:
    """Where to draw an element on a projected wall."""
    element: Element
    x: float
    y: float
    color: str
    icon: str


@dataclass(frozen=True)
class ProjectedFace:
    """A face of the room ready to draw."""
    name: str
    points: Tuple[ProjectedPoint, ...]
    fill_color: str
    opacity: float
    avg_z: float
    wall: Optional[Wall] = None
    markers: Tuple[ElementMarker, ...] = field(default_factory=tuple)
    pattern: PatternType = PatternType.SOLID

    def polygon(self) -> List[Tuple[float, float]]:
        return [(p.x, p.y) for p in self.points]

    def path_data(self) -> str:
        """SVG path outlining the face."""
        head = self.points[0]
        segments = " ".join(f"L {p.x:.2f} {p.y:.2f}" for p in self.points)
        return f"M {head.x:.2f} {head.y:.2f} {segments} Z"


def room_faces(width: float, depth: float, height: float) -> List[Tuple[str, np.ndarray, Optional[int]]]:
    """
    Corner points of the six room faces.

    Returns:
        (name, 4x3 corner array, wall index or None) per face
    """
    w, d, h = width / 2, depth / 2, height / 2
    return [
        ("Front", np.array([[-w, -h, d], [w, -h, d], [w, h, d], [-w, h, d]]), 0),
        ("Right", np.array([[w, -h, d], [w, -h, -d], [w, h, -d], [w, h, d]]), 1),
        ("Back", np.array([[w, -h, -d], [-w, -h, -d], [-w, h, -d], [w, h, -d]]), 2),
        ("Left", np.array([[-w, -h, -d], [-w, -h, d], [-w, h, d], [-w, h, -d]]), 3),
        ("Floor", np.array([[-w, -h, d], [w, -h, d], [w, -h, -d], [-w, -h, -d]]), None),
        ("Ceiling", np.array([[-w, h, d], [w, h, d], [w, h, -d], [-w, h, -d]]), None),
    ]


class SceneProjector:
    """
    Computes 2D geometry for the 3D room view. Drawing is left to the caller.
    """

    def __init__(self, focal_distance: float = 800.0, scale: float = 60.0):
        """
        Args:
            focal_distance: Perspective distance D in screen units
            scale: Meters to screen units
        """
        self.focal_distance = focal_distance
        self.scale = scale

    def project_points(self, points: np.ndarray, rotation: Rotation) -> List[ProjectedPoint]:
        """Rotate and perspective-project an (N, 3) array of points."""
        rotated = np.asarray(points, dtype=np.float64) @ rotation.matrix().T
        factor = self.focal_distance / (self.focal_distance + rotated[:, 2])

        xs = rotated[:, 0] * self.scale * factor
        ys = rotated[:, 1] * self.scale * factor
        return [ProjectedPoint(float(x), float(y), float(z)) for x, y, z in zip(xs, ys, rotated[:, 2])]

    @staticmethod
    def place_markers(wall: Wall, points: List[ProjectedPoint]) -> Tuple[ElementMarker, ...]:
        """
        Map element positions into a projected face.

        x runs along corner 0 -> 1 and y along corner 0 -> 2. This is a
        linear mapping without perspective correction.
        """
        p0, p1, p2 = points[0], points[1], points[2]
        markers = []
        for el in wall.elements:
            style = ELEMENT_STYLES[el.type]
            markers.append(ElementMarker(
                element=el,
                x=p0.x + el.x * (p1.x - p0.x),
                y=p0.y + el.y * (p2.y - p0.y),
                color=style.color,
                icon=style.icon
            ))
        return tuple(markers)

    def project(self, room: RoomModel, rotation: Optional[Rotation] = None) -> List[ProjectedFace]:
        """
        Project all six faces of the room.

        Returns:
            Faces in draw order, farthest (lowest average z) first
        """
        rotation = rotation or Rotation()
        faces = []

        for name, corners, wall_index in room_faces(room.width, room.depth, room.height):
            points = self.project_points(corners, rotation)
            avg_z = sum(p.z for p in points) / len(points)

            if wall_index is None:
                fill = FLOOR_COLOR if name == "Floor" else CEILING_COLOR
                faces.append(ProjectedFace(name, tuple(points), fill, PLANE_OPACITY, avg_z))
                continue

            wall = room.wall_at(wall_index)
            texture = get_texture(wall.texture) if wall else None
            fill = texture_color(wall.texture) if wall else DEFAULT_WALL_COLOR
            markers = self.place_markers(wall, points) if wall else ()
            faces.append(ProjectedFace(
                name, tuple(points), fill, WALL_OPACITY, avg_z, wall, markers,
                pattern=texture.type if texture else PatternType.SOLID
            ))

        faces.sort(key=lambda f: f.avg_z)
        return faces
