"""
Room Model Module
=================
Captured walls and the room snapshot built from them:
1. Wall records (elements, material, surface quality)
2. RoomModel snapshots regenerated whenever walls change
3. JSON export/import of a snapshot
"""

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from dataclasses import dataclass, field, replace
import logging

from .catalog import TEXTURES
from .detection_decoder import Element
from .surface_analyzer import SurfaceType

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


MIN_WALLS_FOR_MODEL = 2


def _utc_now() -> datetime:
    now = datetime.now(timezone.utc)
    # JSON timestamps carry milliseconds; keep the in-memory value identical
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_timestamp(text: str) -> datetime:
    return datetime.fromisoformat(text.replace('Z', '+00:00'))


@dataclass(frozen=True)
class Wall:
    """A captured wall surface."""
    id: int
    elements: Tuple[Element, ...] = ()
    texture: str = "paint-white"
    width: float = 3.5
    height: float = 2.7
    position: int = 0
    surface_type: SurfaceType = SurfaceType.WALL
    quality: int = 0

    def with_texture(self, texture_id: str) -> "Wall":
        return replace(self, texture=texture_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'elements': [el.to_dict() for el in self.elements],
            'texture': self.texture,
            'dimensions': {'width': self.width, 'height': self.height},
            'position': self.position,
            'surfaceType': self.surface_type.value,
            'quality': self.quality,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Wall":
        dims = data.get('dimensions', {})
        return cls(
            id=int(data['id']),
            elements=tuple(Element.from_dict(el) for el in data.get('elements', [])),
            texture=data['texture'],
            width=float(dims.get('width', 3.5)),
            height=float(dims.get('height', 2.7)),
            position=int(data['position']),
            surface_type=SurfaceType(data.get('surfaceType', SurfaceType.WALL.value)),
            quality=int(data.get('quality', 0)),
        )


@dataclass(frozen=True)
class RoomModel:
    """Snapshot of the room at generation time."""
    width: float
    depth: float
    height: float
    walls: Tuple[Wall, ...] = ()
    generated_at: datetime = field(default_factory=_utc_now)

    def wall_at(self, index: int) -> Optional[Wall]:
        return self.walls[index] if 0 <= index < len(self.walls) else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'width': self.width,
            'depth': self.depth,
            'height': self.height,
            'walls': [w.to_dict() for w in self.walls],
            'generatedAt': format_timestamp(self.generated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomModel":
        return cls(
            width=float(data['width']),
            depth=float(data['depth']),
            height=float(data['height']),
            walls=tuple(Wall.from_dict(w) for w in data.get('walls', [])),
            generated_at=parse_timestamp(data['generatedAt']),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "RoomModel":
        return cls.from_dict(json.loads(text))


class RoomAssembler:
    """
    Collects captured walls and keeps the room model in sync.
    """

    def __init__(
        self,
        width: float = 3.5,
        depth: float = 3.5,
        height: float = 2.7,
        default_texture: str = "paint-white"
    ):
        """
        Args:
            width: Room width (meters)
            depth: Room depth (meters)
            height: Room height, also used as captured wall height (meters)
            default_texture: Material for walls captured without one
        """
        self.width = width
        self.depth = depth
        self.height = height
        self.default_texture = default_texture

        self._walls: List[Wall] = []
        self._room_model: Optional[RoomModel] = None
        self._last_id = 0

    @property
    def walls(self) -> Tuple[Wall, ...]:
        return tuple(self._walls)

    @property
    def room_model(self) -> Optional[RoomModel]:
        return self._room_model

    def _next_id(self) -> int:
        # Millisecond timestamps, bumped when two captures share a tick
        wall_id = max(int(time.time() * 1000), self._last_id + 1)
        self._last_id = wall_id
        return wall_id

    def add_wall(
        self,
        elements: Iterable[Element] = (),
        texture: Optional[str] = None,
        surface_type: Optional[SurfaceType] = None,
        quality: int = 0
    ) -> Wall:
        """
        Append a captured wall; regenerates the room once there are two or more.
        """
        wall = Wall(
            id=self._next_id(),
            elements=tuple(elements),
            texture=texture or self.default_texture,
            width=self.width,
            height=self.height,
            position=len(self._walls),
            surface_type=surface_type or SurfaceType.WALL,
            quality=quality
        )
        self._walls.append(wall)
        logger.info(f"Wall captured: position {wall.position}, {len(wall.elements)} elements")

        if len(self._walls) >= MIN_WALLS_FOR_MODEL:
            self.generate()

        return wall

    def generate(self) -> RoomModel:
        """Build a fresh snapshot from the current walls."""
        self._room_model = RoomModel(
            width=self.width,
            depth=self.depth,
            height=self.height,
            walls=tuple(self._walls)
        )
        logger.info(f"Room model generated with {len(self._walls)} walls")
        return self._room_model

    def apply_texture(self, index: int, texture_id: str) -> Wall:
        """
        Give one wall a new material. An existing room model is regenerated.
        """
        if texture_id not in TEXTURES:
            raise ValueError(f"Unknown texture: {texture_id}")
        if not 0 <= index < len(self._walls):
            raise IndexError(f"No wall at position {index}")

        self._walls[index] = self._walls[index].with_texture(texture_id)

        if self._room_model is not None:
            self.generate()

        return self._walls[index]

    def reset(self) -> None:
        self._walls = []
        self._room_model = None
        logger.info("Room cleared")

    def export_json(self, indent: Optional[int] = 2) -> Optional[str]:
        """Serialized room model, or None before a model exists."""
        if self._room_model is None:
            return None
        return self._room_model.to_json(indent=indent)
