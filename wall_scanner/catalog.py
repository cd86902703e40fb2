"""
Material and Element Catalogs
=============================
Static lookup tables loaded once at import:
1. Element types the detector can report, with display styles
2. Wall materials (textures) offered in the material gallery
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class ElementType(Enum):
    """Wall fixtures recognised by the detection model."""
    OUTLET = "outlet"
    SWITCH = "switch"
    WINDOW = "window"
    DOOR = "door"


# Model class index -> element type
CLASS_INDEX_TO_TYPE = {
    0: ElementType.OUTLET,
    1: ElementType.SWITCH,
    2: ElementType.WINDOW,
    3: ElementType.DOOR,
}

UNKNOWN_CLASS = "unknown"


@dataclass(frozen=True)
class ElementStyle:
    """Display style and nominal size of an element type."""
    type: ElementType
    icon: str
    color: str
    width: float  # fraction of surface width
    height: float  # fraction of surface height
    depth: float  # offset from the wall plane (negative = recessed)


ELEMENT_STYLES: Dict[ElementType, ElementStyle] = {
    ElementType.OUTLET: ElementStyle(ElementType.OUTLET, "⚡", "#ef4444", 0.04, 0.07, 0.05),
    ElementType.SWITCH: ElementStyle(ElementType.SWITCH, "💡", "#f59e0b", 0.035, 0.065, 0.05),
    ElementType.WINDOW: ElementStyle(ElementType.WINDOW, "🪟", "#3b82f6", 0.3, 0.3, -0.1),
    ElementType.DOOR: ElementStyle(ElementType.DOOR, "🚪", "#8b5cf6", 0.35, 0.95, 0.05),
}


class PatternType(Enum):
    """How a material is drawn."""
    SOLID = "solid"
    BRICK = "brick"
    WOOD = "wood"
    PATTERN = "pattern"


@dataclass(frozen=True)
class Texture:
    """A wall material entry."""
    id: str
    name: str
    color: str
    type: PatternType
    roughness: float


TEXTURES: Dict[str, Texture] = {
    t.id: t for t in (
        Texture("paint-white", "Matte White", "#f8f9fa", PatternType.SOLID, 0.8),
        Texture("paint-beige", "Warm Beige", "#f5e6d3", PatternType.SOLID, 0.8),
        Texture("paint-gray", "Soft Gray", "#d1d5db", PatternType.SOLID, 0.8),
        Texture("paint-blue", "Sky Blue", "#bfdbfe", PatternType.SOLID, 0.8),
        Texture("paint-sage", "Sage Green", "#c2e0c6", PatternType.SOLID, 0.8),
        Texture("brick-red", "Red Brick", "#b91c1c", PatternType.BRICK, 0.9),
        Texture("brick-cream", "Cream Brick", "#d4a574", PatternType.BRICK, 0.9),
        Texture("wood-oak", "Light Oak", "#d97706", PatternType.WOOD, 0.6),
        Texture("wood-walnut", "Dark Walnut", "#78350f", PatternType.WOOD, 0.6),
        Texture("wallpaper-floral", "Floral", "#fce7f3", PatternType.PATTERN, 0.7),
        Texture("wallpaper-geometric", "Geometric", "#dbeafe", PatternType.PATTERN, 0.7),
        Texture("concrete", "Industrial Concrete", "#9ca3af", PatternType.SOLID, 0.95),
        Texture("stone", "Stone", "#a1a1a1", PatternType.BRICK, 0.95),
        Texture("marble", "Marble", "#f3f4f6", PatternType.PATTERN, 0.3),
    )
}

DEFAULT_WALL_COLOR = "#f8f9fa"


def get_texture(texture_id: Optional[str]) -> Optional[Texture]:
    """Look up a texture by id, returning None when it is not in the catalog."""
    if texture_id is None:
        return None
    return TEXTURES.get(texture_id)


def texture_color(texture_id: Optional[str]) -> str:
    """Fill color for a texture id; unknown ids render as matte white."""
    texture = get_texture(texture_id)
    return texture.color if texture else DEFAULT_WALL_COLOR
