"""
Surface Analysis Module
=======================
Cheap heuristics for live scan feedback:
1. Mean brightness and per-channel color
2. Edge density from neighbour gradients
3. Surface classification and a 0-100 quality score
"""

import math

import numpy as np
from typing import Any, Dict, Optional
from dataclasses import dataclass
from enum import Enum
import logging

from .frame_encoder import frame_is_empty

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class SurfaceType(Enum):
    """Surface classes derived from edge density."""
    SMOOTH_WALL = "smooth-wall"
    WALL = "wall"
    TEXTURED_SURFACE = "textured-surface"
    COMPLEX_SCENE = "complex-scene"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (builtin round() goes to even)."""
    return int(math.floor(value + 0.5))


@dataclass
class SurfaceAnalysis:
    """Result of analyzing one frame."""
    brightness: float
    mean_color: Dict[str, float]
    edge_density: float
    surface_type: SurfaceType
    quality: int  # 0-100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'brightness': round_half_up(self.brightness),
            'color': {k: round(v, 2) for k, v in self.mean_color.items()},
            'edgeDensity': round(self.edge_density, 2),
            'surfaceType': self.surface_type.value,
            'wallQuality': self.quality,
        }


def classify_surface(edge_density: float) -> SurfaceType:
    """Classify a surface by edge density; the first matching rule wins."""
    if edge_density < 0.10:
        return SurfaceType.SMOOTH_WALL
    if edge_density > 0.25:
        return SurfaceType.COMPLEX_SCENE
    if edge_density > 0.15:
        return SurfaceType.TEXTURED_SURFACE
    return SurfaceType.WALL


def quality_score(edge_density: float, brightness: float) -> int:
    """Score 0-100 favouring uncluttered, well lit surfaces."""
    raw = (1 - edge_density) * 0.8 + (brightness / 255) * 0.2
    return round_half_up(100 * min(1.0, max(0.0, raw)))


class SurfaceAnalyzer:
    """
    Computes brightness, color and edge statistics of a captured frame.
    """

    def __init__(self, edge_threshold: int = 50):
        """
        Args:
            edge_threshold: Gradient magnitude (0-255 scale) above which a
                pixel counts as an edge
        """
        self.edge_threshold = edge_threshold

    def edge_density(self, channel: np.ndarray) -> float:
        """
        Fraction of interior pixels whose gradient exceeds the threshold.

        The gradient is |right neighbour - pixel| + |pixel below - pixel|,
        evaluated for every pixel not on the 1-pixel border.
        """
        h, w = channel.shape
        if h < 3 or w < 3:
            return 0.0

        img = channel.astype(np.int32)
        center = img[1:h - 1, 1:w - 1]
        right = img[1:h - 1, 2:w]
        below = img[2:h, 1:w - 1]

        magnitude = np.abs(center - right) + np.abs(below - center)
        edges = np.count_nonzero(magnitude > self.edge_threshold)
        return float(edges) / center.size

    def analyze(self, frame: Optional[np.ndarray]) -> Optional[SurfaceAnalysis]:
        """
        Analyze an RGB/RGBA frame.

        Returns:
            SurfaceAnalysis, or None when the frame has no pixels yet
        """
        if frame_is_empty(frame) or frame.ndim != 3 or frame.shape[2] < 3:
            logger.warning("Frame not ready, skipping surface analysis")
            return None

        rgb = frame[:, :, :3].astype(np.float64)
        means = rgb.reshape(-1, 3).mean(axis=0)
        brightness = float(means.mean())

        # Edges are measured on the red channel
        density = self.edge_density(frame[:, :, 0])

        return SurfaceAnalysis(
            brightness=brightness,
            mean_color={'r': float(means[0]), 'g': float(means[1]), 'b': float(means[2])},
            edge_density=density,
            surface_type=classify_surface(density),
            quality=quality_score(density, brightness)
        )
