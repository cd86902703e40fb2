"""
Scanner Configuration
=====================
Tunable parameters shared by detection, analysis and projection.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Tuple


@dataclass
class ScannerConfig:
    """Configuration for the wall scanner."""
    # Detection model
    model_path: str = "models/yolo-elements.onnx"
    input_size: int = 640  # model input side length (pixels)
    input_name: str = "images"
    conf_threshold: float = 0.5
    iou_threshold: float = 0.4
    execution_providers: Tuple[str, ...] = ("CPUExecutionProvider",)
    graph_optimization_level: str = "all"

    # Surface analysis
    edge_threshold: int = 50  # gradient magnitude on the 0-255 scale
    analysis_interval: float = 0.5  # seconds

    # Scan progress
    progress_interval: float = 0.1  # seconds
    progress_step: float = 1.5  # percent per tick

    # 3D view
    focal_distance: float = 800.0
    projection_scale: float = 60.0
    rotation_step: float = 1.0  # degrees per auto-rotate tick

    # Room defaults (meters)
    room_width: float = 3.5
    room_depth: float = 3.5
    room_height: float = 2.7
    default_texture: str = "paint-white"

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScannerConfig":
        """Build a config from a plain dict, collecting unknown keys in ``extra``."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known and k != "extra"}
        if "execution_providers" in kwargs:
            kwargs["execution_providers"] = tuple(kwargs["execution_providers"])
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(**kwargs, extra=extra)
