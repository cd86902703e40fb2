"""
Wall Scanner Workflow
=====================
Main entry point tying the pieces together:
1. Scan: progress ticker plus periodic surface analysis
2. Capture: detect elements and record the wall
3. Materials: apply textures to captured walls
4. View: project the room model for the 3D preview

All work runs on a single asyncio event loop.
"""

import asyncio
import json
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional
import logging

import numpy as np

from .catalog import TEXTURES
from .config import ScannerConfig
from .detection_decoder import Element
from .element_detector import ElementDetector
from .errors import CaptureError
from .frame_encoder import load_frame
from .room_model import RoomAssembler, RoomModel, Wall
from .scene_projector import ProjectedFace, Rotation, SceneProjector
from .surface_analyzer import SurfaceAnalysis, SurfaceAnalyzer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

FrameSource = Callable[[], Optional[np.ndarray]]


class WallScanner:
    """
    Scanning session state and the operations the UI drives.
    """

    def __init__(
        self,
        frame_source: FrameSource,
        detector: ElementDetector,
        config: Optional[ScannerConfig] = None
    ):
        """
        Args:
            frame_source: Returns the current camera frame, or None if not ready
            detector: Element detector with its inference session
            config: Scanner settings
        """
        self.config = config or ScannerConfig()
        self.frame_source = frame_source
        self.detector = detector
        self.analyzer = SurfaceAnalyzer(edge_threshold=self.config.edge_threshold)
        self.assembler = RoomAssembler(
            width=self.config.room_width,
            depth=self.config.room_depth,
            height=self.config.room_height,
            default_texture=self.config.default_texture
        )
        self.projector = SceneProjector(
            focal_distance=self.config.focal_distance,
            scale=self.config.projection_scale
        )

        self.is_scanning = False
        self.is_capturing = False
        self.progress = 0.0
        self.surface: Optional[SurfaceAnalysis] = None
        self.detected_elements: List[Element] = []
        self.selected_texture = self.config.default_texture
        self.rotation = Rotation()
        self.auto_rotate = True

        self._tasks: List[asyncio.Task] = []

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    @property
    def scan_complete(self) -> bool:
        return self.progress >= 100

    def sample_surface(self) -> Optional[SurfaceAnalysis]:
        """Analyze the current frame and keep the result if there was one."""
        analysis = self.analyzer.analyze(self.frame_source())
        if analysis is not None:
            self.surface = analysis
        return analysis

    async def _analysis_loop(self) -> None:
        while self.is_scanning and not self.scan_complete:
            self.sample_surface()
            await asyncio.sleep(self.config.analysis_interval)

    async def _progress_loop(self) -> None:
        while self.is_scanning and not self.scan_complete:
            await asyncio.sleep(self.config.progress_interval)
            self.progress = min(self.progress + self.config.progress_step, 100.0)
        if self.scan_complete:
            logger.info("Scan progress complete")

    async def start_scan(self) -> None:
        """Begin a scan; progress and surface analysis run on their own timers."""
        await self.stop_scan()

        self.is_scanning = True
        self.progress = 0.0
        self.surface = None
        self.detected_elements = []

        self._tasks = [
            asyncio.create_task(self._analysis_loop()),
            asyncio.create_task(self._progress_loop()),
        ]
        logger.info("Scan started")

    async def stop_scan(self) -> None:
        self.is_scanning = False
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def refresh_detections(self) -> List[Element]:
        """Live preview detection; results of superseded requests are ignored."""
        elements = await self.detector.detect_latest(self.frame_source())
        if elements is not None:
            self.detected_elements = elements
        return self.detected_elements

    async def capture_wall(self) -> Wall:
        """
        Detect elements on the current frame and record the wall.

        Raises:
            CaptureError: if a capture is running or the scan is not complete
        """
        if self.is_capturing:
            raise CaptureError("Capture already in progress")
        if not self.is_scanning or not self.scan_complete:
            raise CaptureError(f"Scan not complete ({self.progress:.0f}%)")

        self.is_capturing = True
        try:
            elements = await self.detector.detect(self.frame_source())
            surface = self.surface
            wall = self.assembler.add_wall(
                elements,
                texture=self.selected_texture,
                surface_type=surface.surface_type if surface else None,
                quality=surface.quality if surface else 0
            )
            self.detected_elements = elements
            await self.stop_scan()
            self.progress = 0.0
            return wall
        finally:
            self.is_capturing = False

    # ------------------------------------------------------------------
    # Materials
    # ------------------------------------------------------------------

    def select_texture(self, texture_id: str) -> None:
        if texture_id not in TEXTURES:
            raise ValueError(f"Unknown texture: {texture_id}")
        self.selected_texture = texture_id

    def apply_texture(self, index: int, texture_id: Optional[str] = None) -> Wall:
        """Apply a texture (default: the selected one) to the wall at index."""
        return self.assembler.apply_texture(index, texture_id or self.selected_texture)

    # ------------------------------------------------------------------
    # Room view
    # ------------------------------------------------------------------

    @property
    def walls(self):
        return self.assembler.walls

    @property
    def room_model(self) -> Optional[RoomModel]:
        return self.assembler.room_model

    def set_rotation(self, pitch: Optional[float] = None, yaw: Optional[float] = None) -> Rotation:
        self.rotation = Rotation(
            self.rotation.pitch if pitch is None else pitch,
            self.rotation.yaw if yaw is None else yaw
        )
        return self.rotation

    def tick_rotation(self) -> Rotation:
        """Advance auto-rotation by one step when enabled and a room exists."""
        if self.auto_rotate and self.room_model is not None:
            self.rotation = self.rotation.advanced(self.config.rotation_step)
        return self.rotation

    def render(self) -> List[ProjectedFace]:
        """Projected faces for the current rotation; empty before a room exists."""
        if self.room_model is None:
            return []
        return self.projector.project(self.room_model, self.rotation)

    def export_json(self) -> Optional[str]:
        return self.assembler.export_json()

    async def reset(self) -> None:
        await self.stop_scan()
        self.assembler.reset()
        self.detected_elements = []
        self.progress = 0.0
        self.surface = None
        logger.info("Scanner reset")

    async def close(self) -> None:
        await self.stop_scan()
        await self.detector.close()


def analyze_wall_image(
    image_path: str,
    model_path: Optional[str] = None,
    config: Optional[ScannerConfig] = None
) -> Dict[str, Any]:
    """
    Convenience function: surface analysis (and detection if a model is given)
    for a single image.

    Returns:
        Dictionary with 'surface' and 'elements'
    """
    config = config or ScannerConfig()
    frame = load_frame(image_path)

    analysis = SurfaceAnalyzer(edge_threshold=config.edge_threshold).analyze(frame)
    result = {
        'image': image_path,
        'surface': analysis.to_dict() if analysis else None,
        'elements': [],
    }

    if model_path:
        config = replace(config, model_path=model_path)
        detector = ElementDetector.from_config(config)

        async def _detect():
            try:
                return await detector.detect(frame)
            finally:
                await detector.close()

        result['elements'] = [el.to_dict() for el in asyncio.run(_detect())]

    return result


# Command-line interface
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Wall surface analysis")
    parser.add_argument("--input", "-i", required=True, help="Input image path")
    parser.add_argument("--model", "-m", help="ONNX detection model path")
    parser.add_argument("--conf", type=float, default=0.5, help="Confidence threshold")
    parser.add_argument("--iou", type=float, default=0.4, help="NMS IOU threshold")

    args = parser.parse_args()

    result = analyze_wall_image(
        args.input,
        model_path=args.model,
        config=ScannerConfig(conf_threshold=args.conf, iou_threshold=args.iou)
    )

    print(json.dumps(result, indent=2, ensure_ascii=False))
