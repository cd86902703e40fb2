"""
Element Detection
=================
Runs the full detection path for one camera frame:
frame -> tensor -> model -> decoded wall elements.

Detection is best-effort: any failure is logged and yields no elements.
"""

from typing import List, Optional
import logging

import numpy as np

from .config import ScannerConfig
from .detection_decoder import DetectionDecoder, Element
from .frame_encoder import FrameEncoder
from .inference import InferenceSession, select_output

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ElementDetector:
    """
    Detects outlets, switches, windows and doors in camera frames.
    """

    def __init__(
        self,
        session: InferenceSession,
        encoder: Optional[FrameEncoder] = None,
        decoder: Optional[DetectionDecoder] = None
    ):
        self.session = session
        self.encoder = encoder or FrameEncoder()
        self.decoder = decoder or DetectionDecoder(input_size=self.encoder.input_size)
        self._request_seq = 0

    @classmethod
    def from_config(cls, config: ScannerConfig, loader=None) -> "ElementDetector":
        """Build a detector and its session from scanner settings."""
        session = InferenceSession(
            model_path=config.model_path,
            loader=loader,
            providers=config.execution_providers,
            graph_optimization_level=config.graph_optimization_level,
            input_name=config.input_name
        )
        return cls(
            session,
            encoder=FrameEncoder(config.input_size),
            decoder=DetectionDecoder(
                input_size=config.input_size,
                conf_threshold=config.conf_threshold,
                iou_threshold=config.iou_threshold
            )
        )

    async def detect(self, frame: Optional[np.ndarray]) -> List[Element]:
        """
        Detect elements in a frame of any size.

        Returns:
            Decoded elements, or an empty list if the frame is not ready,
            the model fails, or its output is malformed
        """
        try:
            tensor = self.encoder.encode_any(frame)
            if tensor is None:
                return []

            outputs = await self.session.run(tensor)
            elements = self.decoder.decode(select_output(outputs))
        except Exception as e:
            logger.error(f"Element detection failed: {e}")
            return []

        logger.info(f"Detected elements: {[el.type.value for el in elements]}")
        return elements

    async def detect_latest(self, frame: Optional[np.ndarray]) -> Optional[List[Element]]:
        """
        Detect, but drop the result if a newer request started meanwhile.

        Returns:
            Elements for the newest request, or None for a stale one
        """
        self._request_seq += 1
        token = self._request_seq

        elements = await self.detect(frame)

        if token != self._request_seq:
            logger.info(f"Discarding stale detection result (request {token})")
            return None
        return elements

    async def close(self) -> None:
        await self.session.release()
