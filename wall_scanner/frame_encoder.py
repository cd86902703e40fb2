"""
Frame Encoding Module
=====================
Turns captured camera frames into model input tensors:
1. Resize/crop a frame into the square model input buffer
2. Drop alpha and normalize samples to [0, 1]
3. Lay channels out as planar R, G, B with a batch axis
"""

import cv2
import numpy as np
from typing import Optional
import logging

from .errors import FrameSizeError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def frame_is_empty(frame: Optional[np.ndarray]) -> bool:
    """True when there is no readable pixel data (camera not ready yet)."""
    return frame is None or frame.ndim < 2 or frame.shape[0] == 0 or frame.shape[1] == 0


def prepare_frame(frame: np.ndarray, size: int = 640) -> np.ndarray:
    """
    Resize a frame to the square model input size.

    Mirrors drawing the video element into a size x size canvas: the whole
    frame is stretched, aspect ratio is not preserved.
    """
    h, w = frame.shape[:2]
    if (h, w) == (size, size):
        return frame

    interpolation = cv2.INTER_AREA if max(h, w) > size else cv2.INTER_LINEAR
    resized = cv2.resize(frame, (size, size), interpolation=interpolation)
    logger.debug(f"Resized frame {w}x{h} -> {size}x{size}")
    return resized


def load_frame(image_path: str) -> np.ndarray:
    """
    Load an image file as an RGBA frame.

    Returns:
        uint8 array of shape (H, W, 4)
    """
    img = cv2.imread(image_path, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Failed to load image: {image_path}")

    logger.info(f"Loaded frame: {image_path}, {img.shape[1]}x{img.shape[0]}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)


class FrameEncoder:
    """
    Encodes an N x N RGBA/RGB frame as a [1, 3, N, N] float32 tensor.
    """

    def __init__(self, input_size: int = 640):
        """
        Args:
            input_size: Side length of the square model input
        """
        self.input_size = input_size

    def encode(self, frame: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """
        Encode a frame that is already input_size x input_size.

        Returns:
            Tensor of shape (1, 3, N, N), or None when the frame is empty

        Raises:
            FrameSizeError: if the buffer is not N x N with 3 or 4 channels
        """
        if frame_is_empty(frame):
            logger.warning("Frame not ready, skipping encode")
            return None

        n = self.input_size
        if frame.ndim != 3 or frame.shape[:2] != (n, n) or frame.shape[2] not in (3, 4):
            raise FrameSizeError(n, frame.shape)

        rgb = frame[:, :, :3].astype(np.float32) / 255.0
        tensor = np.transpose(rgb, (2, 0, 1))[np.newaxis, ...]
        return np.ascontiguousarray(tensor, dtype=np.float32)

    def encode_any(self, frame: Optional[np.ndarray]) -> Optional[np.ndarray]:
        """Resize a frame of any size to the model input, then encode it."""
        if frame_is_empty(frame):
            logger.warning("Frame not ready, skipping encode")
            return None
        return self.encode(prepare_frame(frame, self.input_size))
