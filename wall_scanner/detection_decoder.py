"""
Detection Decoding Module
=========================
Decodes raw YOLO-style model output into wall elements:
1. Parse [cx, cy, w, h, confidence, class scores...] records
2. Filter by confidence and convert to corner-form boxes
3. Suppress overlapping duplicates (NMS over IOU)
4. Map class indices to element types and normalize coordinates
"""

import numpy as np
from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass
import logging

from .catalog import CLASS_INDEX_TO_TYPE, ELEMENT_STYLES, UNKNOWN_CLASS, ElementType

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class RawDetection:
    """Candidate box in model-input pixel coordinates (corner form)."""
    x: float
    y: float
    width: float
    height: float
    confidence: float
    class_index: int
    class_name: str = UNKNOWN_CLASS

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Element:
    """A detected wall fixture in surface-relative coordinates (0-1)."""
    id: int
    type: ElementType
    x: float
    y: float
    width: float
    height: float
    confidence: float
    depth: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'type': self.type.value,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'confidence': self.confidence,
            'depth': self.depth,
            'color': self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Element":
        return cls(
            id=int(data['id']),
            type=ElementType(data['type']),
            x=float(data['x']),
            y=float(data['y']),
            width=float(data['width']),
            height=float(data['height']),
            confidence=float(data['confidence']),
            depth=float(data['depth']),
            color=data['color'],
        )


def calculate_iou(box1, box2) -> float:
    """
    Intersection over union of two corner-form boxes.

    Boxes only need x, y, width and height attributes. Boxes that do not
    overlap (including ones that merely touch) score 0.
    """
    ix_min = max(box1.x, box2.x)
    iy_min = max(box1.y, box2.y)
    ix_max = min(box1.x + box1.width, box2.x + box2.width)
    iy_max = min(box1.y + box1.height, box2.y + box2.height)

    if ix_min >= ix_max or iy_min >= iy_max:
        return 0.0

    intersection = (ix_max - ix_min) * (iy_max - iy_min)
    union = box1.width * box1.height + box2.width * box2.height - intersection
    if union <= 0:
        return 0.0

    return float(intersection / union)


def non_max_suppression(detections: Sequence, iou_threshold: float = 0.4) -> List:
    """
    Keep the most confident box of each overlapping cluster.

    Candidates are visited in descending confidence (ties keep input
    order); a candidate is dropped when its IOU with any kept box exceeds
    the threshold.
    """
    if not detections:
        return []

    ordered = sorted(detections, key=lambda d: d.confidence, reverse=True)

    keep = []
    for det in ordered:
        if all(calculate_iou(kept, det) <= iou_threshold for kept in keep):
            keep.append(det)

    return keep


class DetectionDecoder:
    """
    Decodes YOLO output of shape [batch, candidates, 5 + num_classes].
    """

    def __init__(
        self,
        input_size: int = 640,
        conf_threshold: float = 0.5,
        iou_threshold: float = 0.4,
        class_offset: int = 5,
        num_classes: Optional[int] = None,
        confidence_index: int = 4
    ):
        """
        Initialize the decoder.

        Args:
            input_size: Model input side length, used to normalize boxes
            conf_threshold: Candidates at or below this confidence are dropped
            iou_threshold: Overlap above which the weaker box is suppressed
            class_offset: Index of the first class score in a record
            num_classes: Number of class scores (default: rest of the record)
            confidence_index: Index of the confidence value in a record
        """
        self.input_size = input_size
        self.conf_threshold = conf_threshold
        self.iou_threshold = iou_threshold
        self.class_offset = class_offset
        self.num_classes = num_classes
        self.confidence_index = confidence_index

    def _as_records(self, output) -> Optional[np.ndarray]:
        """Validate the output tensor and return the first batch's records."""
        if output is None:
            return None

        try:
            data = np.asarray(output, dtype=np.float32)
        except (TypeError, ValueError) as e:
            logger.warning(f"Unreadable detection output: {e}")
            return None

        if data.ndim == 2:
            data = data[np.newaxis, ...]

        if data.ndim != 3 or data.shape[0] == 0:
            logger.warning(f"Unexpected detection output shape: {data.shape}")
            return None

        record_size = data.shape[2]
        num_classes = self.num_classes if self.num_classes is not None else record_size - self.class_offset
        if num_classes < 1 or self.class_offset + num_classes > record_size \
                or self.confidence_index >= record_size:
            logger.warning(f"Detection records too short: size {record_size}")
            return None

        return data[0]

    def parse(self, output) -> List[RawDetection]:
        """
        Parse and confidence-filter raw records.

        Returns:
            Candidates above the confidence threshold, in record order
        """
        records = self._as_records(output)
        if records is None:
            return []

        end = None if self.num_classes is None else self.class_offset + self.num_classes
        detections = []

        for record in records:
            confidence = float(record[self.confidence_index])
            if not confidence > self.conf_threshold:
                continue

            cx, cy, w, h = (float(v) for v in record[:4])
            class_index = int(np.argmax(record[self.class_offset:end]))
            element_type = CLASS_INDEX_TO_TYPE.get(class_index)

            detections.append(RawDetection(
                x=cx - w / 2,
                y=cy - h / 2,
                width=w,
                height=h,
                confidence=confidence,
                class_index=class_index,
                class_name=element_type.value if element_type else UNKNOWN_CLASS
            ))

        return detections

    def to_elements(self, detections: List[RawDetection]) -> List[Element]:
        """Convert kept detections to normalized elements, dropping unknown classes."""
        size = float(self.input_size)
        elements = []

        for det in detections:
            if det.class_name == UNKNOWN_CLASS:
                continue

            element_type = ElementType(det.class_name)
            style = ELEMENT_STYLES[element_type]
            elements.append(Element(
                id=len(elements),
                type=element_type,
                x=det.x / size,
                y=det.y / size,
                width=det.width / size,
                height=det.height / size,
                confidence=det.confidence,
                depth=style.depth,
                color=style.color
            ))

        return elements

    def decode(self, output) -> List[Element]:
        """
        Full decode: parse, suppress overlaps, map to elements.

        Args:
            output: Model output array [batch, candidates, record] (or without batch)

        Returns:
            Elements in suppression-kept order; empty for missing or malformed output
        """
        candidates = self.parse(output)
        kept = non_max_suppression(candidates, self.iou_threshold)
        elements = self.to_elements(kept)

        logger.info(
            f"Decoded {len(elements)} elements "
            f"({len(candidates)} candidates, {len(kept)} after NMS)"
        )
        return elements
