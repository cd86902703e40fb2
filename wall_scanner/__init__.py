# Wall Scanner Package
# Fixture detection, surface analysis and room preview for scanned walls

__version__ = "1.0.0"

# Import main classes for easy access
from .config import ScannerConfig
from .catalog import ElementType, ElementStyle, ELEMENT_STYLES, PatternType, Texture, TEXTURES
from .errors import WallScannerError, FrameSizeError, ModelLoadError, SessionStateError, CaptureError
from .frame_encoder import FrameEncoder, prepare_frame, load_frame
from .detection_decoder import RawDetection, Element, DetectionDecoder, calculate_iou, non_max_suppression
from .inference import InferenceSession, SessionState
from .element_detector import ElementDetector
from .surface_analyzer import SurfaceAnalyzer, SurfaceAnalysis, SurfaceType, classify_surface, quality_score
from .room_model import Wall, RoomModel, RoomAssembler
from .scene_projector import SceneProjector, Rotation, ProjectedFace, ProjectedPoint, ElementMarker
from .scanner import WallScanner, analyze_wall_image

__all__ = [
    'ScannerConfig',
    'ElementType',
    'ElementStyle',
    'ELEMENT_STYLES',
    'PatternType',
    'Texture',
    'TEXTURES',
    'WallScannerError',
    'FrameSizeError',
    'ModelLoadError',
    'SessionStateError',
    'CaptureError',
    'FrameEncoder',
    'prepare_frame',
    'load_frame',
    'RawDetection',
    'Element',
    'DetectionDecoder',
    'calculate_iou',
    'non_max_suppression',
    'InferenceSession',
    'SessionState',
    'ElementDetector',
    'SurfaceAnalyzer',
    'SurfaceAnalysis',
    'SurfaceType',
    'classify_surface',
    'quality_score',
    'Wall',
    'RoomModel',
    'RoomAssembler',
    'SceneProjector',
    'Rotation',
    'ProjectedFace',
    'ProjectedPoint',
    'ElementMarker',
    'WallScanner',
    'analyze_wall_image',
]
