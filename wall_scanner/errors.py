"""
Wall Scanner Errors
===================
Exception types raised by the scanner core.
"""


class WallScannerError(Exception):
    """Base class for scanner errors."""


class FrameSizeError(WallScannerError):
    """Frame buffer does not match the model input size."""

    def __init__(self, expected: int, shape):
        self.expected = expected
        self.shape = tuple(shape)
        super().__init__(
            f"Expected a {expected}x{expected} RGB/RGBA frame, got shape {self.shape}"
        )


class ModelLoadError(WallScannerError):
    """Inference session could not be created."""

    def __init__(self, model_path: str, cause: Exception):
        self.model_path = model_path
        self.cause = cause
        super().__init__(f"Failed to load model '{model_path}': {cause}")


class SessionStateError(WallScannerError):
    """Session used in a state that does not allow it."""


class CaptureError(WallScannerError):
    """Capture requested while the scanner cannot take one."""
