"""Live face detection with a transparent image overlay."""

from .compositor import composite
from .errors import (
    CaptureFailure,
    ClassifierLoadFailure,
    DeviceUnavailable,
    FaceOverlayError,
    InvalidFormat,
)
from .pipeline import FramePipeline
from .refresh import RefreshDriver
from .vision import FaceDetector, FaceRect, select_largest

__all__ = [
    "CaptureFailure",
    "ClassifierLoadFailure",
    "DeviceUnavailable",
    "FaceDetector",
    "FaceOverlayError",
    "FaceRect",
    "FramePipeline",
    "InvalidFormat",
    "RefreshDriver",
    "composite",
    "select_largest",
]
