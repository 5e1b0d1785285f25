"""Data models and interfaces"""

from facespotter.models.frames import VideoFrame
from facespotter.models.features import (
    UNCOMPUTED_PROBABILITY,
    Point,
    DetectedFace,
    FaceDetectionEvent,
    TrackerEvent,
)
from facespotter.models.results import FaceSnapshot
from facespotter.models.enums import (
    LandmarkType,
    REQUIRED_LANDMARKS,
    TrackerEventType,
    SessionState,
    CameraFacing,
)
from facespotter.models.interfaces import (
    FaceDetectorInterface,
    OverlayDrawable,
    OverlayRenderer,
)

__all__ = [
    # Frames
    "VideoFrame",
    # Features
    "UNCOMPUTED_PROBABILITY",
    "Point",
    "DetectedFace",
    "FaceDetectionEvent",
    "TrackerEvent",
    # Results
    "FaceSnapshot",
    # Enums
    "LandmarkType",
    "REQUIRED_LANDMARKS",
    "TrackerEventType",
    "SessionState",
    "CameraFacing",
    # Interfaces
    "FaceDetectorInterface",
    "OverlayDrawable",
    "OverlayRenderer",
]
