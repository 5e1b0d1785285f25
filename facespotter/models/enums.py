"""Enumerations for landmarks, tracker events and session states"""

from enum import Enum


class LandmarkType(Enum):
    """Facial landmarks reported by the detector.

    Left and right refer to the subject's own left and right, so LEFT_EYE
    appears on the right-hand side of an unmirrored image.
    """
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_CHEEK = "left_cheek"
    RIGHT_CHEEK = "right_cheek"
    NOSE_BASE = "nose_base"
    LEFT_EAR = "left_ear"
    LEFT_EAR_TIP = "left_ear_tip"
    RIGHT_EAR = "right_ear"
    RIGHT_EAR_TIP = "right_ear_tip"
    LEFT_MOUTH = "left_mouth"
    BOTTOM_MOUTH = "bottom_mouth"
    RIGHT_MOUTH = "right_mouth"


# Landmarks that must all resolve before a face can be drawn
REQUIRED_LANDMARKS = frozenset({
    LandmarkType.LEFT_EYE,
    LandmarkType.RIGHT_EYE,
    LandmarkType.NOSE_BASE,
    LandmarkType.LEFT_MOUTH,
    LandmarkType.BOTTOM_MOUTH,
    LandmarkType.RIGHT_MOUTH,
})


class TrackerEventType(Enum):
    """Per-face events emitted by the identity tracker"""
    FIRST_SEEN = "first_seen"
    UPDATE = "update"
    MISSING = "missing"  # Momentarily undetected
    GONE = "gone"        # Out of view for good


class SessionState(Enum):
    """Lifecycle of a tracked face session"""
    NEW = "new"
    ACTIVE = "active"
    MISSING = "missing"
    DONE = "done"


class CameraFacing(Enum):
    """Which way the camera points relative to the viewer"""
    FRONT = "front"
    REAR = "rear"

    def flipped(self) -> "CameraFacing":
        return CameraFacing.REAR if self is CameraFacing.FRONT else CameraFacing.FRONT
