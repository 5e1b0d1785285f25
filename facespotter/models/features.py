"""Data models for detector output and tracker events"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from facespotter.models.enums import LandmarkType, TrackerEventType


# Reported by the detector when it declines to classify a face
UNCOMPUTED_PROBABILITY = -1.0


class Point(NamedTuple):
    """Immutable 2D position in image pixels"""
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: "Point") -> "Point":
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)


def _validate_probability(name: str, value: float) -> None:
    assert value == UNCOMPUTED_PROBABILITY or 0.0 <= value <= 1.0, \
        f"{name} must be in [0, 1] or UNCOMPUTED_PROBABILITY"


@dataclass(frozen=True)
class DetectedFace:
    """A single face found in one frame, before identity assignment

    Attributes:
        position: Top-left corner of the face box
        width: Face box width in pixels
        height: Face box height in pixels
        euler_y: Head yaw in degrees
        euler_z: Head roll in degrees
        landmarks: Landmarks visible in this frame only
        left_eye_open_probability: Probability in [0, 1] or UNCOMPUTED_PROBABILITY
        right_eye_open_probability: Probability in [0, 1] or UNCOMPUTED_PROBABILITY
        smiling_probability: Probability in [0, 1] or UNCOMPUTED_PROBABILITY
    """
    position: Point
    width: float
    height: float
    euler_y: float = 0.0
    euler_z: float = 0.0
    landmarks: Mapping[LandmarkType, Point] = field(default_factory=dict)
    left_eye_open_probability: float = UNCOMPUTED_PROBABILITY
    right_eye_open_probability: float = UNCOMPUTED_PROBABILITY
    smiling_probability: float = UNCOMPUTED_PROBABILITY

    def __post_init__(self):
        """Validate face geometry and freeze the landmark mapping"""
        assert self.width > 0, "Face width must be positive"
        assert self.height > 0, "Face height must be positive"
        _validate_probability("Left eye probability", self.left_eye_open_probability)
        _validate_probability("Right eye probability", self.right_eye_open_probability)
        _validate_probability("Smiling probability", self.smiling_probability)
        object.__setattr__(self, "position", Point(*self.position))
        object.__setattr__(self, "landmarks", MappingProxyType(
            {landmark: Point(*pos) for landmark, pos in self.landmarks.items()}
        ))

    @property
    def center(self) -> Point:
        return Point(self.position.x + self.width / 2.0, self.position.y + self.height / 2.0)


@dataclass(frozen=True)
class FaceDetectionEvent(DetectedFace):
    """One detector update for one tracked face

    Carries everything in DetectedFace plus the stable face ID and the frame
    timestamp (seconds since stream start).
    """
    face_id: int = 0
    timestamp: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        assert self.face_id >= 0, "Face ID must be non-negative"
        assert self.timestamp >= 0, "Timestamp must be non-negative"

    @classmethod
    def from_detected(cls, face: DetectedFace, face_id: int,
                      timestamp: float = 0.0) -> "FaceDetectionEvent":
        return cls(
            position=face.position,
            width=face.width,
            height=face.height,
            euler_y=face.euler_y,
            euler_z=face.euler_z,
            landmarks=face.landmarks,
            left_eye_open_probability=face.left_eye_open_probability,
            right_eye_open_probability=face.right_eye_open_probability,
            smiling_probability=face.smiling_probability,
            face_id=face_id,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class TrackerEvent:
    """Lifecycle event for one face ID

    Attributes:
        kind: What happened to the face
        face_id: Stable face identifier
        detection: Detection data, present only for UPDATE events
    """
    kind: TrackerEventType
    face_id: int
    detection: Optional[FaceDetectionEvent] = None

    def __post_init__(self):
        if self.kind is TrackerEventType.UPDATE:
            assert self.detection is not None, "UPDATE events require detection data"
            assert self.detection.face_id == self.face_id, "Detection face ID mismatch"

    @classmethod
    def first_seen(cls, face_id: int) -> "TrackerEvent":
        return cls(TrackerEventType.FIRST_SEEN, face_id)

    @classmethod
    def update(cls, detection: FaceDetectionEvent) -> "TrackerEvent":
        return cls(TrackerEventType.UPDATE, detection.face_id, detection)

    @classmethod
    def missing(cls, face_id: int) -> "TrackerEvent":
        return cls(TrackerEventType.MISSING, face_id)

    @classmethod
    def gone(cls, face_id: int) -> "TrackerEvent":
        return cls(TrackerEventType.GONE, face_id)
