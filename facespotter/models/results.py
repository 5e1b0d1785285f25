"""Data models for tracking results"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from facespotter.models.enums import LandmarkType, REQUIRED_LANDMARKS
from facespotter.models.features import Point


@dataclass(frozen=True)
class FaceSnapshot:
    """Renderable state of one tracked face for one frame

    Snapshots are immutable; a session publishes a fresh one per update and
    the renderer only ever reads them.

    Attributes:
        face_id: Stable face identifier
        landmarks: Resolved position for every landmark, None if never observed
        left_eye_open: Resolved open state of the subject's left eye
        right_eye_open: Resolved open state of the subject's right eye
        smiling: Resolved smiling state
        smile_score: Raw smiling probability, None if the detector abstained
        left_iris: Current iris position for the left eye
        right_iris: Current iris position for the right eye
        eye_radius: Drawn eye radius in pixels
        iris_radius: Drawn iris radius in pixels
        position: Top-left corner of the face box
        width: Face box width
        height: Face box height
        euler_y: Head yaw in degrees
        euler_z: Head roll in degrees
        timestamp: Frame timestamp (seconds)
    """
    face_id: int
    landmarks: Mapping[LandmarkType, Optional[Point]]
    left_eye_open: bool = True
    right_eye_open: bool = True
    smiling: bool = False
    smile_score: Optional[float] = None
    left_iris: Optional[Point] = None
    right_iris: Optional[Point] = None
    eye_radius: float = 0.0
    iris_radius: float = 0.0
    position: Point = Point(0.0, 0.0)
    width: float = 0.0
    height: float = 0.0
    euler_y: float = 0.0
    euler_z: float = 0.0
    timestamp: float = 0.0

    def __post_init__(self):
        """Freeze landmarks and validate radii"""
        assert self.eye_radius >= 0, "Eye radius must be non-negative"
        assert 0 <= self.iris_radius <= self.eye_radius, "Iris radius must be in [0, eye_radius]"
        resolved = {landmark: None for landmark in LandmarkType}
        resolved.update(self.landmarks)
        object.__setattr__(self, "landmarks", MappingProxyType(resolved))

    def landmark(self, landmark: LandmarkType) -> Optional[Point]:
        return self.landmarks.get(landmark)

    @property
    def missing_landmarks(self) -> frozenset:
        """Required landmarks that could not be resolved"""
        return frozenset(lm for lm in REQUIRED_LANDMARKS if self.landmarks.get(lm) is None)

    @property
    def is_renderable(self) -> bool:
        """Whether every landmark needed for drawing is known"""
        return not self.missing_landmarks

    @property
    def left_eye(self) -> Optional[Point]:
        return self.landmarks.get(LandmarkType.LEFT_EYE)

    @property
    def right_eye(self) -> Optional[Point]:
        return self.landmarks.get(LandmarkType.RIGHT_EYE)

    @property
    def nose_base(self) -> Optional[Point]:
        return self.landmarks.get(LandmarkType.NOSE_BASE)
