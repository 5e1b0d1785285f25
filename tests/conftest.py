"""Pytest configuration and fixtures"""

from typing import Dict, List, Tuple

import pytest
from hypothesis import settings, Verbosity

from facespotter.models.enums import LandmarkType
from facespotter.models.features import FaceDetectionEvent, Point, UNCOMPUTED_PROBABILITY
from facespotter.models.interfaces import OverlayDrawable, OverlayRenderer

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20, verbosity=Verbosity.normal)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)

# Use CI profile by default
settings.load_profile("ci")


# Proportional landmark layout of a frontal face inside its box
FACE_LAYOUT: Dict[LandmarkType, Tuple[float, float]] = {
    LandmarkType.LEFT_EYE: (0.68, 0.38),
    LandmarkType.RIGHT_EYE: (0.32, 0.38),
    LandmarkType.LEFT_CHEEK: (0.75, 0.6),
    LandmarkType.RIGHT_CHEEK: (0.25, 0.6),
    LandmarkType.NOSE_BASE: (0.5, 0.62),
    LandmarkType.LEFT_EAR: (0.98, 0.45),
    LandmarkType.LEFT_EAR_TIP: (0.95, 0.25),
    LandmarkType.RIGHT_EAR: (0.02, 0.45),
    LandmarkType.RIGHT_EAR_TIP: (0.05, 0.25),
    LandmarkType.LEFT_MOUTH: (0.64, 0.78),
    LandmarkType.BOTTOM_MOUTH: (0.5, 0.86),
    LandmarkType.RIGHT_MOUTH: (0.36, 0.78),
}


class RecordingOverlay(OverlayRenderer):
    """Overlay that records register/unregister calls in order"""

    def __init__(self):
        self.calls: List[Tuple[str, int]] = []
        self.active: Dict[int, OverlayDrawable] = {}

    def register_overlay(self, face_id, drawable):
        self.calls.append(("register", face_id))
        self.active[face_id] = drawable

    def unregister_overlay(self, face_id, drawable):
        self.calls.append(("unregister", face_id))
        if self.active.get(face_id) is drawable:
            del self.active[face_id]


class RecordingGraphic(OverlayDrawable):
    """Graphic that keeps every snapshot it is handed"""

    def __init__(self, face_id: int = 0):
        self.face_id = face_id
        self.snapshots = []

    def update(self, snapshot):
        self.snapshots.append(snapshot)

    def draw(self, canvas, overlay):
        pass


def make_landmarks(x=100.0, y=80.0, width=120.0, height=150.0, only=None):
    """Absolute landmark positions for a face box, optionally a subset"""
    selected = FACE_LAYOUT if only is None else {lm: FACE_LAYOUT[lm] for lm in only}
    return {
        landmark: Point(x + fx * width, y + fy * height)
        for landmark, (fx, fy) in selected.items()
    }


def make_event(face_id=1, x=100.0, y=80.0, width=120.0, height=150.0,
               landmarks=None, left_eye=0.9, right_eye=0.9,
               smiling=UNCOMPUTED_PROBABILITY, timestamp=0.0):
    """Detection event for a frontal face; all landmarks unless given"""
    if landmarks is None:
        landmarks = make_landmarks(x, y, width, height)
    return FaceDetectionEvent(
        position=Point(x, y),
        width=width,
        height=height,
        landmarks=landmarks,
        left_eye_open_probability=left_eye,
        right_eye_open_probability=right_eye,
        smiling_probability=smiling,
        face_id=face_id,
        timestamp=timestamp,
    )


@pytest.fixture
def recording_overlay():
    """Overlay that records registration calls"""
    return RecordingOverlay()


@pytest.fixture
def recording_graphic():
    """Graphic that records snapshots"""
    return RecordingGraphic()
