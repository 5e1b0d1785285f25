"""Per-face landmark continuity, eye state hysteresis and iris simulation"""

from facespotter.tracking.landmark_store import LandmarkStore
from facespotter.tracking.state_filter import BinaryStateFilter
from facespotter.tracking.eye_physics import IrisSimulator
from facespotter.tracking.session import FaceTrackSession, SessionClosedError
from facespotter.tracking.multi_tracker import MultiFaceTracker

__all__ = [
    'LandmarkStore',
    'BinaryStateFilter',
    'IrisSimulator',
    'FaceTrackSession',
    'SessionClosedError',
    'MultiFaceTracker',
]
