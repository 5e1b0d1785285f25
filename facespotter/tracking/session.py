"""Per-face tracking session

A FaceTrackSession lives exactly as long as one tracked face. It turns the
detector's per-frame updates for that face into FaceSnapshots and keeps the
face's graphic registered with the overlay while the face is visible.
"""

import logging
from typing import Optional

from facespotter.models.enums import LandmarkType, SessionState
from facespotter.models.features import FaceDetectionEvent, Point, UNCOMPUTED_PROBABILITY
from facespotter.models.interfaces import OverlayDrawable, OverlayRenderer
from facespotter.models.results import FaceSnapshot
from facespotter.tracking.eye_physics import IrisSimulator
from facespotter.tracking.landmark_store import LandmarkStore
from facespotter.tracking.state_filter import BinaryStateFilter
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)


class SessionClosedError(Exception):
    """Raised when a finished session receives another update"""
    pass


class FaceTrackSession:
    """Tracks one face from first sighting until it is gone for good.

    State machine::

        NEW -> ACTIVE -> MISSING -> ACTIVE (rebound)
                  \\          \\
                   +----------+--> DONE

    While MISSING the graphic is hidden but landmark offsets, eye state memory
    and iris motion are all kept, so a face that reappears picks up where it
    left off.

    Attributes:
        face_id: Detector-assigned face identifier
        state: Current lifecycle state
        overlay: Rendering surface the graphic registers with
        graphic: Drawable receiving this face's snapshots
        landmarks: Proportional landmark memory
        left_eye_filter: Open/closed hysteresis for the left eye
        right_eye_filter: Open/closed hysteresis for the right eye
        smile_filter: Optional smiling hysteresis, None for plain thresholding
        left_iris: Iris simulator for the left eye
        right_iris: Iris simulator for the right eye
        last_snapshot: Most recently published snapshot
    """

    def __init__(self, face_id: int, overlay: OverlayRenderer, graphic: OverlayDrawable,
                 eye_open_threshold: Optional[float] = None,
                 smile_threshold: Optional[float] = None,
                 retain_smile_on_uncomputed: Optional[bool] = None,
                 eye_radius_proportion: Optional[float] = None):
        self.face_id = face_id
        self.overlay = overlay
        self.graphic = graphic
        self.state = SessionState.NEW
        self.registered = False

        self.eye_open_threshold = (eye_open_threshold if eye_open_threshold is not None
                                   else config.get('tracking.eye_open_threshold', 0.4))
        self.smile_threshold = (smile_threshold if smile_threshold is not None
                                else config.get('tracking.smile_threshold', 0.8))
        if retain_smile_on_uncomputed is None:
            retain_smile_on_uncomputed = config.get('tracking.retain_smile_on_uncomputed', False)
        self.eye_radius_proportion = (eye_radius_proportion if eye_radius_proportion is not None
                                      else config.get('tracking.eye_radius_proportion', 0.45))

        self.landmarks: Optional[LandmarkStore] = LandmarkStore()
        self.left_eye_filter: Optional[BinaryStateFilter] = BinaryStateFilter(self.eye_open_threshold)
        self.right_eye_filter: Optional[BinaryStateFilter] = BinaryStateFilter(self.eye_open_threshold)
        self.smile_filter: Optional[BinaryStateFilter] = (
            BinaryStateFilter(self.smile_threshold, initial=False)
            if retain_smile_on_uncomputed else None
        )
        # Each iris gets its own simulator so they move independently
        self.left_iris: Optional[IrisSimulator] = IrisSimulator()
        self.right_iris: Optional[IrisSimulator] = IrisSimulator()

        self.last_snapshot: Optional[FaceSnapshot] = None

    @property
    def is_done(self) -> bool:
        return self.state is SessionState.DONE

    def start(self) -> None:
        """Handle the first sighting of the face: show its graphic."""
        if self.state is not SessionState.NEW:
            logger.debug(f"Face {self.face_id} already started (state={self.state.value})")
            return
        self._register()
        self.state = SessionState.ACTIVE
        logger.info(f"Face {self.face_id} tracking started")

    def update(self, event: FaceDetectionEvent) -> FaceSnapshot:
        """Consume one detector update and publish a snapshot.

        Args:
            event: Detection data for this face in the current frame

        Returns:
            Snapshot of the resolved face state, also pushed to the graphic

        Raises:
            SessionClosedError: If the session has already finished
        """
        if self.state is SessionState.DONE:
            raise SessionClosedError(f"Face {self.face_id} session is closed")

        if self.state is SessionState.NEW:
            self.start()
        elif self.state is SessionState.MISSING:
            self._register()
            self.state = SessionState.ACTIVE
            logger.debug(f"Face {self.face_id} reappeared")

        snapshot = self._build_snapshot(event)
        self.last_snapshot = snapshot
        self.graphic.update(snapshot)

        if not snapshot.is_renderable:
            logger.debug(f"Face {self.face_id} not renderable, missing: "
                         f"{sorted(lm.name for lm in snapshot.missing_landmarks)}")
        return snapshot

    def mark_missing(self) -> None:
        """Hide the graphic while the face is momentarily undetected."""
        if self.state is not SessionState.ACTIVE:
            logger.debug(f"Ignoring missing for face {self.face_id} in state {self.state.value}")
            return
        self._unregister()
        self.state = SessionState.MISSING
        logger.debug(f"Face {self.face_id} missing")

    def close(self) -> None:
        """Handle the face leaving for good; the session cannot be reused."""
        if self.state is SessionState.DONE:
            return
        self._unregister()
        self.state = SessionState.DONE

        self.landmarks = None
        self.left_eye_filter = None
        self.right_eye_filter = None
        self.smile_filter = None
        self.left_iris = None
        self.right_iris = None
        logger.info(f"Face {self.face_id} tracking finished")

    def _register(self) -> None:
        if not self.registered:
            self.overlay.register_overlay(self.face_id, self.graphic)
            self.registered = True

    def _unregister(self) -> None:
        if self.registered:
            self.overlay.unregister_overlay(self.face_id, self.graphic)
            self.registered = False

    def _resolve_smile(self, probability: float):
        if probability is None or probability == UNCOMPUTED_PROBABILITY:
            score = None
        else:
            score = probability

        if self.smile_filter is not None:
            return self.smile_filter.apply(probability), score
        return score is not None and score > self.smile_threshold, score

    def _build_snapshot(self, event: FaceDetectionEvent) -> FaceSnapshot:
        anchor, width, height = event.position, event.width, event.height

        # Learn offsets from everything seen this frame before resolving anything
        self.landmarks.observe_frame(event.landmarks, anchor, width, height)
        resolved = self.landmarks.resolve_all(anchor, width, height)

        left_open = self.left_eye_filter.apply(event.left_eye_open_probability)
        right_open = self.right_eye_filter.apply(event.right_eye_open_probability)
        smiling, smile_score = self._resolve_smile(event.smiling_probability)

        left_eye = resolved[LandmarkType.LEFT_EYE]
        right_eye = resolved[LandmarkType.RIGHT_EYE]
        left_iris: Optional[Point] = None
        right_iris: Optional[Point] = None
        eye_radius = 0.0
        iris_radius = 0.0

        if left_eye is not None and right_eye is not None:
            # Eye size follows the distance between the eyes
            distance = left_eye.distance_to(right_eye)
            eye_radius = self.eye_radius_proportion * distance
            iris_radius = eye_radius / 2.0
            left_iris = self.left_iris.step(left_eye, eye_radius, iris_radius)
            right_iris = self.right_iris.step(right_eye, eye_radius, iris_radius)

        return FaceSnapshot(
            face_id=self.face_id,
            landmarks=resolved,
            left_eye_open=left_open,
            right_eye_open=right_open,
            smiling=smiling,
            smile_score=smile_score,
            left_iris=left_iris,
            right_iris=right_iris,
            eye_radius=eye_radius,
            iris_radius=iris_radius,
            position=anchor,
            width=width,
            height=height,
            euler_y=event.euler_y,
            euler_z=event.euler_z,
            timestamp=event.timestamp,
        )
