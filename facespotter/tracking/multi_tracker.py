"""Routes per-face tracker events to their sessions"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from facespotter.models.enums import TrackerEventType
from facespotter.models.features import FaceDetectionEvent, TrackerEvent
from facespotter.models.interfaces import OverlayDrawable, OverlayRenderer
from facespotter.models.results import FaceSnapshot
from facespotter.tracking.session import FaceTrackSession


logger = logging.getLogger(__name__)


GraphicFactory = Callable[[int], OverlayDrawable]


class MultiFaceTracker:
    """Owns one FaceTrackSession per visible face.

    Sessions are created when a face is first seen and destroyed when the
    detector reports it gone. They share no state, so events for different
    faces may be handled in any order.

    Attributes:
        overlay: Rendering surface shared by all face graphics
        graphic_factory: Builds the drawable for a new face ID
        session_options: Extra keyword arguments for every FaceTrackSession
        sessions: Live sessions keyed by face ID
    """

    def __init__(self, overlay: OverlayRenderer, graphic_factory: GraphicFactory,
                 **session_options):
        self.overlay = overlay
        self.graphic_factory = graphic_factory
        self.session_options = session_options
        self.sessions: Dict[int, FaceTrackSession] = {}

    @property
    def face_ids(self) -> List[int]:
        return sorted(self.sessions)

    def get_session(self, face_id: int) -> Optional[FaceTrackSession]:
        return self.sessions.get(face_id)

    def on_first_seen(self, face_id: int) -> FaceTrackSession:
        session = self.sessions.get(face_id)
        if session is not None:
            logger.warning(f"Face {face_id} reported new but already tracked")
            return session

        session = FaceTrackSession(face_id, self.overlay, self.graphic_factory(face_id),
                                   **self.session_options)
        self.sessions[face_id] = session
        session.start()
        return session

    def on_update(self, detection: FaceDetectionEvent) -> FaceSnapshot:
        session = self.sessions.get(detection.face_id)
        if session is None:
            logger.debug(f"Update for unseen face {detection.face_id}, starting session")
            session = self.on_first_seen(detection.face_id)
        return session.update(detection)

    def on_missing(self, face_id: int) -> None:
        session = self.sessions.get(face_id)
        if session is None:
            logger.warning(f"Missing reported for unknown face {face_id}")
            return
        session.mark_missing()

    def on_gone(self, face_id: int) -> None:
        session = self.sessions.pop(face_id, None)
        if session is None:
            logger.warning(f"Gone reported for unknown face {face_id}")
            return
        session.close()

    def dispatch(self, event: TrackerEvent) -> Optional[FaceSnapshot]:
        """Handle one tracker event.

        Returns:
            The new snapshot for UPDATE events, otherwise None
        """
        if event.kind is TrackerEventType.FIRST_SEEN:
            self.on_first_seen(event.face_id)
        elif event.kind is TrackerEventType.UPDATE:
            return self.on_update(event.detection)
        elif event.kind is TrackerEventType.MISSING:
            self.on_missing(event.face_id)
        elif event.kind is TrackerEventType.GONE:
            self.on_gone(event.face_id)
        return None

    def process(self, events: Iterable[TrackerEvent]) -> List[FaceSnapshot]:
        """Handle a frame's worth of events, returning the snapshots produced"""
        snapshots = []
        for event in events:
            snapshot = self.dispatch(event)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def clear(self) -> None:
        """Finish every session, e.g. when the video source changes"""
        for face_id in list(self.sessions):
            self.on_gone(face_id)
