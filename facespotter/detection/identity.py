"""Face identity assignment across frames

MediaPipe reports faces per frame without identities. This tracker gives each
physical face a stable ID while it stays visible, tolerating short gaps, and
turns each frame's detections into lifecycle events for the session tracker.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from facespotter.models.features import DetectedFace, FaceDetectionEvent, TrackerEvent
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)


@dataclass
class _Track:
    face_id: int
    last_face: DetectedFace
    missed_frames: int = 0


class FaceIdentityTracker:
    """Assigns stable face IDs by nearest-centre matching.

    Faces are matched greedily in order of increasing centre distance,
    measured in face widths. A tracked face that goes unmatched is reported
    MISSING on its first missed frame and GONE once it has been missed for
    more than ``max_gap_frames`` frames in a row. IDs are never reused.

    Attributes:
        max_gap_frames: Consecutive missed frames tolerated before GONE
        max_match_distance: Largest centre distance, in face widths, that
            still counts as the same face
        tracks: Currently tracked faces keyed by ID
    """

    def __init__(self, max_gap_frames: Optional[int] = None,
                 max_match_distance: Optional[float] = None):
        self.max_gap_frames = (max_gap_frames if max_gap_frames is not None
                               else config.get('detector.max_gap_frames', 3))
        self.max_match_distance = (max_match_distance if max_match_distance is not None
                                   else config.get('detector.max_match_distance', 0.75))
        self.tracks: Dict[int, _Track] = {}
        self._next_id = 0

    def _match(self, faces: List[DetectedFace]) -> Dict[int, int]:
        """Map face index -> track ID for faces that continue a track"""
        candidates = []
        for index, face in enumerate(faces):
            for face_id, track in self.tracks.items():
                scale = max(track.last_face.width, face.width)
                distance = face.center.distance_to(track.last_face.center) / scale
                if distance <= self.max_match_distance:
                    candidates.append((distance, index, face_id))

        matches: Dict[int, int] = {}
        used_ids = set()
        for distance, index, face_id in sorted(candidates):
            if index in matches or face_id in used_ids:
                continue
            matches[index] = face_id
            used_ids.add(face_id)
        return matches

    def assign(self, faces: List[DetectedFace], timestamp: float = 0.0) -> List[TrackerEvent]:
        """Turn one frame's detections into tracker events.

        Args:
            faces: Faces detected in the frame
            timestamp: Frame timestamp in seconds

        Returns:
            Events in the order they should be dispatched
        """
        events: List[TrackerEvent] = []
        matches = self._match(faces)

        for index, face in enumerate(faces):
            face_id = matches.get(index)
            if face_id is None:
                face_id = self._next_id
                self._next_id += 1
                self.tracks[face_id] = _Track(face_id, face)
                events.append(TrackerEvent.first_seen(face_id))
                logger.debug(f"New face {face_id} at {face.center}")
            else:
                track = self.tracks[face_id]
                track.last_face = face
                track.missed_frames = 0
            detection = FaceDetectionEvent.from_detected(face, face_id, timestamp)
            events.append(TrackerEvent.update(detection))

        seen_ids = {event.face_id for event in events}
        for face_id in list(self.tracks):
            if face_id in seen_ids:
                continue
            track = self.tracks[face_id]
            track.missed_frames += 1
            if track.missed_frames > self.max_gap_frames:
                del self.tracks[face_id]
                events.append(TrackerEvent.gone(face_id))
                logger.debug(f"Face {face_id} gone after {track.missed_frames} missed frames")
            elif track.missed_frames == 1:
                events.append(TrackerEvent.missing(face_id))

        return events

    def reset(self) -> List[TrackerEvent]:
        """Drop every track, e.g. when the camera is switched"""
        events = [TrackerEvent.gone(face_id) for face_id in sorted(self.tracks)]
        self.tracks.clear()
        return events
