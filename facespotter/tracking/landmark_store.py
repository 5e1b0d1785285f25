"""Landmark continuity for a single tracked face

As subjects move, part or all of a face may move too quickly for the
detector to report some landmarks, or drift out of its range. The store keeps
each landmark's position relative to the face box so its location can be
approximated during these momentary disappearances.
"""

import logging
from typing import Dict, Mapping, Optional

from facespotter.models.enums import LandmarkType
from facespotter.models.features import Point


logger = logging.getLogger(__name__)


class LandmarkStore:
    """Last-known proportional landmark positions for one face.

    A proportional offset is ``(position - anchor) / (width, height)``. It is
    refreshed every frame the landmark is observed and only used to rebuild the
    landmark in frames where it is not.

    Attributes:
        offsets: Proportional offset per landmark observed at least once
        observed: Absolute positions observed in the current frame
    """

    def __init__(self):
        self.offsets: Dict[LandmarkType, Point] = {}
        self.observed: Dict[LandmarkType, Point] = {}

    def begin_frame(self) -> None:
        """Start a new frame, forgetting the previous frame's observations."""
        self.observed = {}

    def record_observed(self, landmark: LandmarkType, position: Point,
                        anchor: Point, width: float, height: float) -> None:
        """Record a landmark seen in the current frame.

        Args:
            landmark: Which landmark was observed
            position: Absolute position of the landmark
            anchor: Top-left corner of the face box
            width: Face box width
            height: Face box height
        """
        position = Point(*position)
        self.observed[landmark] = position

        if width <= 0 or height <= 0:
            logger.debug(f"Skipping offset for {landmark.name}: degenerate face box "
                         f"{width}x{height}")
            return

        self.offsets[landmark] = Point(
            (position.x - anchor.x) / width,
            (position.y - anchor.y) / height,
        )

    def observe_frame(self, landmarks: Mapping[LandmarkType, Point], anchor: Point,
                      width: float, height: float) -> None:
        """Start a new frame and record every landmark seen in it."""
        self.begin_frame()
        for landmark, position in landmarks.items():
            self.record_observed(landmark, position, anchor, width, height)

    def resolve(self, landmark: LandmarkType, anchor: Point,
                width: float, height: float) -> Optional[Point]:
        """Best known position of a landmark for the current frame.

        Returns the observed position if the landmark was reported this
        frame, otherwise a position rebuilt from its last offset, otherwise
        None.
        """
        observed = self.observed.get(landmark)
        if observed is not None:
            return observed

        offset = self.offsets.get(landmark)
        if offset is None:
            return None

        return Point(anchor.x + offset.x * width, anchor.y + offset.y * height)

    def resolve_all(self, anchor: Point, width: float,
                    height: float) -> Dict[LandmarkType, Optional[Point]]:
        return {
            landmark: self.resolve(landmark, anchor, width, height)
            for landmark in LandmarkType
        }

    def knows(self, landmark: LandmarkType) -> bool:
        return landmark in self.offsets or landmark in self.observed

    def clear(self) -> None:
        self.offsets.clear()
        self.observed.clear()
