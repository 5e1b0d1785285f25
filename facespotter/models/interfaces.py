"""Base interfaces for the detector and renderer collaborators"""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from facespotter.models.frames import VideoFrame
from facespotter.models.features import DetectedFace
from facespotter.models.results import FaceSnapshot


class FaceDetectorInterface(ABC):
    """Interface for face detectors feeding the tracker"""

    @abstractmethod
    def detect(self, video_frame: VideoFrame) -> List[DetectedFace]:
        """Detect faces in a video frame

        Args:
            video_frame: Frame to analyze

        Returns:
            Faces found in this frame, in no particular order
        """
        pass

    def close(self) -> None:
        """Release detector resources"""
        pass


class OverlayDrawable(ABC):
    """A graphic drawn on top of the video for one tracked face"""

    @abstractmethod
    def update(self, snapshot: FaceSnapshot) -> None:
        """Publish the latest snapshot and request a redraw

        Args:
            snapshot: Immutable face state for the current frame
        """
        pass

    @abstractmethod
    def draw(self, canvas: np.ndarray, overlay: "OverlayRenderer") -> None:
        """Draw the most recent snapshot onto the canvas

        Args:
            canvas: BGR image to draw on, modified in place
            overlay: Renderer providing coordinate translation
        """
        pass


class OverlayRenderer(ABC):
    """Rendering surface that face graphics register with"""

    @abstractmethod
    def register_overlay(self, face_id: int, drawable: OverlayDrawable) -> None:
        """Start drawing a face graphic"""
        pass

    @abstractmethod
    def unregister_overlay(self, face_id: int, drawable: OverlayDrawable) -> None:
        """Stop drawing a face graphic"""
        pass
