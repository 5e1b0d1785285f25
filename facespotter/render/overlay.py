"""Overlay surface that face graphics are registered with and drawn on"""

import logging
import threading
from typing import Dict, List

import numpy as np

from facespotter.models.enums import CameraFacing
from facespotter.models.features import Point
from facespotter.models.interfaces import OverlayDrawable, OverlayRenderer


logger = logging.getLogger(__name__)


class GraphicOverlay(OverlayRenderer):
    """Draws registered face graphics on top of the displayed video.

    Graphics are registered and unregistered from the tracking loop and drawn
    from the display loop, so the registry is guarded by a lock. Coordinates
    arrive in detector frame pixels; the overlay scales them to the canvas and
    mirrors them horizontally for a front-facing camera, whose preview is shown
    mirrored.

    Attributes:
        facing: Camera facing, controls mirroring
        preview_width: Width of frames the detector sees
        preview_height: Height of frames the detector sees
    """

    def __init__(self, facing: CameraFacing = CameraFacing.FRONT,
                 preview_width: int = 0, preview_height: int = 0):
        self._lock = threading.Lock()
        self._graphics: Dict[int, OverlayDrawable] = {}
        self.facing = facing
        self.preview_width = preview_width
        self.preview_height = preview_height
        self._width_scale = 1.0
        self._height_scale = 1.0
        self._canvas_width = preview_width

    def set_camera_info(self, preview_width: int, preview_height: int,
                        facing: CameraFacing) -> None:
        with self._lock:
            self.preview_width = preview_width
            self.preview_height = preview_height
            self.facing = facing

    # Registration
    # ============

    def register_overlay(self, face_id: int, drawable: OverlayDrawable) -> None:
        with self._lock:
            self._graphics[face_id] = drawable
        logger.debug(f"Registered overlay for face {face_id}")

    def unregister_overlay(self, face_id: int, drawable: OverlayDrawable) -> None:
        with self._lock:
            if self._graphics.get(face_id) is drawable:
                del self._graphics[face_id]
                logger.debug(f"Unregistered overlay for face {face_id}")

    def clear(self) -> None:
        with self._lock:
            self._graphics.clear()

    @property
    def graphics(self) -> List[OverlayDrawable]:
        with self._lock:
            return list(self._graphics.values())

    def is_registered(self, face_id: int) -> bool:
        with self._lock:
            return face_id in self._graphics

    def __len__(self) -> int:
        with self._lock:
            return len(self._graphics)

    # Coordinate translation
    # ======================

    def scale(self, value: float) -> float:
        """Scale a length from preview pixels to canvas pixels"""
        return value * self._width_scale

    def translate_x(self, x: float) -> float:
        if self.facing is CameraFacing.FRONT:
            return self._canvas_width - self.scale(x)
        return self.scale(x)

    def translate_y(self, y: float) -> float:
        return y * self._height_scale

    def translate(self, point: Point) -> Point:
        return Point(self.translate_x(point.x), self.translate_y(point.y))

    # Drawing
    # =======

    def draw(self, canvas: np.ndarray) -> np.ndarray:
        """Draw every registered graphic onto the canvas in place"""
        height, width = canvas.shape[:2]
        with self._lock:
            preview_width = self.preview_width or width
            preview_height = self.preview_height or height
            self._canvas_width = width
            self._width_scale = width / float(preview_width)
            self._height_scale = height / float(preview_height)
            graphics = list(self._graphics.values())

        for graphic in graphics:
            try:
                graphic.draw(canvas, self)
            except Exception as e:
                logger.error(f"Failed to draw graphic: {e}", exc_info=True)
        return canvas
