"""Face overlay graphic: googly eyes, pig nose, mustache and hat"""

import logging
import math
from typing import Optional

import cv2
import numpy as np

from facespotter.models.enums import LandmarkType
from facespotter.models.features import Point
from facespotter.models.interfaces import OverlayDrawable
from facespotter.models.results import FaceSnapshot
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)


# BGR colours
EYE_WHITE = (255, 255, 255)
EYE_LID = (230, 224, 176)       # powder blue
EYE_IRIS = (19, 69, 139)        # saddle brown
OUTLINE = (0, 0, 0)
STAR = (0, 215, 255)            # gold
NOSE = (180, 150, 255)          # pink
NOSTRIL = (110, 70, 200)
MUSTACHE = (20, 40, 70)
HAT = (30, 30, 30)
HAT_BAND = (40, 40, 200)
ID_TEXT = (255, 255, 0)         # cyan


def _pt(point: Point):
    return int(round(point.x)), int(round(point.y))


def star_polygon(center: Point, radius: float, points: int = 5) -> np.ndarray:
    """Vertices of a star centred on a point, suitable for cv2.fillPoly"""
    angles = np.arange(points * 2) * math.pi / points - math.pi / 2
    radii = np.where(np.arange(points * 2) % 2 == 0, radius, radius * 0.45)
    xs = center.x + radii * np.cos(angles)
    ys = center.y + radii * np.sin(angles)
    return np.stack([xs, ys], axis=1).round().astype(np.int32)


class FaceGraphic(OverlayDrawable):
    """Draws one tracked face's overlay from its latest snapshot.

    The tracking side hands over immutable snapshots through ``update``; the
    display side reads whichever one is current in ``draw``. Snapshots that
    lack a required landmark are not drawn at all.

    Attributes:
        face_id: Face this graphic belongs to
        snapshot: Latest snapshot, None until the first update
        update_count: Number of snapshots received
    """

    def __init__(self, face_id: int, draw_hat: Optional[bool] = None,
                 show_id: Optional[bool] = None):
        self.face_id = face_id
        self.draw_hat = draw_hat if draw_hat is not None else config.get('render.draw_hat', True)
        self.show_id = show_id if show_id is not None else config.get('render.show_ids', True)
        self.nose_width_scale = config.get('render.nose_width_scale', 1.4)
        self.outline_thickness = config.get('render.outline_thickness', 2)
        self.snapshot: Optional[FaceSnapshot] = None
        self.update_count = 0

    def update(self, snapshot: FaceSnapshot) -> None:
        self.snapshot = snapshot
        self.update_count += 1

    def draw(self, canvas: np.ndarray, overlay) -> None:
        snapshot = self.snapshot
        if snapshot is None or not snapshot.is_renderable:
            return

        left_eye = overlay.translate(snapshot.left_eye)
        right_eye = overlay.translate(snapshot.right_eye)
        nose_base = overlay.translate(snapshot.nose_base)
        mouth_left = overlay.translate(snapshot.landmark(LandmarkType.LEFT_MOUTH))
        mouth_right = overlay.translate(snapshot.landmark(LandmarkType.RIGHT_MOUTH))

        eye_radius = overlay.scale(snapshot.eye_radius)
        iris_radius = overlay.scale(snapshot.iris_radius)
        left_iris = overlay.translate(snapshot.left_iris or snapshot.left_eye)
        right_iris = overlay.translate(snapshot.right_iris or snapshot.right_eye)

        if self.draw_hat:
            self._draw_hat(canvas, left_eye, right_eye)

        self._draw_eye(canvas, left_eye, eye_radius, left_iris, iris_radius,
                       snapshot.left_eye_open, snapshot.smiling)
        self._draw_eye(canvas, right_eye, eye_radius, right_iris, iris_radius,
                       snapshot.right_eye_open, snapshot.smiling)
        self._draw_mustache(canvas, nose_base, mouth_left, mouth_right)
        self._draw_nose(canvas, nose_base, left_eye, right_eye, iris_radius)

        if self.show_id:
            origin = overlay.translate(snapshot.position)
            cv2.putText(canvas, f"id: {self.face_id}", _pt(origin),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, ID_TEXT, 1, cv2.LINE_AA)

    def _draw_eye(self, canvas, eye: Point, eye_radius: float, iris: Point,
                  iris_radius: float, is_open: bool, smiling: bool) -> None:
        radius = max(int(round(eye_radius)), 1)
        if is_open:
            cv2.circle(canvas, _pt(eye), radius, EYE_WHITE, -1, cv2.LINE_AA)
            if smiling:
                cv2.fillPoly(canvas, [star_polygon(iris, iris_radius)], STAR, cv2.LINE_AA)
            else:
                cv2.circle(canvas, _pt(iris), max(int(round(iris_radius)), 1),
                           EYE_IRIS, -1, cv2.LINE_AA)
        else:
            cv2.circle(canvas, _pt(eye), radius, EYE_LID, -1, cv2.LINE_AA)
            start = Point(eye.x - eye_radius, eye.y)
            end = Point(eye.x + eye_radius, eye.y)
            cv2.line(canvas, _pt(start), _pt(end), OUTLINE, self.outline_thickness, cv2.LINE_AA)
        cv2.circle(canvas, _pt(eye), radius, OUTLINE, self.outline_thickness, cv2.LINE_AA)

    def _draw_nose(self, canvas, nose_base: Point, left_eye: Point, right_eye: Point,
                   nose_width: float) -> None:
        half_width = nose_width * self.nose_width_scale
        top = (left_eye.y + right_eye.y) / 2.0
        bottom = nose_base.y
        center = Point(nose_base.x, (top + bottom) / 2.0)
        half_height = abs(bottom - top) / 2.0
        if half_width < 1 or half_height < 1:
            return

        axes = (int(round(half_width)), int(round(half_height)))
        cv2.ellipse(canvas, _pt(center), axes, 0, 0, 360, NOSE, -1, cv2.LINE_AA)
        nostril_axes = (max(axes[0] // 4, 1), max(axes[1] // 3, 1))
        for side in (-1, 1):
            nostril = Point(center.x + side * half_width * 0.4, center.y)
            cv2.ellipse(canvas, _pt(nostril), nostril_axes, 0, 0, 360, NOSTRIL, -1, cv2.LINE_AA)

    def _draw_mustache(self, canvas, nose_base: Point, mouth_left: Point,
                       mouth_right: Point) -> None:
        left = min(mouth_left.x, mouth_right.x)
        right = max(mouth_left.x, mouth_right.x)
        top = nose_base.y
        bottom = min(mouth_left.y, mouth_right.y)
        if right - left < 2 or bottom - top < 2:
            return

        center_y = (top + bottom) / 2.0
        half_height = (bottom - top) / 2.0
        quarter = (right - left) / 4.0
        axes = (int(round(quarter)), max(int(round(half_height)), 1))
        for cx in (left + quarter, right - quarter):
            cv2.ellipse(canvas, (int(round(cx)), int(round(center_y))), axes,
                        0, 0, 360, MUSTACHE, -1, cv2.LINE_AA)

    def _draw_hat(self, canvas, left_eye: Point, right_eye: Point) -> None:
        span = left_eye.distance_to(right_eye)
        if span < 2:
            return

        middle = left_eye.midpoint(right_eye)
        brim_y = middle.y - span * 0.9
        brim_half = span * 1.2
        crown_half = span * 0.75
        crown_top = brim_y - span * 1.3

        cv2.rectangle(canvas,
                      _pt(Point(middle.x - crown_half, crown_top)),
                      _pt(Point(middle.x + crown_half, brim_y)),
                      HAT, -1)
        cv2.rectangle(canvas,
                      _pt(Point(middle.x - crown_half, brim_y - span * 0.3)),
                      _pt(Point(middle.x + crown_half, brim_y - span * 0.15)),
                      HAT_BAND, -1)
        cv2.rectangle(canvas,
                      _pt(Point(middle.x - brim_half, brim_y - span * 0.12)),
                      _pt(Point(middle.x + brim_half, brim_y)),
                      HAT, -1)
