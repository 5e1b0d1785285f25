"""Unit tests for GraphicOverlay and FaceGraphic"""

import numpy as np
import pytest

from facespotter.models.enums import CameraFacing, LandmarkType
from facespotter.models.features import Point
from facespotter.models.results import FaceSnapshot
from facespotter.render.face_graphic import FaceGraphic, star_polygon
from facespotter.render.overlay import GraphicOverlay

from conftest import RecordingGraphic, make_landmarks


def renderable_snapshot(face_id=1, **overrides):
    """Snapshot of a face in a 120x150 box at (100, 80)"""
    landmarks = make_landmarks(100, 80, 120, 150)
    left_eye = landmarks[LandmarkType.LEFT_EYE]
    right_eye = landmarks[LandmarkType.RIGHT_EYE]
    eye_radius = 0.45 * left_eye.distance_to(right_eye)
    fields = dict(
        face_id=face_id,
        landmarks=landmarks,
        left_iris=left_eye,
        right_iris=right_eye,
        eye_radius=eye_radius,
        iris_radius=eye_radius / 2.0,
        position=Point(100, 80),
        width=120,
        height=150,
    )
    fields.update(overrides)
    return FaceSnapshot(**fields)


@pytest.fixture
def canvas():
    """Blank 320x240 BGR canvas"""
    return np.zeros((240, 320, 3), dtype=np.uint8)


class TestGraphicOverlay:
    """Tests for registration and coordinate translation"""

    def test_register_and_unregister(self):
        """Test that graphics come and go from the registry"""
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        graphic = RecordingGraphic(1)

        overlay.register_overlay(1, graphic)
        assert overlay.is_registered(1)
        assert len(overlay) == 1

        overlay.unregister_overlay(1, graphic)
        assert not overlay.is_registered(1)

    def test_unregister_ignores_stale_drawable(self):
        """Test that a replaced graphic is not removed by its old owner"""
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        old, new = RecordingGraphic(1), RecordingGraphic(1)
        overlay.register_overlay(1, old)
        overlay.register_overlay(1, new)

        overlay.unregister_overlay(1, old)

        assert overlay.graphics == [new]

    def test_rear_translation_scales_only(self, canvas):
        """Test rear-camera coordinates are scaled, not mirrored"""
        overlay = GraphicOverlay(CameraFacing.REAR, 160, 120)
        overlay.draw(canvas)

        assert overlay.translate(Point(10, 20)) == Point(20.0, 40.0)
        assert overlay.scale(5.0) == 10.0

    def test_front_translation_mirrors_x(self, canvas):
        """Test front-camera coordinates are mirrored horizontally"""
        overlay = GraphicOverlay(CameraFacing.FRONT, 320, 240)
        overlay.draw(canvas)

        assert overlay.translate(Point(10, 20)) == Point(310.0, 20.0)

    def test_draw_survives_failing_graphic(self, canvas):
        """Test that one broken graphic does not stop the others"""
        class Broken(RecordingGraphic):
            def draw(self, canvas, overlay):
                raise RuntimeError("boom")

        drawn = []

        class Marker(RecordingGraphic):
            def draw(self, canvas, overlay):
                drawn.append(self.face_id)

        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        overlay.register_overlay(1, Broken(1))
        overlay.register_overlay(2, Marker(2))

        result = overlay.draw(canvas)

        assert result is canvas
        assert drawn == [2]


class TestFaceGraphic:
    """Tests for drawing the face overlay"""

    def test_nothing_drawn_without_snapshot(self, canvas):
        """Test that a graphic with no snapshot leaves the canvas untouched"""
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        overlay.register_overlay(1, FaceGraphic(1))

        overlay.draw(canvas)

        assert not canvas.any()

    def test_non_renderable_snapshot_not_drawn(self, canvas):
        """Test that a snapshot missing required landmarks is skipped"""
        graphic = FaceGraphic(1)
        graphic.update(FaceSnapshot(face_id=1, landmarks=make_landmarks(only=[LandmarkType.LEFT_EYE])))
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        overlay.register_overlay(1, graphic)

        overlay.draw(canvas)

        assert not canvas.any()
        assert graphic.update_count == 1

    def test_renderable_snapshot_draws_eyes(self, canvas):
        """Test that a full snapshot paints white eyes at the eye positions"""
        snapshot = renderable_snapshot()
        graphic = FaceGraphic(1, draw_hat=False, show_id=False)
        graphic.update(snapshot)
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        overlay.register_overlay(1, graphic)

        overlay.draw(canvas)

        # Between the iris edge and the outline the eye is white
        eye = snapshot.left_eye
        sample = (int(eye.y), int(eye.x + snapshot.eye_radius * 0.75))
        assert tuple(canvas[sample]) == (255, 255, 255)

    def test_closed_eye_not_white(self, canvas):
        """Test that a closed eye is drawn as a lid"""
        snapshot = renderable_snapshot(left_eye_open=False)
        graphic = FaceGraphic(1, draw_hat=False, show_id=False)
        graphic.update(snapshot)
        overlay = GraphicOverlay(CameraFacing.REAR, 320, 240)
        overlay.register_overlay(1, graphic)

        overlay.draw(canvas)

        eye = snapshot.left_eye
        sample = (int(eye.y - snapshot.eye_radius * 0.5), int(eye.x))
        assert tuple(canvas[sample]) != (255, 255, 255)
        assert canvas[sample].any()

    def test_hat_and_id_draw_without_error(self, canvas):
        """Test drawing with every decoration enabled, smiling"""
        graphic = FaceGraphic(1, draw_hat=True, show_id=True)
        graphic.update(renderable_snapshot(smiling=True))
        overlay = GraphicOverlay(CameraFacing.FRONT, 320, 240)
        overlay.register_overlay(1, graphic)

        overlay.draw(canvas)

        assert canvas.any()


def test_star_polygon_shape():
    """Test that a five-pointed star has ten vertices within its radius"""
    star = star_polygon(Point(50, 50), 10.0)

    assert star.shape == (10, 2)
    assert star.dtype == np.int32
    assert np.all(np.hypot(star[:, 0] - 50, star[:, 1] - 50) <= 10.5)
