"""Integration tests for the FaceSpotter pipeline

These tests drive the full capture -> detect -> identify -> track -> draw
path with a scripted detector standing in for MediaPipe and a mocked OpenCV
capture, so they run without a camera.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from facespotter.detection.face_mesh import DetectorError, MediaPipeFaceDetector
from facespotter.main import FaceSpotter, CaptureError, parse_source
from facespotter.models.enums import CameraFacing, LandmarkType
from facespotter.models.features import DetectedFace, Point
from facespotter.models.frames import VideoFrame
from facespotter.models.interfaces import FaceDetectorInterface

from conftest import make_landmarks


def detected_face(x=100.0, y=60.0, width=120.0, height=150.0, only=None,
                  left_eye=0.9, smiling=0.1):
    return DetectedFace(
        position=Point(x, y),
        width=width,
        height=height,
        landmarks=make_landmarks(x, y, width, height, only=only),
        left_eye_open_probability=left_eye,
        right_eye_open_probability=0.9,
        smiling_probability=smiling,
    )


class ScriptedDetector(FaceDetectorInterface):
    """Detector returning a prepared list of faces per call"""

    def __init__(self, script):
        self.script = list(script)
        self.closed = False

    def detect(self, video_frame):
        result = self.script.pop(0) if self.script else []
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


def frame(number=0, timestamp=None):
    return VideoFrame(
        image=np.zeros((240, 320, 3), dtype=np.uint8),
        timestamp=number / 30.0 if timestamp is None else timestamp,
        frame_number=number
    )


def make_spotter(script, facing=CameraFacing.REAR):
    return FaceSpotter(source=0, facing=facing, detector=ScriptedDetector(script))


class TestPipeline:
    """End-to-end frame processing"""

    def test_face_is_tracked_and_drawn(self):
        """Test that a detected face produces a snapshot and a drawn overlay"""
        spotter = make_spotter([[detected_face()]])

        snapshots = spotter.process_frame(frame(0))
        canvas = spotter.render(frame(0))

        assert len(snapshots) == 1
        assert snapshots[0].is_renderable
        assert spotter.overlay.is_registered(snapshots[0].face_id)
        assert canvas.any()

    def test_partial_face_drawn_from_memory(self):
        """Test that landmarks dropped in a later frame are reconstructed"""
        only_eyes = [LandmarkType.LEFT_EYE, LandmarkType.RIGHT_EYE]
        spotter = make_spotter([
            [detected_face()],
            [detected_face(x=110, only=only_eyes)],
        ])

        spotter.process_frame(frame(0))
        snapshot = spotter.process_frame(frame(1))[0]

        assert snapshot.is_renderable
        assert snapshot.nose_base.x == pytest.approx(110 + 0.5 * 120)

    def test_face_hidden_while_missing_then_gone(self):
        """Test overlay registration as a face disappears"""
        spotter = make_spotter([[detected_face()]])
        face_id = spotter.process_frame(frame(0))[0].face_id

        spotter.process_frame(frame(1))
        assert not spotter.overlay.is_registered(face_id)
        assert spotter.tracker.get_session(face_id) is not None

        for number in range(2, 6):
            spotter.process_frame(frame(number))

        assert spotter.tracker.get_session(face_id) is None
        assert len(spotter.overlay) == 0

    def test_face_returns_under_same_id(self):
        """Test that a briefly lost face keeps its session"""
        spotter = make_spotter([[detected_face(left_eye=0.1)], [], [detected_face(x=105)]])

        first = spotter.process_frame(frame(0))[0]
        spotter.process_frame(frame(1))
        again = spotter.process_frame(frame(2))[0]

        assert again.face_id == first.face_id
        assert spotter.overlay.is_registered(first.face_id)

    def test_two_faces_tracked_independently(self):
        """Test that two faces get separate sessions"""
        spotter = make_spotter([[detected_face(x=10, width=80), detected_face(x=200, width=80)]])

        snapshots = spotter.process_frame(frame(0))

        assert sorted(s.face_id for s in snapshots) == [0, 1]
        assert len(spotter.overlay) == 2

    def test_detector_failure_skips_frame(self):
        """Test that a detector error leaves tracked faces alone"""
        spotter = make_spotter([[detected_face()], DetectorError("mesh failed")])
        face_id = spotter.process_frame(frame(0))[0].face_id

        assert spotter.process_frame(frame(1)) == []
        assert spotter.overlay.is_registered(face_id)

    def test_front_camera_render_is_mirrored(self):
        """Test that the front camera mirrors the frame before drawing"""
        spotter = make_spotter([], facing=CameraFacing.FRONT)
        image = np.zeros((240, 320, 3), dtype=np.uint8)
        image[:, :10] = 255
        video_frame = VideoFrame(image=image, timestamp=0.0, frame_number=0)

        canvas = spotter.render(video_frame)

        assert canvas[:, -10:].all()
        assert not canvas[:, :10].any()
        # Source frame is untouched
        assert image[:, :10].all()

    def test_shutdown_finishes_sessions(self):
        """Test that shutdown closes sessions and the detector"""
        spotter = make_spotter([[detected_face()]])
        spotter.process_frame(frame(0))
        detector = spotter.detector

        spotter.shutdown()

        assert spotter.tracker.face_ids == []
        assert len(spotter.overlay) == 0
        assert detector.closed


class TestCapture:
    """Capture source handling"""

    def test_run_processes_until_source_ends(self):
        """Test the main loop over a mocked capture"""
        images = [np.zeros((240, 320, 3), dtype=np.uint8) for _ in range(3)]
        capture = MagicMock()
        capture.isOpened.return_value = True
        capture.read.side_effect = [(True, img) for img in images] + [(False, None)]
        capture.get.return_value = 0.0

        spotter = FaceSpotter(source="clip.mp4", detector=ScriptedDetector([[detected_face()]]))
        with patch('facespotter.main.cv2.VideoCapture', return_value=capture):
            spotter.run(show=False)

        assert spotter.frame_count == 3
        assert spotter.facing is CameraFacing.REAR
        capture.release.assert_called_once()

    def test_unopened_source_raises(self):
        """Test that a source that cannot be opened is reported"""
        capture = MagicMock()
        capture.isOpened.return_value = False
        spotter = make_spotter([])

        with patch('facespotter.main.cv2.VideoCapture', return_value=capture):
            with pytest.raises(CaptureError):
                spotter.open_source()

    def test_flip_camera_finishes_faces(self):
        """Test that flipping the camera ends every tracked face"""
        spotter = make_spotter([[detected_face()]], facing=CameraFacing.FRONT)
        spotter.process_frame(frame(0))
        old_detector = spotter.detector

        spotter.flip_camera()

        assert spotter.facing is CameraFacing.REAR
        assert spotter.tracker.face_ids == []
        assert spotter.overlay.facing is CameraFacing.REAR
        # An injected detector is kept as-is
        assert spotter.detector is old_detector
        assert not old_detector.closed

    def test_flip_camera_rebuilds_face_mesh_detector(self):
        """Test that the MediaPipe detector is recreated for the new facing"""
        detector = MediaPipeFaceDetector(facing=CameraFacing.FRONT, max_faces=3)
        spotter = FaceSpotter(source=0, facing=CameraFacing.FRONT, detector=detector)

        spotter.flip_camera()

        assert isinstance(spotter.detector, MediaPipeFaceDetector)
        assert spotter.detector is not detector
        assert spotter.detector.facing is CameraFacing.REAR
        assert spotter.detector.max_faces == 3
        assert not spotter.detector.prominent_face_only

    @pytest.mark.parametrize("argument,expected", [
        ("0", 0), ("2", 2), ("video.mp4", "video.mp4"),
    ])
    def test_parse_source(self, argument, expected):
        """Test camera index vs file path parsing"""
        assert parse_source(argument) == expected
