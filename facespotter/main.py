"""Main Application Entry Point

This module wires the capture source, face detector, identity tracker, face
sessions and overlay into a live loop that draws googly eyes, a pig nose, a
mustache and a hat on every face in view.
"""

import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

from facespotter.detection.face_mesh import MediaPipeFaceDetector, DetectorError
from facespotter.detection.identity import FaceIdentityTracker
from facespotter.models.enums import CameraFacing
from facespotter.models.frames import VideoFrame
from facespotter.models.interfaces import FaceDetectorInterface
from facespotter.models.results import FaceSnapshot
from facespotter.render.face_graphic import FaceGraphic
from facespotter.render.overlay import GraphicOverlay
from facespotter.tracking.multi_tracker import MultiFaceTracker
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)

WINDOW_NAME = "FaceSpotter"


class CaptureError(Exception):
    """Exception raised when the video source cannot be opened"""
    pass


class FaceSpotter:
    """Main orchestrator for the face overlay pipeline.

    This class coordinates all components of the system:
    1. Capture source (camera index or video file, via OpenCV)
    2. Face detector (MediaPipe Face Mesh)
    3. Identity tracker (stable face IDs and lifecycle events)
    4. Multi-face tracker (one FaceTrackSession per face)
    5. Graphic overlay (draws every registered face graphic)

    Attributes:
        source: Camera index or video file path
        facing: Current camera facing
        detector: Face detector producing per-frame faces
        identity: Assigns face IDs and emits lifecycle events
        overlay: Drawing surface for face graphics
        tracker: Routes lifecycle events to per-face sessions
        capture: OpenCV capture, opened by open_source()
        frame_count: Frames processed so far
    """

    def __init__(self, source: Union[int, str, None] = None,
                 facing: Optional[CameraFacing] = None,
                 detector: Optional[FaceDetectorInterface] = None):
        logger.info("Initializing FaceSpotter...")

        self.source = source if source is not None else config.get('camera.index', 0)
        if facing is None and not isinstance(self.source, int):
            # Recorded video is shown as-is
            facing = CameraFacing.REAR
        elif facing is None:
            facing = CameraFacing.FRONT if config.get('camera.front_facing', True) else CameraFacing.REAR
        self.facing = facing
        self.preview_width = config.get('camera.preview_width', 320)
        self.preview_height = config.get('camera.preview_height', 240)
        self.fps = config.get('camera.fps', 30)

        self.detector = detector if detector is not None else MediaPipeFaceDetector(facing=facing)
        self.identity = FaceIdentityTracker()
        self.overlay = GraphicOverlay(facing=facing)
        self.tracker = MultiFaceTracker(self.overlay, graphic_factory=FaceGraphic)

        self.capture: Optional[cv2.VideoCapture] = None
        self.frame_count = 0
        self.start_time = 0.0
        self.shutdown_event = threading.Event()

        logger.info("FaceSpotter initialized successfully")

    @property
    def is_camera(self) -> bool:
        return isinstance(self.source, int)

    def open_source(self) -> cv2.VideoCapture:
        """Open the camera or video file.

        Raises:
            CaptureError: If the source cannot be opened
        """
        logger.info(f"Opening video source: {self.source}")
        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            raise CaptureError(f"Failed to open video source: {self.source}")

        if self.is_camera:
            # A low preview resolution keeps the face mesh fast
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.preview_width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.preview_height)
            capture.set(cv2.CAP_PROP_FPS, self.fps)

        self.capture = capture
        self.start_time = time.time()
        self.frame_count = 0
        return capture

    def read_frame(self) -> Optional[VideoFrame]:
        """Read the next frame, or None when the source is exhausted"""
        ok, image = self.capture.read()
        if not ok or image is None:
            return None

        if self.is_camera:
            timestamp = time.time() - self.start_time
        else:
            timestamp = max(self.capture.get(cv2.CAP_PROP_POS_MSEC) / 1000.0, 0.0)

        frame = VideoFrame(image=image, timestamp=timestamp, frame_number=self.frame_count)
        self.frame_count += 1
        return frame

    def process_frame(self, video_frame: VideoFrame) -> List[FaceSnapshot]:
        """Detect faces in a frame and advance every face session.

        A detector failure skips the frame for detection purposes; the faces
        already being tracked are left untouched.
        """
        self.overlay.set_camera_info(video_frame.width, video_frame.height, self.facing)
        try:
            faces = self.detector.detect(video_frame)
        except DetectorError as e:
            logger.warning(f"Detection failed on frame {video_frame.frame_number}: {e}")
            return []

        events = self.identity.assign(faces, video_frame.timestamp)
        return self.tracker.process(events)

    def render(self, video_frame: VideoFrame) -> np.ndarray:
        """Draw the overlay on a copy of the frame, mirrored for a front camera"""
        canvas = video_frame.image.copy()
        if self.facing is CameraFacing.FRONT:
            canvas = cv2.flip(canvas, 1)
        return self.overlay.draw(canvas)

    def flip_camera(self) -> None:
        """Toggle between front and rear facing.

        Every tracked face is finished, since IDs from one camera mean nothing
        to the other.
        """
        self.facing = self.facing.flipped()
        logger.info(f"Switching camera facing to {self.facing.value}")

        self.tracker.process(self.identity.reset())
        if isinstance(self.detector, MediaPipeFaceDetector):
            # Prominence and minimum face size depend on facing
            max_faces = self.detector.max_faces
            self.detector.close()
            self.detector = MediaPipeFaceDetector(facing=self.facing, max_faces=max_faces)
        else:
            logger.debug(f"Keeping injected detector {type(self.detector).__name__}")
        self.overlay.set_camera_info(self.overlay.preview_width, self.overlay.preview_height,
                                     self.facing)

    def stop(self) -> None:
        self.shutdown_event.set()

    def shutdown(self) -> None:
        """Finish all sessions and release the capture and detector."""
        logger.info("Shutting down FaceSpotter...")
        self.tracker.clear()
        self.detector.close()
        if self.capture is not None:
            self.capture.release()
            self.capture = None
        logger.info("FaceSpotter shutdown complete")

    def run(self, show: bool = True) -> None:
        """Run the capture-detect-draw loop until stopped or the source ends.

        Keys (when showing a window): ``f`` flips the camera, ``q`` or Esc quits.
        """
        try:
            logger.info("=" * 60)
            logger.info("Starting FaceSpotter")
            logger.info("=" * 60)

            self.open_source()

            while not self.shutdown_event.is_set():
                video_frame = self.read_frame()
                if video_frame is None:
                    logger.info("Video source exhausted")
                    break

                self.process_frame(video_frame)

                if show:
                    cv2.imshow(WINDOW_NAME, self.render(video_frame))
                    key = cv2.waitKey(1) & 0xFF
                    if key in (ord('q'), 27):
                        break
                    if key == ord('f') and self.is_camera:
                        self.flip_camera()

        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.shutdown()
            if show:
                cv2.destroyAllWindows()


def setup_logging() -> None:
    """Configure logging to file and stdout."""
    log_file = Path(config.get('logging.file', 'logs/facespotter.log'))
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


def setup_signal_handlers(spotter: FaceSpotter):
    """Setup signal handlers for graceful shutdown.

    Args:
        spotter: FaceSpotter instance to stop
    """
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}")
        spotter.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def parse_source(argument: str) -> Union[int, str]:
    """Camera index if the argument is numeric, otherwise a file path"""
    return int(argument) if argument.isdigit() else argument


def main():
    """Main entry point."""
    setup_logging()
    try:
        config.validate()

        source = parse_source(sys.argv[1]) if len(sys.argv) > 1 else None
        if isinstance(source, str) and not Path(source).exists():
            logger.error(f"Video file not found: {source}")
            logger.info("Usage: python -m facespotter.main [camera_index | video_path]")
            return

        spotter = FaceSpotter(source=source)
        setup_signal_handlers(spotter)
        spotter.run()

    except CaptureError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
