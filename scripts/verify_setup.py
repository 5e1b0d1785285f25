#!/usr/bin/env python3
"""Check that FaceSpotter can detect faces and draw on this machine

Usage: python scripts/verify_setup.py [--camera]

Loads the configuration, runs the MediaPipe face mesh on a blank frame and,
with --camera, grabs one frame from the configured camera.
"""

import sys
from pathlib import Path

import numpy as np

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def check_config():
    """Configuration loads, validates and gives the iris a valid socket"""
    from facespotter.config.config_loader import config

    config.validate()
    ratio = config.get('iris.max_step_ratio', 0.35)
    if not 0 < ratio <= 1:
        raise ValueError(f"iris.max_step_ratio {ratio} is outside (0, 1]")
    return f"{config.config_path}"


def check_face_mesh():
    """The installed mediapipe still ships the legacy Face Mesh solution"""
    import mediapipe as mp

    if not hasattr(getattr(mp, 'solutions', None), 'face_mesh'):
        raise RuntimeError(f"mediapipe {mp.__version__} has no solutions.face_mesh")
    return f"mediapipe {mp.__version__}"


def check_blank_frame():
    """A frame with no face in it yields no detections"""
    from facespotter.detection.face_mesh import MediaPipeFaceDetector
    from facespotter.models.frames import VideoFrame

    detector = MediaPipeFaceDetector()
    try:
        frame = VideoFrame(image=np.zeros((240, 320, 3), dtype=np.uint8),
                           timestamp=0.0, frame_number=0)
        faces = detector.detect(frame)
    finally:
        detector.close()
    if faces:
        raise RuntimeError(f"{len(faces)} face(s) found in an empty frame")
    return "no faces in an empty frame"


def check_camera():
    """The configured camera opens and delivers a frame"""
    from facespotter.main import FaceSpotter

    spotter = FaceSpotter()
    try:
        spotter.open_source()
        frame = spotter.read_frame()
    finally:
        spotter.shutdown()
    if frame is None:
        raise RuntimeError(f"camera {spotter.source} opened but returned no frame")
    return f"camera {spotter.source}: {frame.width}x{frame.height}"


def main():
    checks = [check_config, check_face_mesh, check_blank_frame]
    if '--camera' in sys.argv[1:]:
        checks.append(check_camera)

    failures = 0
    for check in checks:
        try:
            detail = check()
            print(f"  ✓ {check.__doc__}: {detail}")
        except Exception as e:
            failures += 1
            print(f"  ✗ {check.__doc__}: {e}")

    if failures:
        print(f"\n{failures} check(s) failed")
        return 1
    print("\nReady: python -m facespotter.main")
    return 0


if __name__ == "__main__":
    sys.exit(main())
