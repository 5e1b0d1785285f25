"""MediaPipe Face Mesh detector adapter

Runs MediaPipe Face Mesh on each frame and converts its dense mesh into the
sparse set of named landmarks, eye/smile classifications and head angles the
tracker consumes.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

import cv2
import mediapipe as mp
import numpy as np

from facespotter.models.enums import CameraFacing, LandmarkType
from facespotter.models.features import DetectedFace, Point, UNCOMPUTED_PROBABILITY
from facespotter.models.frames import VideoFrame
from facespotter.models.interfaces import FaceDetectorInterface
from facespotter.config.config_loader import config


logger = logging.getLogger(__name__)


# Mesh vertices averaged into each named landmark (MediaPipe 468/478-point model).
# Left/right are the subject's, so LEFT_* vertices sit on the image's right.
LANDMARK_VERTICES: Dict[LandmarkType, Sequence[int]] = {
    LandmarkType.LEFT_EYE: (362, 263),
    LandmarkType.RIGHT_EYE: (33, 133),
    LandmarkType.LEFT_CHEEK: (425,),
    LandmarkType.RIGHT_CHEEK: (205,),
    LandmarkType.NOSE_BASE: (2,),
    LandmarkType.LEFT_EAR: (454,),
    LandmarkType.LEFT_EAR_TIP: (356,),
    LandmarkType.RIGHT_EAR: (234,),
    LandmarkType.RIGHT_EAR_TIP: (127,),
    LandmarkType.LEFT_MOUTH: (291,),
    LandmarkType.BOTTOM_MOUTH: (17,),
    LandmarkType.RIGHT_MOUTH: (61,),
}

# Six-point eye contours: outer corner, two upper lid, inner corner, two lower lid
LEFT_EYE_CONTOUR = (362, 385, 387, 263, 373, 380)
RIGHT_EYE_CONTOUR = (33, 160, 158, 133, 153, 144)

NOSE_TIP = 1
MIN_MESH_POINTS = 468


class DetectorError(Exception):
    """Exception raised when the face mesh backend fails"""
    pass


def eye_aspect_ratio(points: np.ndarray) -> float:
    """Eye Aspect Ratio from six ordered contour points.

    EAR = (||p2 - p6|| + ||p3 - p5||) / (2 * ||p1 - p4||)
    Open eyes are typically around 0.25-0.30, closed around 0.05-0.10.
    """
    vertical = np.linalg.norm(points[1] - points[5]) + np.linalg.norm(points[2] - points[4])
    horizontal = np.linalg.norm(points[0] - points[3])
    if horizontal < 1e-6:
        return 0.0
    return float(vertical / (2.0 * horizontal))


def ramp(value: float, low: float, high: float) -> float:
    """Map value linearly from [low, high] onto [0, 1], clipped"""
    if high <= low:
        return 1.0 if value >= high else 0.0
    return float(np.clip((value - low) / (high - low), 0.0, 1.0))


class MediaPipeFaceDetector(FaceDetectorInterface):
    """Face detector backed by MediaPipe Face Mesh.

    Only landmarks that fall inside the frame are reported, so a face partly
    out of view yields an incomplete landmark set that the tracker fills in
    from memory. Eye-open and smile classifications are reported as
    UNCOMPUTED_PROBABILITY when the points they need are out of view.

    With a front-facing camera only the most prominent face is kept, and the
    minimum face size is larger, since a selfie camera usually frames one
    person up close.

    Attributes:
        facing: Camera facing, selects prominence and minimum face size
        max_faces: Maximum faces the mesh tracks
        min_face_size: Minimum face width as a fraction of frame width
        face_mesh: MediaPipe FaceMesh instance, created lazily
    """

    def __init__(self, facing: CameraFacing = CameraFacing.FRONT,
                 max_faces: Optional[int] = None):
        self.facing = facing
        self.max_faces = max_faces if max_faces is not None else config.get('detector.max_faces', 4)
        self.min_detection_confidence = config.get('detector.min_detection_confidence', 0.5)
        self.min_tracking_confidence = config.get('detector.min_tracking_confidence', 0.5)
        self.ear_closed = config.get('detector.ear_closed', 0.12)
        self.ear_open = config.get('detector.ear_open', 0.28)
        self.smile_ratio_neutral = config.get('detector.smile_ratio_neutral', 0.36)
        self.smile_ratio_full = config.get('detector.smile_ratio_full', 0.48)

        if facing is CameraFacing.FRONT:
            self.min_face_size = config.get('detector.min_face_size_front', 0.35)
        else:
            self.min_face_size = config.get('detector.min_face_size_rear', 0.15)

        self.face_mesh = None

        logger.info(f"MediaPipeFaceDetector initialized (facing={facing.value}, "
                    f"min_face_size={self.min_face_size})")

    @property
    def prominent_face_only(self) -> bool:
        return self.facing is CameraFacing.FRONT

    def _load_model(self):
        """Load the MediaPipe face mesh model.

        Raises:
            DetectorError: If model initialization fails
        """
        try:
            logger.info("Loading MediaPipe face mesh model")
            self.face_mesh = mp.solutions.face_mesh.FaceMesh(
                static_image_mode=False,
                max_num_faces=1 if self.prominent_face_only else self.max_faces,
                refine_landmarks=True,
                min_detection_confidence=self.min_detection_confidence,
                min_tracking_confidence=self.min_tracking_confidence
            )
            logger.info("MediaPipe face mesh loaded successfully")
        except Exception as e:
            logger.error(f"Failed to load MediaPipe face mesh: {e}", exc_info=True)
            raise DetectorError(f"Failed to load face mesh: {e}") from e

    def _mesh_points(self, image: np.ndarray) -> List[np.ndarray]:
        """Run the mesh and return one (N, 2) pixel array per face"""
        if self.face_mesh is None:
            self._load_model()

        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        try:
            results = self.face_mesh.process(rgb)
        except Exception as e:
            raise DetectorError(f"Face mesh processing failed: {e}") from e

        if not results.multi_face_landmarks:
            return []

        h, w = image.shape[:2]
        all_points = []
        for face_landmarks in results.multi_face_landmarks:
            points = np.array(
                [[lm.x * w, lm.y * h] for lm in face_landmarks.landmark],
                dtype=np.float64
            )
            if len(points) < MIN_MESH_POINTS:
                logger.warning(f"Face mesh returned {len(points)} points, skipping face")
                continue
            all_points.append(points)
        return all_points

    def _build_face(self, points: np.ndarray, frame_width: int,
                    frame_height: int) -> Optional[DetectedFace]:
        """Convert a face's mesh points into a DetectedFace"""
        x_min, y_min = points[:, 0].min(), points[:, 1].min()
        x_max, y_max = points[:, 0].max(), points[:, 1].max()
        width = float(x_max - x_min)
        height = float(y_max - y_min)
        if width <= 1.0 or height <= 1.0:
            return None
        if width / frame_width < self.min_face_size:
            logger.debug(f"Face width {width:.0f}px below minimum size, skipping")
            return None

        def visible(indices: Sequence[int]) -> bool:
            sub = points[list(indices)]
            return bool(np.all((sub[:, 0] >= 0) & (sub[:, 0] < frame_width)
                               & (sub[:, 1] >= 0) & (sub[:, 1] < frame_height)))

        landmarks = {}
        for landmark, indices in LANDMARK_VERTICES.items():
            if visible(indices):
                x, y = points[list(indices)].mean(axis=0)
                landmarks[landmark] = Point(float(x), float(y))

        left_open = UNCOMPUTED_PROBABILITY
        if visible(LEFT_EYE_CONTOUR):
            left_open = ramp(eye_aspect_ratio(points[list(LEFT_EYE_CONTOUR)]),
                             self.ear_closed, self.ear_open)

        right_open = UNCOMPUTED_PROBABILITY
        if visible(RIGHT_EYE_CONTOUR):
            right_open = ramp(eye_aspect_ratio(points[list(RIGHT_EYE_CONTOUR)]),
                              self.ear_closed, self.ear_open)

        smiling = UNCOMPUTED_PROBABILITY
        mouth = LANDMARK_VERTICES[LandmarkType.LEFT_MOUTH] + LANDMARK_VERTICES[LandmarkType.RIGHT_MOUTH]
        if visible(mouth):
            mouth_width = np.linalg.norm(points[291] - points[61])
            face_span = np.linalg.norm(points[454] - points[234])
            if face_span > 1e-6:
                smiling = ramp(float(mouth_width / face_span),
                               self.smile_ratio_neutral, self.smile_ratio_full)

        euler_y, euler_z = self._head_angles(points)

        return DetectedFace(
            position=Point(float(x_min), float(y_min)),
            width=width,
            height=height,
            euler_y=euler_y,
            euler_z=euler_z,
            landmarks=landmarks,
            left_eye_open_probability=left_open,
            right_eye_open_probability=right_open,
            smiling_probability=smiling,
        )

    @staticmethod
    def _head_angles(points: np.ndarray):
        """Approximate yaw and roll in degrees from eye and nose positions"""
        left_eye = points[list(LEFT_EYE_CONTOUR)].mean(axis=0)
        right_eye = points[list(RIGHT_EYE_CONTOUR)].mean(axis=0)
        eye_vector = left_eye - right_eye
        half_span = np.linalg.norm(eye_vector) / 2.0
        if half_span < 1e-6:
            return 0.0, 0.0

        roll = math.degrees(math.atan2(eye_vector[1], eye_vector[0]))

        midpoint = (left_eye + right_eye) / 2.0
        unit = eye_vector / (2.0 * half_span)
        lateral = float(np.dot(points[NOSE_TIP] - midpoint, unit)) / half_span
        yaw = math.degrees(math.asin(float(np.clip(lateral, -1.0, 1.0))))
        return yaw, roll

    def detect(self, video_frame: VideoFrame) -> List[DetectedFace]:
        """Detect faces in a video frame.

        Args:
            video_frame: BGR frame from the capture source

        Returns:
            Detected faces; at most one when only the prominent face is kept

        Raises:
            DetectorError: If the mesh backend fails
        """
        faces = []
        for points in self._mesh_points(video_frame.image):
            face = self._build_face(points, video_frame.width, video_frame.height)
            if face is not None:
                faces.append(face)

        if self.prominent_face_only and len(faces) > 1:
            faces = [max(faces, key=lambda f: f.width * f.height)]

        logger.debug(f"Frame {video_frame.frame_number}: {len(faces)} face(s)")
        return faces

    def close(self) -> None:
        if self.face_mesh is not None:
            self.face_mesh.close()
            self.face_mesh = None
