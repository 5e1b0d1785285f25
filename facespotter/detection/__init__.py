"""Face detection adapters and identity assignment"""

from facespotter.detection.identity import FaceIdentityTracker
from facespotter.detection.face_mesh import MediaPipeFaceDetector, DetectorError

__all__ = ['FaceIdentityTracker', 'MediaPipeFaceDetector', 'DetectorError']
