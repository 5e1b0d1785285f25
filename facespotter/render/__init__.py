"""OpenCV overlay rendering"""

from facespotter.render.overlay import GraphicOverlay
from facespotter.render.face_graphic import FaceGraphic

__all__ = ['GraphicOverlay', 'FaceGraphic']
