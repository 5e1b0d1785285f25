"""FaceSpotter: live face tracking with cartoon overlays"""

__version__ = "0.1.0"
