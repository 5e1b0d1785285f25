"""Data models for video frames"""

from dataclasses import dataclass
import numpy as np


@dataclass
class VideoFrame:
    """Represents a single video frame from the capture source

    Attributes:
        image: BGR image as numpy array (H, W, 3), as delivered by OpenCV
        timestamp: Seconds since capture start
        frame_number: Sequential frame number
    """
    image: np.ndarray    # BGR image (H, W, 3)
    timestamp: float     # seconds since capture start
    frame_number: int

    def __post_init__(self):
        """Validate video frame data integrity.

        Validates:
            - Timestamp is non-negative (required for temporal ordering)
            - Frame number is non-negative (required for frame tracking)
            - Image is a 3-channel numpy array (required by the face mesh)

        Raises:
            AssertionError: If any validation check fails
        """
        assert self.timestamp >= 0, "Timestamp must be non-negative"
        assert self.frame_number >= 0, "Frame number must be non-negative"
        assert isinstance(self.image, np.ndarray), "Image must be numpy array"
        assert len(self.image.shape) == 3, "Image must be 3D array (H, W, C)"
        assert self.image.shape[2] == 3, "Image must have 3 channels (BGR)"

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]
