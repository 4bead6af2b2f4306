"""Live camera / video stream source."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Union

import cv2
import numpy as np

from ..errors import AcquisitionError

logger = logging.getLogger(__name__)


class VideoStream(Protocol):
    """What the render loop needs from a stream."""

    frame: Optional[np.ndarray]
    paused: bool
    ended: bool
    width: int
    height: int


def parse_source(source: Union[str, int]) -> Union[str, int]:
    """Camera index for digit strings, otherwise a file path / URL."""
    if isinstance(source, int):
        return source
    text = str(source).strip()
    return int(text) if text.isdigit() else text


class CameraStream:
    """Handle frame capture from a camera index or a video file."""

    def __init__(self, source: Union[str, int] = 0, width: int = 640, height: int = 480):
        """
        Initialize camera stream (not opened yet).

        Args:
            source: Camera index or video file path
            width: Requested capture width (camera hint, may be ignored)
            height: Requested capture height (camera hint, may be ignored)
        """
        self.source = parse_source(source)
        self.requested_width = width
        self.requested_height = height

        self.cap: Optional[cv2.VideoCapture] = None
        self.frame: Optional[np.ndarray] = None
        self.paused = False
        self.ended = False
        self.width = 0
        self.height = 0

    def open(self) -> "CameraStream":
        """
        Open the capture and read the first frame to learn native dimensions.

        Raises:
            AcquisitionError: If the source cannot be opened or yields no frame.
        """
        self.cap = cv2.VideoCapture(self.source)
        if not self.cap.isOpened():
            self.release()
            raise AcquisitionError(f"Cannot open video source: {self.source}")

        if isinstance(self.source, int):
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.requested_width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.requested_height)

        ret, frame = self.cap.read()
        if not ret or frame is None:
            self.release()
            raise AcquisitionError(f"No frames from video source: {self.source}")

        self.frame = frame
        self.height, self.width = frame.shape[:2]
        logger.info("Opened %s at %dx%d", self.source, self.width, self.height)
        return self

    def advance(self) -> Optional[np.ndarray]:
        """Read the next frame unless paused or ended."""
        if self.paused or self.ended or self.cap is None:
            return self.frame

        ret, frame = self.cap.read()
        if not ret or frame is None:
            self.ended = True
            logger.info("Video source %s ended", self.source)
            return self.frame

        self.frame = frame
        return frame

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
