"""
Adapter: OpenCV Camera.

Webcam/USB camera through cv2.VideoCapture. Frames come out as BGR arrays,
which is what the quality scorer and the OCR adapters expect.
"""

import logging

import cv2
import numpy as np

from idscan.core.errors import (
    CameraNotInitializedError,
    CameraUnavailableError,
    FrameCaptureError,
)
from idscan.core.interfaces.camera import ICamera

logger = logging.getLogger(__name__)


class OpenCVCamera(ICamera):

    DEFAULT_CONFIG = {
        "width": 1920,
        "height": 1080,
        "buffer_size": 1,
    }

    def __init__(self, camera_index: int = 0, config: dict | None = None):
        self.camera_index = camera_index
        self.config = {**self.DEFAULT_CONFIG, **(config or {})}
        self._capture: cv2.VideoCapture | None = None
        self._flash = False

    @property
    def is_initialized(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def initialize(self) -> None:
        if self.is_initialized:
            logger.debug("Camera already initialized")
            return

        logger.info(f"Opening camera {self.camera_index}")
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(self.camera_index, reason="VideoCapture could not open device")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config["width"])
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config["height"])
        capture.set(cv2.CAP_PROP_BUFFERSIZE, self.config["buffer_size"])
        self._capture = capture

        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera initialized: {width}x{height}")

    def acquire_frame(self) -> np.ndarray:
        if not self.is_initialized:
            raise CameraNotInitializedError()
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise FrameCaptureError("empty read from device")
        return frame

    def set_flash(self, enabled: bool) -> None:
        # VideoCapture has no torch control
        if enabled != self._flash:
            logger.debug(f"Flash {'on' if enabled else 'off'} requested; not supported by OpenCV backend")
        self._flash = enabled

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera released")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
