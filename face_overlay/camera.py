"""Camera capture helpers backed by OpenCV."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from face_overlay.errors import DeviceUnavailable


@dataclass
class CameraSource:
    """Wrapper around cv2.VideoCapture that can refill a reused frame buffer."""

    device_index: int
    capture: Optional[cv2.VideoCapture] = None
    frame_size: Optional[tuple[int, int]] = None

    @classmethod
    def open(cls, device_index: int = 0) -> "CameraSource":
        capture = cv2.VideoCapture(device_index)
        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailable(f"Failed to open camera {device_index}.")
        logging.info("Camera %d opened", device_index)
        return cls(device_index=device_index, capture=capture)

    @property
    def is_open(self) -> bool:
        return self.capture is not None

    def read_frame(self) -> Optional[np.ndarray]:
        """Grab a new frame, or None when the device has nothing to give."""
        if self.capture is None:
            return None
        ok, frame = self.capture.read()
        if not ok or frame is None:
            return None
        self.frame_size = (frame.shape[1], frame.shape[0])
        return frame

    def read(self, into: np.ndarray) -> bool:
        """
        Copy the next frame into ``into``; the buffer is untouched on failure.

        A frame whose shape differs from the buffer is dropped, but
        ``frame_size`` still reports its size so the owner can reallocate.
        """
        frame = self.read_frame()
        if frame is None:
            return False
        if frame.shape != into.shape:
            logging.warning("Camera frame shape changed from %s to %s; dropping frame.", into.shape, frame.shape)
            return False
        np.copyto(into, frame)
        return True

    def release(self) -> None:
        if self.capture is None:
            return
        self.capture.release()
        self.capture = None
        logging.info("Camera %d released", self.device_index)

    def __enter__(self) -> "CameraSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
