"""Loading and scaling of the transparent overlay asset."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from face_overlay.vision import FaceRect


def channel_count(frame: np.ndarray) -> int:
    return 1 if frame.ndim == 2 else frame.shape[2]


def load_overlay(path: Path) -> Optional[np.ndarray]:
    """Decode an image file keeping its alpha channel, or None if unreadable."""
    if not Path(path).is_file():
        logging.warning("Overlay image %s not found; overlay disabled.", path)
        return None
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        logging.warning("Overlay image %s could not be decoded; overlay disabled.", path)
        return None
    return image


def scale_overlay(asset: np.ndarray, width: int, height: int) -> np.ndarray:
    """Return a resized copy of the asset; the asset itself is left alone."""
    return cv2.resize(asset, (width, height))


def overlay_origin(face: FaceRect, anchor: str = "face") -> Tuple[int, int]:
    if anchor == "above":
        return face.x, face.y - face.height
    return face.x, face.y
