"""
Face location with a Haar cascade, plus the debug annotations and
largest-face selection that run on its output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from face_overlay.config import DEFAULT_CASCADE_PATH
from face_overlay.errors import ClassifierLoadFailure

ANNOTATION_COLOR = (0, 255, 0)


@dataclass(frozen=True)
class FaceRect:
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def center(self) -> Tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    @property
    def corners(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return (self.x, self.y), (self.x + self.width, self.y + self.height)


class FaceDetector:
    """Haar-cascade face detector."""

    def __init__(self, cascade_path: Optional[Path] = None):
        self.cascade_path = Path(cascade_path or DEFAULT_CASCADE_PATH)
        try:
            self.cascade = cv2.CascadeClassifier(str(self.cascade_path))
        except cv2.error as exc:
            raise ClassifierLoadFailure(f"Failed to load Cascade Classifier <{self.cascade_path}>: {exc}") from exc
        if self.cascade.empty():
            raise ClassifierLoadFailure(f"Failed to load Cascade Classifier <{self.cascade_path}>")
        logging.info("Loaded cascade classifier %s", self.cascade_path)

    def detect(self, frame: np.ndarray) -> List[FaceRect]:
        if frame.ndim == 2:
            gray = frame
        elif frame.shape[2] == 4:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
        else:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        faces = self.cascade.detectMultiScale(gray)
        return [FaceRect(int(x), int(y), int(w), int(h)) for (x, y, w, h) in faces]


def draw_face_circles(frame: np.ndarray, faces: Iterable[FaceRect]) -> None:
    """Outline each face with the ellipse inscribed in its rectangle."""
    for face in faces:
        cv2.ellipse(frame, (face.center, face.size, 0.0), ANNOTATION_COLOR)


def draw_face_rectangles(frame: np.ndarray, faces: Iterable[FaceRect]) -> None:
    for face in faces:
        top_left, bottom_right = face.corners
        cv2.rectangle(frame, top_left, bottom_right, ANNOTATION_COLOR)


def annotate_faces(
    frame: np.ndarray,
    faces: Sequence[FaceRect],
    circles: bool = False,
    rectangles: bool = False,
) -> None:
    """Draw the enabled debug outlines in place."""
    if circles:
        draw_face_circles(frame, faces)
    if rectangles:
        draw_face_rectangles(frame, faces)


def select_largest(faces: Sequence[FaceRect]) -> Optional[Tuple[int, FaceRect]]:
    """
    Return (index, face) for the face with the greatest area.

    Ties keep the earliest face. Faces with zero area are never picked, so
    an empty or fully degenerate set returns None.
    """
    max_area = 0
    max_index = -1
    for index, face in enumerate(faces):
        if face.area > max_area:
            max_area = face.area
            max_index = index
    if max_index == -1:
        return None
    return max_index, faces[max_index]
