"""
One render cycle of the demo: capture, detect, annotate, composite.

The pipeline owns the camera, the classifier and the overlay asset, and
keeps a single camera buffer that every cycle overwrites.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple

import cv2
import numpy as np

from face_overlay.camera import CameraSource
from face_overlay.compositor import composite
from face_overlay.config import AppConfig
from face_overlay.errors import CaptureFailure
from face_overlay.overlay import channel_count, load_overlay, overlay_origin, scale_overlay
from face_overlay.vision import FaceDetector, FaceRect, annotate_faces, select_largest


class FramePipeline:
    def __init__(
        self,
        camera: CameraSource,
        detector: FaceDetector,
        overlay: Optional[np.ndarray],
        config: Optional[AppConfig] = None,
    ):
        self.camera = camera
        self.detector = detector
        self.overlay = overlay
        self.config = config or AppConfig()
        self.image: Optional[np.ndarray] = None
        self.faces: List[FaceRect] = []
        self.overlay_eligible = False
        self.total_processing_time = 0.0
        self.frames_processed = 0

    @classmethod
    def open(cls, config: AppConfig) -> "FramePipeline":
        """Build the pipeline from config; fails with DeviceUnavailable or ClassifierLoadFailure."""
        camera = CameraSource.open(config.camera_index)
        try:
            overlay = load_overlay(config.overlay_path)
            detector = FaceDetector(config.cascade_path)
        except Exception:
            camera.release()
            raise
        return cls(camera, detector, overlay, config)

    @property
    def frame_size(self) -> Optional[Tuple[int, int]]:
        if self.image is None:
            return None
        return self.image.shape[1], self.image.shape[0]

    @property
    def average_processing_ms(self) -> float:
        if self.frames_processed == 0:
            return 0.0
        return self.total_processing_time * 1000.0 / self.frames_processed

    def start(self) -> np.ndarray:
        """Grab the first frame, allocate the camera buffer and decide overlay eligibility."""
        frame = self.camera.read_frame()
        if frame is None:
            raise CaptureFailure(f"Camera {self.camera.device_index} did not deliver a first frame.")
        self.image = frame

        if self.overlay is None:
            self.overlay_eligible = False
        elif channel_count(self.overlay) < 4:
            logging.warning("Overlay image has no alpha channel; overlay disabled.")
            self.overlay_eligible = False
        elif channel_count(frame) < 3:
            logging.warning("Camera delivers %d-channel frames; overlay disabled.", channel_count(frame))
            self.overlay_eligible = False
        else:
            self.overlay_eligible = True
        logging.info("Camera frame size %dx%d, overlay %s", frame.shape[1], frame.shape[0],
                     "enabled" if self.overlay_eligible else "disabled")
        return frame

    def run_cycle(self) -> Optional[np.ndarray]:
        """Render one frame into the camera buffer; None when the cycle was skipped."""
        if self.image is None:
            raise RuntimeError("FramePipeline.start() must be called before run_cycle().")

        start_time = time.perf_counter()
        if not self.camera.read(self.image):
            if not self._resize_buffer():
                logging.warning("Camera read failed; skipping frame.")
            return None
        try:
            self.faces = self.detector.detect(self.image)
        except cv2.error as exc:
            logging.warning("Face detection failed; skipping frame: %s", exc)
            self.faces = []
            return None
        elapsed = time.perf_counter() - start_time

        if self.config.perf_logging:
            self._record_timing(elapsed)

        annotate_faces(
            self.image,
            self.faces,
            circles=self.config.draw_circles,
            rectangles=self.config.draw_rectangles,
        )

        if self.overlay_eligible and self.faces:
            selected = select_largest(self.faces)
            if selected is not None:
                _, face = selected
                scaled = scale_overlay(self.overlay, face.width, face.height)
                origin_x, origin_y = overlay_origin(face, self.config.overlay_anchor)
                composite(self.image, scaled, origin_x, origin_y)

        return self.image

    def _resize_buffer(self) -> bool:
        """Reallocate the camera buffer after the camera switched resolution."""
        size = self.camera.frame_size
        if size is None or size == self.frame_size:
            return False
        width, height = size
        self.image = np.zeros((height, width) + self.image.shape[2:], dtype=self.image.dtype)
        logging.info("Camera resolution changed to %dx%d; buffer reallocated", width, height)
        return True

    def _record_timing(self, elapsed: float) -> None:
        self.total_processing_time += elapsed
        self.frames_processed += 1
        if self.frames_processed % self.config.perf_report_every == 0:
            logging.info("Average processing time = %.1f ms", self.average_processing_ms)

    def close(self) -> None:
        self.camera.release()
