"""Runtime configuration for the face overlay demo."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

import cv2

DEFAULT_CASCADE_PATH = Path(cv2.data.haarcascades) / "haarcascade_frontalface_alt.xml"
DEFAULT_OVERLAY_PATH = Path("images") / "Mustache.png"
DEFAULT_REFRESH_INTERVAL_MS = 100
DEFAULT_PERF_REPORT_EVERY = 10
WINDOW_TITLE = "OpenCV Face Detector"
OVERLAY_ANCHORS = ("face", "above")


@dataclass(frozen=True)
class AppConfig:
    """Camera, classifier, overlay and refresh settings."""

    camera_index: int = 0
    cascade_path: Path = DEFAULT_CASCADE_PATH
    overlay_path: Path = DEFAULT_OVERLAY_PATH
    refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    draw_circles: bool = False
    draw_rectangles: bool = False
    overlay_anchor: str = "face"
    perf_logging: bool = False
    perf_report_every: int = DEFAULT_PERF_REPORT_EVERY
    window_title: str = WINDOW_TITLE
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.refresh_interval_ms <= 0:
            raise ValueError(f"refresh_interval_ms must be positive, got {self.refresh_interval_ms}")
        if self.perf_report_every <= 0:
            raise ValueError(f"perf_report_every must be positive, got {self.perf_report_every}")
        if self.overlay_anchor not in OVERLAY_ANCHORS:
            raise ValueError(f"overlay_anchor must be one of {OVERLAY_ANCHORS}, got {self.overlay_anchor!r}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "AppConfig":
        return cls(
            camera_index=args.camera_index,
            cascade_path=Path(args.cascade),
            overlay_path=Path(args.overlay),
            refresh_interval_ms=args.interval_ms,
            draw_circles=args.draw_circles,
            draw_rectangles=args.draw_rectangles,
            overlay_anchor=args.anchor,
            perf_logging=args.perf_log,
            log_level=args.log_level,
        )
