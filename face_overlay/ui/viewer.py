"""Pygame window that shows the camera feed with the overlay on the largest face."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import cv2
import numpy as np
import pygame

from face_overlay.config import (
    DEFAULT_CASCADE_PATH,
    DEFAULT_OVERLAY_PATH,
    DEFAULT_REFRESH_INTERVAL_MS,
    OVERLAY_ANCHORS,
    AppConfig,
)
from face_overlay.errors import FaceOverlayError
from face_overlay.pipeline import FramePipeline
from face_overlay.refresh import RefreshDriver

REFRESH_EVENT = pygame.USEREVENT + 1
SHUTDOWN_TIMEOUT_S = 2.0


def to_display_rgb(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR(A) frame into the (width, height, 3) RGB layout surfarray expects."""
    if frame.ndim == 2:
        rgb = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
    elif frame.shape[2] == 4:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB)
    else:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    return np.swapaxes(rgb, 0, 1)


def frame_to_surface(frame: Optional[np.ndarray]) -> Optional[pygame.Surface]:
    """Convert a cv2 frame to a pygame surface of the same size."""
    if frame is None:
        return None
    return pygame.surfarray.make_surface(to_display_rgb(frame))


def post_refresh() -> None:
    """Ask for a redraw; a request already waiting in the queue covers this one."""
    if not pygame.event.peek(REFRESH_EVENT, pump=False):
        pygame.event.post(pygame.event.Event(REFRESH_EVENT))


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """CLI entry point arguments."""
    parser = argparse.ArgumentParser(description="Live face detection with a transparent image overlay")
    parser.add_argument("--camera-index", type=int, default=0, help="Capture device index")
    parser.add_argument(
        "--cascade",
        default=str(DEFAULT_CASCADE_PATH),
        help="Path to the Haar cascade XML used for face detection",
    )
    parser.add_argument(
        "--overlay",
        default=str(DEFAULT_OVERLAY_PATH),
        help="Path to the overlay image (PNG with alpha channel)",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=DEFAULT_REFRESH_INTERVAL_MS,
        help="Refresh interval in milliseconds",
    )
    parser.add_argument("--draw-circles", action="store_true", help="Outline detected faces with ellipses")
    parser.add_argument("--draw-rectangles", action="store_true", help="Outline detected faces with rectangles")
    parser.add_argument(
        "--anchor",
        choices=OVERLAY_ANCHORS,
        default="face",
        help="Place the overlay on the face or one face-height above it",
    )
    parser.add_argument("--perf-log", action="store_true", help="Log average capture+detection time")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity for diagnostics",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure root logger output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def run_event_loop(screen: pygame.Surface, pipeline: FramePipeline) -> None:
    """Render one pipeline cycle per pending refresh request until the window closes."""
    running = True
    while running:
        event = pygame.event.wait()
        if event.type == pygame.QUIT:
            running = False
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            running = False
        elif event.type == REFRESH_EVENT:
            pygame.event.clear(REFRESH_EVENT)
            frame_surface = frame_to_surface(pipeline.run_cycle())
            if frame_surface is not None:
                screen.blit(frame_surface, (0, 0))
                pygame.display.flip()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        config = AppConfig.from_args(args)
    except ValueError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    try:
        pipeline = FramePipeline.open(config)
    except FaceOverlayError as exc:
        logging.error("%s", exc)
        return 1
    try:
        pipeline.start()
    except FaceOverlayError as exc:
        logging.error("%s", exc)
        pipeline.close()
        return 1

    pygame.init()
    screen = pygame.display.set_mode(pipeline.frame_size)
    pygame.display.set_caption(config.window_title)
    driver = RefreshDriver(post_refresh)
    driver.start(config.refresh_interval_ms)
    try:
        run_event_loop(screen, pipeline)
    finally:
        driver.terminate()
        if not driver.join(SHUTDOWN_TIMEOUT_S):
            logging.warning("Refresh driver did not stop within %.1f s", SHUTDOWN_TIMEOUT_S)
        pipeline.close()
        pygame.quit()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pygame.quit()
        sys.exit()
    except Exception as exc:  # noqa: BLE001
        logging.exception("Fatal error: %s", exc)
        pygame.quit()
        sys.exit(1)
