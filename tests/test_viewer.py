"""
Tests for the pygame display helpers and entry point.
"""

import time
from unittest.mock import patch

import numpy as np
import pygame
import pytest

from face_overlay.errors import CaptureFailure, DeviceUnavailable
from face_overlay.refresh import RefreshDriver
from face_overlay.ui import viewer


class ScriptedPipeline:
    """Pipeline stand-in that returns queued frames and quits after a number of cycles."""

    def __init__(self, frames, quit_after=1, cycle_seconds=0.0):
        self._frames = list(frames)
        self.quit_after = quit_after
        self.cycle_seconds = cycle_seconds
        self.cycles = 0

    def run_cycle(self):
        self.cycles += 1
        if self.cycle_seconds:
            time.sleep(self.cycle_seconds)
        if self.cycles == self.quit_after:
            pygame.event.post(pygame.event.Event(pygame.QUIT))
        return self._frames.pop(0) if self._frames else None


@pytest.fixture
def screen(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    pygame.display.init()
    surface = pygame.display.set_mode((8, 6))
    pygame.event.clear()
    yield surface
    pygame.display.quit()


def red_frame():
    frame = np.zeros((6, 8, 3), dtype=np.uint8)
    frame[:, :] = (0, 0, 255)
    return frame


def test_bgr_is_converted_to_rgb_columns():
    frame = np.zeros((2, 3, 3), dtype=np.uint8)
    frame[0, 2] = (255, 0, 0)

    rgb = viewer.to_display_rgb(frame)

    assert rgb.shape == (3, 2, 3)
    assert tuple(rgb[2, 0]) == (0, 0, 255)


def test_frame_to_surface_size():
    surface = viewer.frame_to_surface(np.zeros((20, 30, 3), dtype=np.uint8))
    assert surface.get_size() == (30, 20)


def test_frame_to_surface_none():
    assert viewer.frame_to_surface(None) is None


def test_main_exits_when_camera_unavailable():
    with patch.object(viewer.FramePipeline, "open", side_effect=DeviceUnavailable("no camera")):
        assert viewer.main([]) == 1


def test_main_exits_when_first_frame_missing():
    with patch.object(viewer.FramePipeline, "open") as open_pipeline:
        pipeline = open_pipeline.return_value
        pipeline.start.side_effect = CaptureFailure("no frame")
        assert viewer.main([]) == 1

    pipeline.close.assert_called_once()


def test_main_rejects_bad_interval():
    assert viewer.main(["--interval-ms", "0"]) == 2


class TestEventLoop:
    def test_refresh_runs_one_cycle_and_blits(self, screen):
        pipeline = ScriptedPipeline([red_frame()])
        pygame.event.post(pygame.event.Event(viewer.REFRESH_EVENT))

        with patch("face_overlay.ui.viewer.pygame.display.flip") as flip:
            viewer.run_event_loop(screen, pipeline)

        assert pipeline.cycles == 1
        assert tuple(screen.get_at((0, 0)))[:3] == (255, 0, 0)
        assert tuple(screen.get_at((7, 5)))[:3] == (255, 0, 0)
        flip.assert_called_once()

    def test_skipped_cycle_does_not_flip(self, screen):
        pipeline = ScriptedPipeline([])
        pygame.event.post(pygame.event.Event(viewer.REFRESH_EVENT))

        with patch("face_overlay.ui.viewer.pygame.display.flip") as flip:
            viewer.run_event_loop(screen, pipeline)

        assert pipeline.cycles == 1
        flip.assert_not_called()
        assert tuple(screen.get_at((0, 0)))[:3] == (0, 0, 0)

    def test_quit_ends_loop(self, screen):
        pipeline = ScriptedPipeline([])
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        pygame.event.post(pygame.event.Event(viewer.REFRESH_EVENT))

        viewer.run_event_loop(screen, pipeline)

        assert pipeline.cycles == 0

    def test_escape_ends_loop(self, screen):
        pipeline = ScriptedPipeline([])
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE))

        viewer.run_event_loop(screen, pipeline)

        assert pipeline.cycles == 0

    def test_pending_refreshes_are_merged(self, screen):
        for _ in range(5):
            viewer.post_refresh()

        assert len(pygame.event.get(viewer.REFRESH_EVENT)) == 1

    def test_queued_duplicates_run_a_single_cycle(self, screen):
        pipeline = ScriptedPipeline([red_frame()], quit_after=1)
        for _ in range(3):
            pygame.event.post(pygame.event.Event(viewer.REFRESH_EVENT))

        viewer.run_event_loop(screen, pipeline)

        assert pipeline.cycles == 1

    def test_slow_cycles_do_not_build_a_backlog(self, screen):
        pipeline = ScriptedPipeline([], quit_after=5, cycle_seconds=0.03)
        driver = RefreshDriver(viewer.post_refresh)
        driver.start(5)
        start = time.monotonic()
        try:
            viewer.run_event_loop(screen, pipeline)
        finally:
            driver.terminate()
            assert driver.join(timeout=1.0)
        elapsed = time.monotonic() - start

        assert 5 <= pipeline.cycles <= 6
        assert elapsed < 1.0
        assert len(pygame.event.get(viewer.REFRESH_EVENT)) <= 1
