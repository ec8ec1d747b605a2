"""Exceptions raised by the face overlay demo."""

from __future__ import annotations


class FaceOverlayError(Exception):
    """Base class for all face overlay failures."""


class DeviceUnavailable(FaceOverlayError):
    """The capture device could not be opened."""


class ClassifierLoadFailure(FaceOverlayError):
    """The cascade classifier resource is missing or malformed."""


class CaptureFailure(FaceOverlayError):
    """The capture device did not deliver a frame."""


class InvalidFormat(FaceOverlayError, ValueError):
    """Images passed to the compositor do not have enough channels."""

    def __init__(self, background_channels: int, overlay_channels: int):
        self.background_channels = background_channels
        self.overlay_channels = overlay_channels
        super().__init__(f"Invalid image format (src={overlay_channels},dst={background_channels}).")
