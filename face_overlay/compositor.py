"""Alpha compositing of a BGRA overlay onto a BGR(A) background."""

from __future__ import annotations

import numpy as np

from face_overlay.errors import InvalidFormat
from face_overlay.overlay import channel_count


def composite(background: np.ndarray, overlay: np.ndarray, origin_x: int, origin_y: int) -> None:
    """
    Blend ``overlay`` onto ``background`` in place with its upper left corner at
    (origin_x, origin_y).

    Overlay pixels whose destination falls outside the background are skipped,
    so the origin may be negative or past the far edge. Each colour channel
    becomes ``dest * (1 - a) + src * a`` with ``a = alpha / 255``, rounded to
    the nearest integer. The overlay alpha is never written to the background.

    Raises:
        InvalidFormat: background has fewer than 3 channels or overlay fewer
            than 4. The background is not modified.
    """
    background_channels = channel_count(background)
    overlay_channels = channel_count(overlay)
    if background_channels < 3 or overlay_channels < 4:
        raise InvalidFormat(background_channels, overlay_channels)

    bg_height, bg_width = background.shape[:2]
    ov_height, ov_width = overlay.shape[:2]

    # Destination window clipped to the background.
    dest_top = max(origin_y, 0)
    dest_left = max(origin_x, 0)
    dest_bottom = min(origin_y + ov_height, bg_height)
    dest_right = min(origin_x + ov_width, bg_width)
    if dest_top >= dest_bottom or dest_left >= dest_right:
        return

    src = overlay[
        dest_top - origin_y : dest_bottom - origin_y,
        dest_left - origin_x : dest_right - origin_x,
    ]
    dest = background[dest_top:dest_bottom, dest_left:dest_right, :3]

    opacity = src[:, :, 3:4].astype(np.float64) / 255.0
    blended = dest.astype(np.float64) * (1.0 - opacity) + src[:, :, :3].astype(np.float64) * opacity
    dest[...] = np.clip(np.rint(blended), 0, 255).astype(background.dtype)
