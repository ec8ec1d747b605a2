"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add the repository root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def white_overlay():
    """Fully opaque 4x4 white BGRA overlay."""
    return np.full((4, 4, 4), 255, dtype=np.uint8)
