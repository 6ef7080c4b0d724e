"""Shared test fixtures for world generation tests."""

import tempfile
from pathlib import Path

import numpy as np
import pytest

from worldgen.config import WorldGenConfig
from worldgen.snapshot import WorldSnapshot
from worldgen.terrain.generator import synthesize


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def small_config() -> WorldGenConfig:
    """Small world so synthesis stays fast."""
    return WorldGenConfig(seed=7, width=48, height=32)


@pytest.fixture
def small_snapshot(small_config: WorldGenConfig) -> WorldSnapshot:
    """48x32 synthesized world without settlements."""
    return synthesize(
        small_config.width, small_config.height, small_config.seed, small_config
    )


@pytest.fixture
def plains_heights() -> np.ndarray:
    """10x10 height field that is habitable everywhere (0.45)."""
    return np.full((10, 10), 0.45, dtype=np.float32)


@pytest.fixture
def blank_colors() -> np.ndarray:
    """10x10 black color grid."""
    return np.zeros((10, 10, 3), dtype=np.uint8)
