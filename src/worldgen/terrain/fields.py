"""Scalar field generation: height, moisture and temperature."""

import numpy as np
from numpy.typing import NDArray

from ..config import FieldConfig
from .noise import NoiseField


def make_field(
    width: int,
    height: int,
    seed: int,
    config: FieldConfig,
    origin: tuple[int, int] = (0, 0),
) -> NDArray[np.float32]:
    """Generate one clamped scalar field from an octave stack.

    Args:
        width: World width in cells.
        height: World height in cells.
        seed: World seed; the field's seed offset is added to it.
        config: Octave stack and seed offset.
        origin: World coordinate of the top-left cell.

    Returns:
        2D array of shape (height, width) in range [0, 1].
    """
    noise = NoiseField(seed + config.seed_offset)
    field = noise.octave_grid(width, height, config.layers, origin)
    return np.clip(field, 0.0, 1.0).astype(np.float32)


def make_height(
    width: int,
    height: int,
    seed: int,
    config: FieldConfig,
    origin: tuple[int, int] = (0, 0),
) -> NDArray[np.float32]:
    """Generate the height field.

    Low frequencies dominate so continents and oceans are large; the
    highest octave only adds coastline detail.
    """
    return make_field(width, height, seed, config, origin)


def make_moisture(
    width: int,
    height: int,
    seed: int,
    config: FieldConfig,
    origin: tuple[int, int] = (0, 0),
) -> NDArray[np.float32]:
    """Generate the moisture field."""
    return make_field(width, height, seed, config, origin)


def make_temperature(
    width: int,
    height: int,
    seed: int,
    config: FieldConfig,
    origin: tuple[int, int] = (0, 0),
) -> NDArray[np.float32]:
    """Generate the temperature field."""
    return make_field(width, height, seed, config, origin)
