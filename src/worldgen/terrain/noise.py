"""Coherent noise sampling for terrain generation.

Wraps an OpenSimplex generator with point and whole-grid evaluation
of single frequencies and octave stacks.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from opensimplex import OpenSimplex

from ..config import NoiseLayer
from ..exceptions import ConfigurationError


class NoiseField:
    """Deterministic 2D noise sampler with values in [0, 1].

    Usage:
        field = NoiseField(seed=42)
        value = field.sample(10, 20, frequency=0.01)
        grid = field.octave_grid(256, 256, layers)
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._simplex = OpenSimplex(seed=seed)

    def sample(self, x: int, y: int, frequency: float) -> float:
        """Sample noise at a single coordinate.

        Args:
            x: Column coordinate (any integer).
            y: Row coordinate (any integer).
            frequency: Coordinate scale; smaller values give larger features.

        Returns:
            Noise value in [0, 1].
        """
        raw = self._simplex.noise2(x * frequency, y * frequency)
        return min(max((raw + 1.0) / 2.0, 0.0), 1.0)

    def sample_octaves(self, x: int, y: int, layers: Sequence[NoiseLayer]) -> float:
        """Sum weighted samples of every layer at one coordinate.

        The sum is not clamped; amplitudes are not required to add up to 1.

        Raises:
            ConfigurationError: If layers is empty.
        """
        _check_layers(layers)
        total = 0.0
        for layer in layers:
            total += self.sample(x, y, layer.frequency) * layer.amplitude
        return total

    def sample_grid(
        self,
        width: int,
        height: int,
        frequency: float,
        origin: tuple[int, int] = (0, 0),
    ) -> NDArray[np.float64]:
        """Sample a rectangle of noise at one frequency.

        Args:
            width: Number of columns.
            height: Number of rows.
            frequency: Coordinate scale.
            origin: World coordinate of the top-left cell.

        Returns:
            Array of shape (height, width) with values in [0, 1].

        Raises:
            ConfigurationError: If width or height is not positive.
        """
        _check_dimensions(width, height)
        ox, oy = origin
        xs = np.arange(ox, ox + width, dtype=np.float64) * frequency
        ys = np.arange(oy, oy + height, dtype=np.float64) * frequency
        raw = self._simplex.noise2array(xs, ys)
        return np.clip((raw + 1.0) / 2.0, 0.0, 1.0)

    def octave_grid(
        self,
        width: int,
        height: int,
        layers: Sequence[NoiseLayer],
        origin: tuple[int, int] = (0, 0),
    ) -> NDArray[np.float64]:
        """Sum weighted octave grids over a rectangle (unclamped)."""
        _check_layers(layers)
        result = np.zeros((height, width), dtype=np.float64)
        for layer in layers:
            result += self.sample_grid(width, height, layer.frequency, origin) * layer.amplitude
        return result


def _check_layers(layers: Sequence[NoiseLayer]) -> None:
    if not layers:
        raise ConfigurationError("Octave stack must contain at least one layer")


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Grid dimensions must be positive, got {width}x{height}"
        )
