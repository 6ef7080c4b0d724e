"""Settlement placement: stamp village footprints on habitable cells."""

import logging

import numpy as np
from numpy.typing import NDArray

from ..config import SettlementConfig
from ..types import Color, SettlementSite

logger = logging.getLogger(__name__)


def is_habitable(
    heights: NDArray[np.floating],
    x: int,
    y: int,
    config: SettlementConfig,
) -> bool:
    """Whether the cell's height lies in the habitable band (plains or lower hills).

    Compared in float32, like the color bands.
    """
    value = np.float32(heights[y, x])
    return bool(np.float32(config.min_height) <= value < np.float32(config.max_height))


def stamp_settlement(
    colors: NDArray[np.uint8],
    x: int,
    y: int,
    radius: int = 1,
    color: Color = (180, 100, 50),
) -> None:
    """Paint a (2r+1) x (2r+1) footprint centered on (x, y), clipped to the grid."""
    height, width = colors.shape[:2]
    x0, x1 = max(x - radius, 0), min(x + radius + 1, width)
    y0, y1 = max(y - radius, 0), min(y + radius + 1, height)
    if x0 >= x1 or y0 >= y1:
        return
    colors[y0:y1, x0:x1] = color


def place_settlements(
    colors: NDArray[np.uint8],
    heights: NDArray[np.floating],
    count: int,
    rng: np.random.Generator,
    config: SettlementConfig | None = None,
) -> list[SettlementSite]:
    """Draw candidate sites and stamp the habitable ones onto colors.

    Exactly ``count`` candidates are drawn from the interior (one cell away
    from every edge). Candidates outside the habitable band are dropped, so
    fewer than ``count`` settlements may be placed. Footprints may overlap;
    a later settlement paints over an earlier one.

    Args:
        colors: Color grid of shape (height, width, 3), mutated in place.
        heights: Height field of shape (height, width).
        count: Number of candidates to draw.
        rng: Random number generator.
        config: Settlement parameters.

    Returns:
        Accepted sites in placement order.
    """
    config = config or SettlementConfig()
    height, width = heights.shape

    if width < 3 or height < 3:
        logger.debug(f"Grid {width}x{height} has no interior, no settlements drawn")
        return []

    sites: list[SettlementSite] = []
    for _ in range(count):
        x = int(rng.integers(1, width - 1))
        y = int(rng.integers(1, height - 1))

        if not is_habitable(heights, x, y, config):
            continue

        stamp_settlement(colors, x, y, config.radius, config.color)
        sites.append(SettlementSite(x=x, y=y, radius=config.radius))

    logger.info(f"Placed {len(sites)} of {count} settlement candidates")
    return sites
