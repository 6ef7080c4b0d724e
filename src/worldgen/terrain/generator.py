"""Main world synthesis orchestration."""

import logging
from pathlib import Path

import numpy as np

from ..biomes import Biome
from ..config import WorldGenConfig
from ..exceptions import ConfigurationError
from ..snapshot import WorldSnapshot
from .classification import build_bands, classify_biomes, classify_colors
from .fields import make_height, make_moisture, make_temperature
from .persistence import save_snapshot
from .settlements import place_settlements

logger = logging.getLogger(__name__)


def synthesize(
    width: int,
    height: int,
    seed: int,
    config: WorldGenConfig | None = None,
) -> WorldSnapshot:
    """Build height, moisture and temperature fields and classify every cell.

    Deterministic for a given seed and config. No settlements are placed.

    Args:
        width: World width in cells.
        height: World height in cells.
        seed: Noise seed.
        config: Field and classification parameters; width, height and
            seed in the config are ignored in favour of the arguments.

    Returns:
        WorldSnapshot with all grids filled.

    Raises:
        ConfigurationError: If dimensions are not positive.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(
            f"World dimensions must be positive, got {width}x{height}"
        )
    config = config or WorldGenConfig()

    logger.info(f"Synthesizing world {width}x{height} with seed {seed}")

    heights = make_height(width, height, seed, config.elevation)
    moisture = make_moisture(width, height, seed, config.moisture)
    temperature = make_temperature(width, height, seed, config.temperature)

    bands = build_bands(config.classification)
    colors = classify_colors(
        heights, moisture, temperature, config.classification, bands
    )
    biomes = classify_biomes(heights, moisture)

    return WorldSnapshot(
        heights=heights,
        moisture=moisture,
        temperature=temperature,
        biomes=biomes,
        colors=colors,
        seed=seed,
    )


def place_settlements_on(
    snapshot: WorldSnapshot,
    count: int,
    rng: np.random.Generator | None = None,
    config: WorldGenConfig | None = None,
) -> WorldSnapshot:
    """Stamp settlements onto a snapshot's color grid.

    Mutates snapshot.colors in place and records the accepted sites.
    Must run before any reveal starts over the same grid.

    Args:
        snapshot: Snapshot to update.
        count: Number of candidate sites to draw.
        rng: Random generator; defaults to one seeded from the snapshot.
        config: Settlement parameters.

    Returns:
        The same snapshot, for chaining.
    """
    config = config or WorldGenConfig()
    if rng is None:
        rng = np.random.default_rng(snapshot.seed)

    sites = place_settlements(
        snapshot.colors, snapshot.heights, count, rng, config.settlements
    )
    snapshot.settlements.extend(sites)
    return snapshot


def generate_world(config: WorldGenConfig) -> WorldSnapshot:
    """Synthesize a world and populate it with settlements.

    The number of settlement candidates is drawn from
    [count_min, count_max); equal bounds give exactly count_min.

    Args:
        config: World generation configuration.

    Returns:
        WorldSnapshot with settlements stamped on the color grid.
    """
    rng = np.random.default_rng(config.seed)

    snapshot = synthesize(config.width, config.height, config.seed, config)

    settlements = config.settlements
    if settlements.count_max > settlements.count_min:
        count = int(rng.integers(settlements.count_min, settlements.count_max))
    else:
        count = settlements.count_min
    place_settlements_on(snapshot, count, rng, config)

    _log_terrain_stats(snapshot)
    return snapshot


def generate_and_save_world(config: WorldGenConfig, save_path: Path) -> WorldSnapshot:
    """Generate a world and save it.

    Args:
        config: World generation configuration.
        save_path: Path to save the snapshot (.npz).

    Returns:
        The generated snapshot.
    """
    snapshot = generate_world(config)

    save_path.parent.mkdir(parents=True, exist_ok=True)
    save_snapshot(save_path, snapshot)

    return snapshot


def _log_terrain_stats(snapshot: WorldSnapshot) -> None:
    """Log biome distribution statistics."""
    total = snapshot.biomes.size

    logger.info(f"Biome stats ({total:,} cells):")
    for biome in Biome:
        count = int(np.sum(snapshot.biomes == biome.code))
        pct = count / total * 100
        logger.info(f"  {biome.label}: {count:,} ({pct:.1f}%)")

    logger.info(f"  Settlements: {len(snapshot.settlements)}")
