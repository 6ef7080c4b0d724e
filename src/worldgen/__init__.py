"""Procedural world map synthesis with an incremental reveal."""

from .biomes import Biome, biome_from_code
from .config import (
    ClassificationConfig,
    FieldConfig,
    NoiseLayer,
    RevealConfig,
    SettlementConfig,
    WorldGenConfig,
    load_config,
)
from .exceptions import ConfigurationError, InvalidStateError, WorldGenError
from .reveal import (
    RevealController,
    RevealState,
    RevealWorker,
    reveal_async,
    run_reveal,
)
from .snapshot import WorldSnapshot
from .terrain import (
    NoiseField,
    generate_world,
    load_snapshot,
    place_settlements_on,
    save_snapshot,
    synthesize,
)
from .types import Color, Coord, SettlementSite

__all__ = [
    # Types
    "Color",
    "Coord",
    "SettlementSite",
    "Biome",
    "biome_from_code",
    # Config
    "NoiseLayer",
    "FieldConfig",
    "ClassificationConfig",
    "SettlementConfig",
    "RevealConfig",
    "WorldGenConfig",
    "load_config",
    # Synthesis
    "NoiseField",
    "WorldSnapshot",
    "synthesize",
    "place_settlements_on",
    "generate_world",
    # Persistence
    "save_snapshot",
    "load_snapshot",
    # Reveal
    "RevealController",
    "RevealState",
    "RevealWorker",
    "run_reveal",
    "reveal_async",
    # Exceptions
    "WorldGenError",
    "ConfigurationError",
    "InvalidStateError",
]
