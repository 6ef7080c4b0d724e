"""Biome labels and their compact storage codes."""

from enum import Enum


class Biome(str, Enum):
    """Human-readable biome derived from height and moisture."""

    DEEP_WATER = "deep_water"
    DRY_PLAINS = "dry_plains"
    LUSH_PLAINS = "lush_plains"
    DRIER_FOREST = "drier_forest"
    DENSE_FOREST = "dense_forest"
    HILLS = "hills"
    MOUNTAINS = "mountains"

    @property
    def label(self) -> str:
        """Display name, e.g. "Deep Water"."""
        return self.value.replace("_", " ").title()

    @property
    def code(self) -> int:
        """uint8 value used in biome grids."""
        return _BIOME_CODES[self]


_BIOME_CODES: dict[Biome, int] = {biome: i for i, biome in enumerate(Biome)}
_CODE_BIOMES: dict[int, Biome] = {i: biome for biome, i in _BIOME_CODES.items()}


def biome_from_code(value: int) -> Biome:
    """Convert a biome grid value back to a Biome.

    Raises:
        ValueError: If the value is not a known biome code.
    """
    try:
        return _CODE_BIOMES[int(value)]
    except KeyError:
        raise ValueError(f"Unknown biome code: {value}") from None
