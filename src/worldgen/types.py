"""Core types shared across world generation."""

from dataclasses import dataclass

# Grid coordinate as (x, y); +X is east, +Y is south
Coord = tuple[int, int]

# RGB color with channels in 0..255
Color = tuple[int, int, int]


@dataclass(frozen=True)
class SettlementSite:
    """A placed settlement: center cell and footprint radius."""

    x: int
    y: int
    radius: int = 1
