"""WorldSnapshot: the grids produced by one synthesis pass."""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .biomes import Biome, biome_from_code
from .types import Color, SettlementSite

SEGMENT_SIZE = 25


@dataclass
class WorldSnapshot:
    """Complete output of one synthesis pass.

    All grids have shape (height, width); colors has a trailing RGB axis.
    A snapshot cut from a larger world records its origin in that world
    (segment_x, segment_y) and the world's size (parent_width,
    parent_height); both parent fields are None for a whole world.
    """

    heights: NDArray[np.float32]
    moisture: NDArray[np.float32]
    temperature: NDArray[np.float32]
    biomes: NDArray[np.uint8]
    colors: NDArray[np.uint8]
    seed: int
    settlements: list[SettlementSite] = field(default_factory=list)
    segment_x: int = 0
    segment_y: int = 0
    parent_width: int | None = None
    parent_height: int | None = None

    @property
    def width(self) -> int:
        return self.heights.shape[1]

    @property
    def height(self) -> int:
        return self.heights.shape[0]

    @property
    def is_segment(self) -> bool:
        """Whether this snapshot is a sub-region of a larger world."""
        return self.parent_width is not None

    def biome_at(self, x: int, y: int) -> Biome:
        return biome_from_code(self.biomes[y, x])

    def color_at(self, x: int, y: int) -> Color:
        r, g, b = self.colors[y, x]
        return int(r), int(g), int(b)

    def segment(
        self,
        section_x: int,
        section_y: int,
        size: int = SEGMENT_SIZE,
    ) -> "WorldSnapshot":
        """Cut out the size x size section at (section_x, section_y).

        Sections that would run past the right or bottom edge are shifted
        back to fit inside the map. Segments are never padded: on a map
        smaller than size the segment starts at 0 and is only as large as
        the map, so callers expecting a fixed size x size block must pad it
        themselves. Settlements are kept when their center lies inside the
        segment, in segment coordinates. The result is always marked as a
        segment, including section (0, 0), and carries the size of the
        outermost world.
        """
        start_x = min(section_x * size, self.width - size)
        start_y = min(section_y * size, self.height - size)
        start_x, start_y = max(start_x, 0), max(start_y, 0)
        end_x = min(start_x + size, self.width)
        end_y = min(start_y + size, self.height)

        region = np.s_[start_y:end_y, start_x:end_x]
        settlements = [
            SettlementSite(x=s.x - start_x, y=s.y - start_y, radius=s.radius)
            for s in self.settlements
            if start_x <= s.x < end_x and start_y <= s.y < end_y
        ]

        return WorldSnapshot(
            heights=self.heights[region].copy(),
            moisture=self.moisture[region].copy(),
            temperature=self.temperature[region].copy(),
            biomes=self.biomes[region].copy(),
            colors=self.colors[region].copy(),
            seed=self.seed,
            settlements=settlements,
            segment_x=self.segment_x + start_x,
            segment_y=self.segment_y + start_y,
            parent_width=self.parent_width if self.is_segment else self.width,
            parent_height=self.parent_height if self.is_segment else self.height,
        )
