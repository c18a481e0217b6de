"""Tile block bounds around a center tile."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from domain.models import TileIndex
from geo.mercator import max_tile_index

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class GridBounds:
    """Inclusive tile ranges of a block at one zoom level."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int
    zoom: int

    @property
    def cols(self) -> int:
        return max(0, self.max_x - self.min_x + 1)

    @property
    def rows(self) -> int:
        return max(0, self.max_y - self.min_y + 1)

    @property
    def count(self) -> int:
        return self.cols * self.rows

    def __contains__(self, index: object) -> bool:
        if not isinstance(index, TileIndex):
            return False
        return (
            index.z == self.zoom
            and self.min_x <= index.x <= self.max_x
            and self.min_y <= index.y <= self.max_y
        )


def grid_bounds(center: TileIndex, radius: int) -> GridBounds:
    """
    Block of ``radius`` rings around ``center``, clamped to the world grid.

    Each axis is clamped independently, so near the map edges the block
    shrinks instead of wrapping.
    """
    if radius < 0:
        msg = f'Block radius must be non-negative, got {radius}'
        raise ValueError(msg)
    edge = max_tile_index(center.z)
    return GridBounds(
        min_x=max(0, center.x - radius),
        min_y=max(0, center.y - radius),
        max_x=min(edge, center.x + radius),
        max_y=min(edge, center.y + radius),
        zoom=center.z,
    )


def iter_grid(bounds: GridBounds) -> Iterator[TileIndex]:
    """Yield block indices row by row (y outer, x inner)."""
    for y in range(bounds.min_y, bounds.max_y + 1):
        for x in range(bounds.min_x, bounds.max_x + 1):
            yield TileIndex(x, y, bounds.zoom)
