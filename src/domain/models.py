from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from shared.constants import (
    DEFAULT_BLOCK_RADIUS,
    DEFAULT_TILE_SOURCE,
    DOWNLOAD_CONCURRENCY,
    HTTP_TIMEOUT_DEFAULT,
    MAX_ZOOM,
    MERCATOR_LAT_LIMIT_DEG,
    MIN_ZOOM,
    WORLD_LNG_MAX_DEG,
    WORLD_LNG_MIN_DEG,
)


@dataclass(frozen=True)
class TileIndex:
    """Slippy-map tile address (x, y) at zoom z."""

    x: int
    y: int
    z: int

    @property
    def row_major_key(self) -> tuple[int, int, int]:
        """Sort key matching the loader's iteration order (y outer, x inner)."""
        return self.z, self.y, self.x

    def __str__(self) -> str:
        return f'{self.z}/{self.x}/{self.y}'


@dataclass(frozen=True)
class MapTile:
    """A tile resolved to a local image file."""

    index: TileIndex
    image_path: Path

    @property
    def x(self) -> int:
        return self.index.x

    @property
    def y(self) -> int:
        return self.index.y

    @property
    def z(self) -> int:
        return self.index.z


@dataclass(frozen=True)
class TileFailure:
    """A tile that could not be resolved during a load."""

    index: TileIndex
    url: str | None
    status: int | None
    reason: str
    detail: str = ''


@dataclass
class LoadReport:
    """Outcome of one TileLoader.start() call.

    ``attempted`` lists every grid index in load order, so an empty report
    with no attempts means the region produced no grid, while an empty
    report with failures means every tile failed.
    """

    attempted: list[TileIndex] = field(default_factory=list)
    tiles: list[MapTile] = field(default_factory=list)
    failures: list[TileFailure] = field(default_factory=list)
    cached: int = 0
    fetched: int = 0
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        return not self.cancelled and not self.failures

    @property
    def empty_region(self) -> bool:
        return not self.attempted


class LoaderSettings(BaseModel):
    """Configuration of a tile loading session."""

    model_config = {
        'extra': 'ignore',  # profiles may carry keys of newer versions
    }

    # URL template with {x}/{y}/{z} placeholders
    source: str = DEFAULT_TILE_SOURCE
    # Center of the loaded block (WGS84 degrees)
    latitude: float
    longitude: float
    zoom: int = Field(ge=MIN_ZOOM, le=MAX_ZOOM)
    # Tile rings around the center tile
    block_radius: int = Field(default=DEFAULT_BLOCK_RADIUS, ge=0)
    # Base directory for per-source cache roots; None = resolve_cache_dir()
    cache_dir: Path | None = None
    concurrency: int = Field(default=DOWNLOAD_CONCURRENCY, ge=1)
    timeout_s: float = Field(default=HTTP_TIMEOUT_DEFAULT, gt=0)
    # Use only cached tiles, never touch the network
    offline: bool = False
    # Re-download cached files that fail image verification
    verify_cached: bool = False

    @field_validator('source')
    @classmethod
    def validate_source(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = 'Tile source template must not be empty'
            raise ValueError(msg)
        return v

    @field_validator('latitude')
    @classmethod
    def validate_latitude(cls, v: float | str) -> float:
        v = float(v)
        if not (-MERCATOR_LAT_LIMIT_DEG <= v <= MERCATOR_LAT_LIMIT_DEG):
            msg = (
                f'Latitude must be within [-{MERCATOR_LAT_LIMIT_DEG}, '
                f'{MERCATOR_LAT_LIMIT_DEG}]'
            )
            raise ValueError(msg)
        return v

    @field_validator('longitude')
    @classmethod
    def validate_longitude(cls, v: float | str) -> float:
        v = float(v)
        if not (WORLD_LNG_MIN_DEG <= v <= WORLD_LNG_MAX_DEG):
            msg = f'Longitude must be within [{WORLD_LNG_MIN_DEG}, {WORLD_LNG_MAX_DEG}]'
            raise ValueError(msg)
        return v
