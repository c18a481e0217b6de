"""Web Mercator (slippy-map) tile arithmetic.

@see https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames
"""

from __future__ import annotations

import math

from domain.models import TileIndex
from shared.constants import (
    EQUATOR_RESOLUTION_M_PER_PX,
    MAX_ZOOM,
    MERCATOR_LAT_LIMIT_DEG,
    MIN_ZOOM,
    WORLD_LNG_HALF_SPAN_DEG,
    WORLD_LNG_MAX_DEG,
    WORLD_LNG_MIN_DEG,
    WORLD_LNG_SPAN_DEG,
)


class InvalidArgumentError(ValueError):
    """Coordinates or zoom outside the Web Mercator domain."""


def validate_zoom(zoom: int) -> None:
    if zoom > MAX_ZOOM:
        msg = f'Zoom level {zoom} too high'
        raise InvalidArgumentError(msg)
    if zoom < MIN_ZOOM:
        msg = f'Zoom level {zoom} invalid'
        raise InvalidArgumentError(msg)


def validate_lat_lon(lat: float, lon: float) -> None:
    if not (-MERCATOR_LAT_LIMIT_DEG <= lat <= MERCATOR_LAT_LIMIT_DEG):
        msg = f'Latitude {lat} invalid'
        raise InvalidArgumentError(msg)
    if not (WORLD_LNG_MIN_DEG <= lon <= WORLD_LNG_MAX_DEG):
        msg = f'Longitude {lon} invalid'
        raise InvalidArgumentError(msg)


def max_tile_index(zoom: int) -> int:
    """Largest valid x/y tile index at the zoom level."""
    return (1 << zoom) - 1


def lat_lon_to_tile_coords(lat: float, lon: float, zoom: int) -> tuple[float, float]:
    """
    Convert WGS84 (lat, lon) to fractional tile coordinates.

    Args:
        lat: Latitude in degrees, within +-85.0511
        lon: Longitude in degrees, within +-180
        zoom: Zoom level 0..31

    Returns:
        (x, y) where floor(x), floor(y) is the tile containing the point

    Raises:
        InvalidArgumentError: zoom, latitude or longitude out of range

    """
    validate_zoom(zoom)
    validate_lat_lon(lat, lon)

    lat_rad = math.radians(lat)
    n = 1 << zoom
    x = n * ((lon + WORLD_LNG_HALF_SPAN_DEG) / WORLD_LNG_SPAN_DEG)
    y = n * (1 - (math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad)) / math.pi)) / 2
    return x, y


def tile_coords_to_lat_lon(x: float, y: float, zoom: int) -> tuple[float, float]:
    """Inverse of lat_lon_to_tile_coords for (fractional) tile coordinates."""
    validate_zoom(zoom)
    n = 1 << zoom
    lon = x / n * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG
    lat = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y / n))))
    return lat, lon


def zoom_to_resolution(lat: float, zoom: int) -> float:
    """Ground resolution (meters per pixel) at latitude and zoom."""
    return EQUATOR_RESOLUTION_M_PER_PX * math.cos(math.radians(lat)) / (1 << zoom)


def tile_index_for(
    lat: float, lon: float, zoom: int
) -> tuple[TileIndex, tuple[float, float]]:
    """Tile containing (lat, lon) and the point's fractional offset inside it."""
    x, y = lat_lon_to_tile_coords(lat, lon, zoom)
    tx, ty = _clamped_floor(x, y, zoom)
    return TileIndex(tx, ty, zoom), (x - tx, y - ty)


def inside_center_tile(lat: float, lon: float, zoom: int, center: TileIndex) -> bool:
    """Test whether (lat, lon) falls inside the center tile."""
    x, y = lat_lon_to_tile_coords(lat, lon, zoom)
    return _clamped_floor(x, y, zoom) == (center.x, center.y)


def _clamped_floor(x: float, y: float, zoom: int) -> tuple[int, int]:
    # lon == 180 lands one past the last column
    edge = max_tile_index(zoom)
    return min(math.floor(x), edge), min(math.floor(y), edge)
