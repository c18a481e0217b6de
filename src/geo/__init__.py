"""Geo module - Web Mercator tile arithmetic."""

from .mercator import (
    InvalidArgumentError,
    inside_center_tile,
    lat_lon_to_tile_coords,
    max_tile_index,
    tile_coords_to_lat_lon,
    tile_index_for,
    zoom_to_resolution,
)

__all__ = [
    'InvalidArgumentError',
    'inside_center_tile',
    'lat_lon_to_tile_coords',
    'max_tile_index',
    'tile_coords_to_lat_lon',
    'tile_index_for',
    'zoom_to_resolution',
]
