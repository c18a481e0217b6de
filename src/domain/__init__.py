"""Domain layer - tile models, settings and profiles."""
from domain.models import LoaderSettings, LoadReport, MapTile, TileFailure, TileIndex
from domain.profiles import (
    delete_profile,
    ensure_profiles_dir,
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    'LoadReport',
    'LoaderSettings',
    'MapTile',
    'TileFailure',
    'TileIndex',
    'delete_profile',
    'ensure_profiles_dir',
    'list_profiles',
    'load_profile',
    'save_profile',
]
