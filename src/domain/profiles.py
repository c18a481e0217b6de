"""TOML profiles for tile loading sessions."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import tomlkit

from domain.models import LoaderSettings
from shared.constants import APP_DIR_NAME, HOME_DIR_NAME, PROFILE_SUFFIX, PROFILES_DIR_NAME

logger = logging.getLogger(__name__)


def _user_profiles_dir() -> Path:
    """
    Determine profiles directory.

    %APPDATA%/SatTiles/profiles when APPDATA is set, otherwise
    ~/.sattiles/profiles.
    """
    appdata = os.getenv('APPDATA')
    if appdata:
        return Path(appdata) / APP_DIR_NAME / PROFILES_DIR_NAME
    return Path.home() / HOME_DIR_NAME / PROFILES_DIR_NAME


def ensure_profiles_dir() -> Path:
    profiles_dir = _user_profiles_dir()
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir


def list_profiles() -> list[str]:
    """Profile names without extension."""
    folder = ensure_profiles_dir()
    return sorted(p.stem for p in folder.glob(f'*{PROFILE_SUFFIX}') if p.is_file())


def profile_path(name: str) -> Path:
    """Profile file path for a profile name."""
    return ensure_profiles_dir() / f'{name}{PROFILE_SUFFIX}'


def _resolve(name_or_path: str | Path) -> Path:
    p = Path(name_or_path)
    if p.suffix.lower() == PROFILE_SUFFIX:
        return p
    return profile_path(str(name_or_path))


def load_profile(name_or_path: str | Path) -> LoaderSettings:
    """
    Load and validate a TOML profile into LoaderSettings.

    Accepts a profile name from the profiles directory or a path to a
    .toml file.

    Raises:
        FileNotFoundError: the profile does not exist.
        pydantic.ValidationError: the profile holds invalid settings.

    """
    path = _resolve(name_or_path)
    if not path.exists():
        msg = f'Profile not found: {path}'
        raise FileNotFoundError(msg)
    data = tomlkit.parse(path.read_text(encoding='utf-8'))
    settings = LoaderSettings.model_validate(data.unwrap())
    logger.info(
        'Profile %s loaded: source=%s lat=%.6f lon=%.6f zoom=%d radius=%d',
        path,
        settings.source,
        settings.latitude,
        settings.longitude,
        settings.zoom,
        settings.block_radius,
    )
    return settings


def save_profile(name_or_path: str | Path, settings: LoaderSettings) -> Path:
    """Save a profile as TOML (no atomicity or backups)."""
    path = _resolve(name_or_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # TOML has no null, unset optional fields are simply left out
    data = settings.model_dump(mode='json', exclude_none=True)
    path.write_text(tomlkit.dumps(data), encoding='utf-8')
    logger.info('Profile saved: %s', path)
    return path


def delete_profile(name: str) -> bool:
    """Delete a named profile. Returns False when it did not exist."""
    path = profile_path(name)
    if not path.exists():
        return False
    path.unlink()
    logger.info('Profile deleted: %s', path)
    return True
