"""Command-line entry point: load a block of map tiles into the local cache."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from domain.models import LoaderSettings
from domain.profiles import load_profile, save_profile
from geo.mercator import InvalidArgumentError
from shared.constants import LOG_FORMAT
from tiles.loader import TileLoader

if TYPE_CHECKING:
    from collections.abc import Sequence

    from domain.models import LoadReport

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TILE_FAILURES = 1
EXIT_CONFIG_ERROR = 2

# argparse destination -> LoaderSettings field
_OVERRIDES = {
    'source': 'source',
    'lat': 'latitude',
    'lon': 'longitude',
    'zoom': 'zoom',
    'radius': 'block_radius',
    'cache_dir': 'cache_dir',
    'concurrency': 'concurrency',
    'timeout': 'timeout_s',
    'offline': 'offline',
    'verify_cached': 'verify_cached',
}


def setup_logging(*, verbose: bool = False) -> None:
    """Configure application logging to stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sattiles',
        description='Download and cache map tiles around a point',
    )
    parser.add_argument('--profile', help='Profile name or path to a .toml profile')
    parser.add_argument('--save-profile', metavar='NAME', help='Save the effective settings')
    parser.add_argument('--source', help='Tile URL template with {x}, {y}, {z}')
    parser.add_argument('--lat', type=float, help='Center latitude (degrees)')
    parser.add_argument('--lon', type=float, help='Center longitude (degrees)')
    parser.add_argument('--zoom', type=int, help='Zoom level 0..31')
    parser.add_argument('--radius', type=int, help='Tile rings around the center tile')
    parser.add_argument('--cache-dir', help='Base directory of the tile cache')
    parser.add_argument('--concurrency', type=int, help='Parallel downloads')
    parser.add_argument('--timeout', type=float, help='Per-tile HTTP timeout (s)')
    parser.add_argument(
        '--offline',
        action='store_true',
        default=None,
        help='Use cached tiles only',
    )
    parser.add_argument(
        '--verify-cached',
        action='store_true',
        default=None,
        help='Re-download cached tiles that fail to decode',
    )
    parser.add_argument(
        '--coverage',
        action='store_true',
        help='Only report how many tiles of the block are cached',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def settings_from_args(args: argparse.Namespace) -> LoaderSettings:
    """Profile values (if any) overridden by explicitly given options."""
    data: dict = {}
    if args.profile:
        data = load_profile(args.profile).model_dump(exclude_none=True)
    for dest, field in _OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            data[field] = value
    return LoaderSettings.model_validate(data)


def print_report(loader: TileLoader, report: LoadReport) -> None:
    for tile in report.tiles:
        print(f'{tile.x} {tile.y} {tile.z} {tile.image_path}')
    if report.empty_region:
        print('No tiles in the requested region')
        return
    print(
        f'{len(report.tiles)}/{len(report.attempted)} tiles '
        f'({report.cached} cached, {report.fetched} downloaded, '
        f'{len(report.failures)} failed), '
        f'{loader.resolution():.3f} m/px'
    )
    for failure in report.failures:
        status = failure.status if failure.status is not None else '-'
        print(f'failed {failure.index} {failure.reason} {status} {failure.url or ""}')


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        settings = settings_from_args(args)
        if args.save_profile:
            save_profile(args.save_profile, settings)
        loader = TileLoader.from_settings(settings)
    except (
        ValidationError, TOMLKitError, InvalidArgumentError, FileNotFoundError, OSError
    ) as e:
        logger.error('Invalid configuration: %s', e)
        return EXIT_CONFIG_ERROR

    if args.coverage:
        cached, total = loader.cache_coverage()
        print(f'{cached}/{total} tiles cached in {loader.cache_root}')
        return EXIT_OK

    report = asyncio.run(loader.start())
    print_report(loader, report)
    return EXIT_OK if report.complete else EXIT_TILE_FAILURES


if __name__ == '__main__':
    sys.exit(main())
