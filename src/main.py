"""Command line entry point: print the SRTM elevation of one point."""

import argparse
import asyncio
import logging
import sys

from domain.errors import ElevationError, OutOfRangeError
from domain.settings import load_settings
from elevation.service import ElevationService
from shared.constants import LOG_FORMAT, Resolution

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging to stderr, keeping stdout for results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Ground elevation (metres) at a WGS84 point from SRTM tiles',
    )
    parser.add_argument('latitude', type=float, help='Latitude in decimal degrees')
    parser.add_argument('longitude', type=float, help='Longitude in decimal degrees')
    parser.add_argument('--config', help='TOML settings file')
    parser.add_argument(
        '--resolution',
        choices=[r.value for r in Resolution],
        help='Tile resolution family (overrides the settings file)',
    )
    parser.add_argument('--data-dir', help='Directory with local .hgt tiles')
    parser.add_argument('--store-dir', help='Directory to keep downloaded tiles')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


async def run(args: argparse.Namespace) -> float:
    settings = load_settings(args.config)
    overrides = {}
    if args.resolution:
        overrides['resolution'] = args.resolution
    if args.data_dir:
        overrides['data_dir'] = args.data_dir
    if args.store_dir:
        overrides['store_dir'] = args.store_dir
    if overrides:
        settings = settings.model_validate({**settings.model_dump(), **overrides})
    async with ElevationService.from_settings(settings) as service:
        return await service.get_elevation(args.latitude, args.longitude)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        value = asyncio.run(run(args))
    except OutOfRangeError as e:
        logger.error('%s', e)
        return 2
    except ElevationError as e:
        logger.error('Elevation lookup failed: %s', e)
        return 1
    except (OSError, ValueError) as e:
        logger.error('Invalid configuration: %s', e)
        return 2
    print(f'{value:.1f}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
