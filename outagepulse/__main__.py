"""Command line entry point: run one poll cycle or serve the API."""

import argparse
import secrets
import sys
from typing import Optional, List

from .config import load_config
from .cycle import CycleRunner
from .errors import ConfigError, OutagePulseError
from .utils.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='outagepulse',
        description='Keep a live Telegram message for DTEK power outages.',
    )
    parser.add_argument(
        'config',
        nargs='?',
        help='Optional YAML config file (secrets stay in environment variables)',
    )
    parser.add_argument(
        '--serve',
        action='store_true',
        help='Start the HTTP API instead of running a single cycle',
    )
    parser.add_argument(
        '--generate-api-key',
        action='store_true',
        help='Print a new random API key for OUTAGEPULSE_API_KEY and exit',
    )
    return parser


API_KEY_PREFIX = 'outagepulse_key_'


def generate_api_key() -> str:
    return API_KEY_PREFIX + secrets.token_urlsafe(24)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Process exit code (0 on success, 1 on a fatal cycle error)
    """
    args = build_parser().parse_args(argv)
    if args.generate_api_key:
        print(generate_api_key())
        return 0

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logger = setup_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
    )

    if args.serve:
        from .app import create_app

        app = create_app(config=config)
        app.run(host=config.api.host, port=config.api.port, debug=config.api.debug)
        return 0

    runner = CycleRunner.from_config(config)
    try:
        runner.run_once()
    except OutagePulseError as e:
        # Already logged with traceback by the runner
        logger.debug(f"Exiting after fatal error: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
