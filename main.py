# main.py

"""Entry point for the pricewatch domain price checker."""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from pricewatch.config.logging_config import setup_logging
from pricewatch.config.settings import Settings
from pricewatch.errors import ConfigError

logger = logging.getLogger("pricewatch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pricewatch",
        description="Check Dynadot prices for tracked domains and alert on change.",
    )
    parser.add_argument(
        "-d",
        "--domains",
        default=None,
        help="Comma-separated domains (default: PRICEWATCH_DOMAINS).",
    )
    parser.add_argument(
        "--data-path",
        default=None,
        dest="data_path",
        help="Price history JSON file (default: PRICEWATCH_DATA_PATH).",
    )
    parser.add_argument(
        "--test-notification",
        action="store_true",
        default=False,
        dest="test_notification",
        help="Send a test Pushover notification and exit.",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        default=False,
        help="Print the stored price history and exit.",
    )
    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    """Load settings from the environment and apply CLI overrides."""
    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if args.domains is not None:
        overrides["domains"] = tuple(
            d.strip() for d in args.domains.split(",") if d.strip()
        )
    if args.data_path is not None:
        overrides["data_path"] = Path(args.data_path)
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    return settings


def main() -> None:
    """Route to the price check (default), test push, or history view."""
    log_file = setup_logging()
    logger.info("pricewatch starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from pricewatch.cli.runner import (
        run_price_check,
        run_test_notification,
        show_history,
    )

    try:
        settings = _resolve_settings(args)
        if not (args.history or args.test_notification):
            settings.validate()
    except ConfigError as exc:
        logger.critical("Invalid configuration: %s", exc)
        sys.exit(1)

    if args.history:
        exit_code = show_history(settings)
    elif args.test_notification:
        exit_code = asyncio.run(run_test_notification(settings))
    else:
        exit_code = asyncio.run(run_price_check(settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
