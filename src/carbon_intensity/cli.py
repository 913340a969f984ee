"""
Command-line entry point for the carbon-intensity service.

    carbon-intensity [--config PATH] [--dry-run] [--log-level LEVEL]

Reads the configuration file, selects the configured data source, reader and
publisher, and runs until the reader finishes or SIGINT/SIGTERM arrives.
Exit status is 0 on success and 1 on any fatal error.
"""

import argparse
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

from carbon_intensity.core.exceptions import CarbonIntensityException
from carbon_intensity.core.logger import configure_root_logger, get_logger
from carbon_intensity.models.app_config import AppConfig, load_app_config
from carbon_intensity.orchestrator import Orchestrator

DEFAULT_CONFIG_PATH = "config/app-config.properties"
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carbon-intensity",
        description="Retrieve carbon-intensity readings per zone and forward them to a publisher",
    )
    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (.properties, .json or .yaml; default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Send output to the console instead of the configured data publisher",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level",
    )
    return parser


def load_config(config_path: str, *, dry_run: bool = False) -> AppConfig:
    """Load the config file and apply command-line overrides."""
    config = load_app_config(config_path)
    if dry_run:
        logger.info("Running with --dry-run")
        config = config.with_dry_run()
    return config


@contextmanager
def shutdown_on_signals(orchestrator: Orchestrator) -> Iterator[None]:
    """Route SIGINT/SIGTERM to ``orchestrator.request_shutdown`` while the block runs."""

    def _handler(signum, _frame):
        orchestrator.request_shutdown(signum)

    previous = {sig: signal.signal(sig, _handler) for sig in SHUTDOWN_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the service once and return the process exit status.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        0 on success, 1 on a fatal error (bad config, unknown variant, missing
        credential, lost publisher connection, aborted sweep).
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, dry_run=args.dry_run)
        configure_root_logger(args.log_level or config.log_level)
        logger.info(
            f"Loaded config: data-source={config.data_source}, reader={config.reader}, "
            f"data-publisher={config.data_publisher}"
        )

        orchestrator = Orchestrator(config)
        with shutdown_on_signals(orchestrator):
            orchestrator.run()
        return 0

    except CarbonIntensityException as e:
        logger.error(f"Fatal: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal: unexpected error: {e}", exc_info=True)
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
