"""Command-line interface for Kairat Notify."""
import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from kairat_notify import __version__
from kairat_notify.app import TicketMonitor
from kairat_notify.config import REQUIRED_VARIABLES, load_config, missing_variables
from kairat_notify.exceptions import ConfigError
from kairat_notify.models import AppConfig

logger = logging.getLogger(__name__)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: List of command line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Watch the FC Kairat match page and get a Telegram message when tickets go on sale.",
    )

    interval_group = parser.add_argument_group('Schedule')
    interval_group.add_argument(
        '--check-interval',
        type=float,
        metavar='MINUTES',
        help='minutes between status checks (overrides CHECK_INTERVAL_MINUTES)',
    )
    interval_group.add_argument(
        '--operational-interval',
        type=float,
        metavar='HOURS',
        help='hours between operational notifications (overrides OPERATIONAL_INTERVAL_HOURS)',
    )

    log_group = parser.add_argument_group('Logging')
    log_group.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (overrides LOG_LEVEL)',
    )
    log_group.add_argument(
        '--verbose', '-v',
        action='store_const',
        const='DEBUG',
        dest='log_level',
        help='Enable verbose output (same as --log-level DEBUG)',
    )

    parser.add_argument(
        '--check-setup',
        action='store_true',
        help='check the .env file and required variables, then exit',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
        help='show version and exit',
    )

    if args is None:
        args = sys.argv[1:]
    return parser.parse_args(args)


def apply_args(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Override configuration values with the ones given on the command line."""
    if args.check_interval is not None:
        if args.check_interval <= 0:
            raise ConfigError("--check-interval must be greater than zero")
        config.schedule.check_interval = args.check_interval

    if args.operational_interval is not None:
        if args.operational_interval <= 0:
            raise ConfigError("--operational-interval must be greater than zero")
        config.schedule.operational_interval = args.operational_interval

    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def configure_logging(level: str = 'INFO') -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as a string (e.g., 'INFO', 'DEBUG').
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # httpx logs every request URL, and Telegram URLs contain the bot token
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def check_setup(env_path: Path = Path('.') / '.env') -> bool:
    """Print whether the bot is ready to start. Returns True when it is."""
    print("🧪 Testing Kairat Notify Bot Setup...\n")

    if env_path.exists():
        print("✅ .env file found")
        load_dotenv(dotenv_path=env_path)
    else:
        print("❌ .env file not found")
        print(f"   Please create .env file with {' and '.join(REQUIRED_VARIABLES)}")

    missing = missing_variables(os.environ)
    for name in REQUIRED_VARIABLES:
        if name in missing:
            print(f"❌ {name} is missing")
        else:
            print(f"✅ {name} is set")

    print("\n📋 Next steps:")
    print(f"1. Make sure .env file has {' and '.join(REQUIRED_VARIABLES)}")
    print("2. Run: kairat-notify")
    print("\n💡 Send /status to your bot to test manually")
    return not missing


async def async_main(args: Optional[argparse.Namespace] = None) -> int:
    """Async entry point for the CLI."""
    if args is None:
        args = parse_args()

    try:
        config = apply_args(load_config(), args)
    except ConfigError as e:
        configure_logging()
        logger.error(f"❌ {e}")
        if e.missing:
            for name in e.missing:
                logger.error(f"  - {name}")
            logger.error("Please check your .env file and ensure all required variables are set.")
        return 1

    configure_logging(level=config.log_level)

    try:
        monitor = TicketMonitor(config)
        await monitor.run()
    except Exception as e:
        logger.critical(f"❌ Failed to start bot: {e}", exc_info=True)
        return 1

    return 0


def main() -> int:
    """Main entry point for CLI."""
    args = parse_args()
    if args.check_setup:
        return 0 if check_setup() else 1

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        print("\n👋 Operation cancelled by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
