"""Kairat Notify

Watches the FC Kairat match page and sends a Telegram message when tickets go on sale.
"""
import logging
import sys


def main() -> int:
    """Main entry point that runs the CLI with proper asyncio setup."""
    try:
        # Import here to avoid circular imports
        from kairat_notify.cli import main as cli_main

        return cli_main()

    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
