#!/usr/bin/env python3
"""
Portfolio Dashboard - Console Entry Point
"""
import argparse
import asyncio
import logging

from config import settings

logger = logging.getLogger(__name__)


def setup_logging(log_dir: str = "logs", verbose: bool = False):
    """Configure logging for the application."""
    from config.logging_config import setup_dashboard_logging

    setup_dashboard_logging(log_dir, logging.INFO if verbose else logging.WARNING)

    # Reduce noise from third-party libraries
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Console view of the portfolio dashboard")
    parser.add_argument("--symbol", default=settings.DEFAULT_SYMBOL, help="Trading pair to chart")
    parser.add_argument("--interval", default=settings.DEFAULT_INTERVAL, help="Kline interval, e.g. 1h or 1d")
    parser.add_argument("--once", action="store_true", help="Print one snapshot and exit")
    parser.add_argument("--log-dir", default="logs", help="Directory for log files")
    parser.add_argument("--verbose", action="store_true", help="Echo INFO logs to the console")
    return parser.parse_args(argv)


async def run_dashboard(args: argparse.Namespace):
    from dashboard_data.views.dashboard_session import DashboardSession

    logger.info(f"Backend configuration: {settings.api_config()}")
    refreshed = asyncio.Event()

    def on_prices(state):
        if not state.loading:
            refreshed.set()

    async with DashboardSession(symbol=args.symbol, interval=args.interval) as session:
        print(session.snapshot())
        if args.once:
            return

        session.prices.subscribe(on_prices)
        while True:
            refreshed.clear()
            await refreshed.wait()
            print()
            print(session.snapshot())


def main(argv=None):
    """Main entry point for the console dashboard."""
    args = parse_args(argv)
    setup_logging(args.log_dir, args.verbose)
    try:
        asyncio.run(run_dashboard(args))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Error in main: {str(e)}")
        raise


if __name__ == "__main__":
    main()
