# Filename: main.py

import asyncio
import logging
import sys

from config import load_config, validate_config
from data_sources import HoldingsSource, MarketDataSource
from errors import ConfigurationError
from notifier import build_notifier
from status_server import create_app, run_status_server
from tracker_state import TrackerState
from wallet_tracker import WalletTracker

logger = logging.getLogger("Main")


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


async def run_tracker(config, state: TrackerState):
    holdings_source = HoldingsSource(config)
    tracker = WalletTracker(
        config=config,
        state=state,
        holdings_source=holdings_source,
        market_source=MarketDataSource(config),
        notifier=build_notifier(config),
    )
    try:
        await tracker.run()
    finally:
        await holdings_source.close()


def main():
    setup_logging()
    config = load_config()

    try:
        validate_config(config)
    except ConfigurationError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config["LOG_LEVEL"].upper())

    logger.info(f"🚀 Started tracking tokens for wallet {config['WALLET_ADDRESS']}...")
    logger.info(f"Checking tokens every {config['UPDATE_INTERVAL_SECONDS']} seconds in the background")
    logger.info(
        f"Will notify ONLY when tokens reach {config['MC_THRESHOLD_FIRST']} "
        f"or {config['MC_THRESHOLD_SECOND']} market cap"
    )

    state = TrackerState()
    run_status_server(create_app(config, state), config["STATUS_HOST"], config["STATUS_PORT"])

    try:
        asyncio.run(run_tracker(config, state))
    except KeyboardInterrupt:
        logger.info("❌ Tracker stopped by user.")


if __name__ == "__main__":
    main()
