# Filename: wallet_tracker.py

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from data_sources import HoldingsSource, MarketDataSource
from errors import UnhandledCycleError
from models import FIRST, SECOND, MilestoneState, TrackedToken
from notifier import dispatch_all, format_error_message, format_milestone_message, send_safely
from tracker_state import TrackerState

logger = logging.getLogger("WalletTracker")


def evaluate_milestone(state: MilestoneState, mc: float, thresholds: Dict[str, float]) -> Optional[str]:
    """
    Return the milestone a market cap newly crosses, or None.
    The higher threshold is checked first so a jump past both gives a single SECOND.
    """
    if mc >= thresholds[SECOND] and not state.second_crossed:
        return SECOND
    if mc >= thresholds[FIRST] and not state.first_crossed:
        return FIRST
    return None


class WalletTracker:
    def __init__(self, config: Dict[str, Any], state: TrackerState, holdings_source: HoldingsSource,
                 market_source: MarketDataSource, notifier):
        self.config = config
        self.state = state
        self.holdings_source = holdings_source
        self.market_source = market_source
        self.notifier = notifier
        self.interval = config["UPDATE_INTERVAL_SECONDS"]
        self.thresholds = {
            FIRST: config["MC_THRESHOLD_FIRST"],
            SECOND: config["MC_THRESHOLD_SECOND"],
        }
        self._cycle_lock = asyncio.Lock()

    async def run(self):
        """Run a cycle now, then one every interval. Cycles never overlap."""
        while True:
            started = time.monotonic()
            await self.run_cycle()
            elapsed = time.monotonic() - started
            if elapsed > self.interval:
                logger.warning(f"Cycle took {elapsed:.1f}s, longer than the {self.interval}s interval")
            await asyncio.sleep(max(0.0, self.interval - elapsed))

    async def run_cycle(self) -> bool:
        """
        Run one polling cycle. Unexpected errors are logged and reported once
        to the notification channel; they never propagate.

        Returns:
            True when the cycle completed
        """
        async with self._cycle_lock:
            try:
                await self._track_wallet()
            except Exception as e:
                error = UnhandledCycleError(e)
                logger.exception(f"Error tracking wallet: {error}")
                await send_safely(self.notifier, format_error_message(error))
                return False

            self.state.record_poll_success()
            return True

    async def _track_wallet(self):
        logger.info("Starting wallet tracking...")
        holdings = await self.holdings_source.fetch_holdings()

        snapshots = await asyncio.gather(
            *(self.market_source.fetch_snapshot(holding.mint) for holding in holdings),
            return_exceptions=True,
        )

        updated_at = datetime.now(timezone.utc).isoformat()
        notifications: List[Dict[str, Any]] = []

        for holding, snapshot in zip(holdings, snapshots):
            if isinstance(snapshot, Exception):
                logger.error(f"Skipping {holding.mint}, enrichment failed: {snapshot!r}")
                continue
            if isinstance(snapshot, BaseException):
                raise snapshot
            if snapshot is None:
                continue

            logger.info(
                f"Token: {snapshot.symbol}, Price: ${snapshot.price_usd}, "
                f"MC: ${snapshot.fdv}, Amount: {holding.amount}"
            )
            self.state.update_token(TrackedToken.from_snapshot(holding, snapshot, updated_at))

            milestone = evaluate_milestone(self.state.milestone_for(holding.mint), snapshot.fdv, self.thresholds)
            if milestone is None:
                continue

            notifications.append(format_milestone_message(snapshot.symbol, snapshot.fdv, milestone, self.thresholds))
            self.state.mark_milestone(holding.mint, milestone)
            logger.info(f"Sending {milestone} milestone notification for {snapshot.symbol}")

        self.state.remember(holding.mint for holding in holdings)

        delivered = await dispatch_all(self.notifier, notifications)
        logger.info(f"Wallet tracking completed ({delivered}/{len(notifications)} notifications delivered)")
