from config import DEFAULT_CONFIG
from errors import NotificationDispatchError
from models import HoldingRecord, MarketSnapshot


def make_config(**overrides):
    config = dict(DEFAULT_CONFIG)
    config.update(overrides)
    return config


class FakeHoldingsSource:
    def __init__(self, holdings=None, error=None):
        self.holdings = holdings or []
        self.error = error
        self.calls = 0

    async def fetch_holdings(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.holdings)


class FakeMarketSource:
    """Returns a snapshot per mint from a mutable {mint: fdv or MarketSnapshot} map."""

    def __init__(self, market=None):
        self.market = market or {}
        self.requested = []

    async def fetch_snapshot(self, mint):
        self.requested.append(mint)
        entry = self.market.get(mint)
        if entry is None or isinstance(entry, MarketSnapshot):
            return entry
        return MarketSnapshot(symbol=mint, price_usd=0.5, fdv=entry)


class RecordingNotifier:
    def __init__(self, fail_on=None):
        self.sent = []
        self.fail_on = fail_on or (lambda content: False)

    async def send(self, content):
        if self.fail_on(content):
            raise NotificationDispatchError("boom")
        self.sent.append(content)


def holding(mint, amount=100.0, decimals=6):
    return HoldingRecord(mint=mint, amount=amount, decimals=decimals)
