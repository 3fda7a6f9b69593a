# Filename: models.py

from dataclasses import dataclass
from typing import Optional

FIRST = "FIRST"
SECOND = "SECOND"


@dataclass
class HoldingRecord:
    """A token account of the watched wallet, as parsed from the RPC response."""
    mint: str                        # Token mint address
    amount: float                    # Human-readable (ui) amount
    decimals: int                    # Decimal precision of the mint


@dataclass
class MarketSnapshot:
    """
    MarketSnapshot is the market data of the most liquid DexScreener pair for a mint.
    """
    symbol: str                      # Base token symbol
    price_usd: float                 # USD price (0 when unknown)
    fdv: float                       # Fully Diluted Valuation, used as market cap
    volume_24h: float = 0            # 24h volume in USD
    liquidity_usd: float = 0         # Pair liquidity in USD
    price_change_24h: float = 0      # 24h price change in percent
    pair_id: Optional[str] = None    # DexScreener pair address


@dataclass
class TrackedToken:
    """Latest market data for a held mint, merged with the held amount."""
    mint: str
    symbol: str
    price_usd: float
    fdv: float
    volume_24h: float
    liquidity_usd: float
    price_change_24h: float
    amount: float
    value_usd: float                 # amount * price_usd
    updated_at: str                  # ISO timestamp of the cycle that wrote it

    @classmethod
    def from_snapshot(cls, holding: HoldingRecord, snapshot: MarketSnapshot, updated_at: str) -> "TrackedToken":
        return cls(
            mint=holding.mint,
            symbol=snapshot.symbol,
            price_usd=snapshot.price_usd,
            fdv=snapshot.fdv,
            volume_24h=snapshot.volume_24h,
            liquidity_usd=snapshot.liquidity_usd,
            price_change_24h=snapshot.price_change_24h,
            amount=holding.amount,
            value_usd=holding.amount * snapshot.price_usd,
            updated_at=updated_at,
        )


@dataclass
class MilestoneState:
    """Which market-cap milestones were already notified for a mint."""
    first_crossed: bool = False
    second_crossed: bool = False
