"""
Data sources for the wallet milestone tracker.
Wallet holdings come from a Solana RPC node, market data from DexScreener.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Any

import aiohttp
from solana.rpc.async_api import AsyncClient
from solana.rpc.types import TokenAccountOpts
from solders.pubkey import Pubkey

from errors import EnrichmentFetchError, HoldingsFetchError
from models import HoldingRecord, MarketSnapshot

logger = logging.getLogger("data_sources")


def parse_token_account(parsed: Dict[str, Any]) -> HoldingRecord:
    """
    Build a HoldingRecord from the jsonParsed data of an SPL token account.

    Raises:
        KeyError, TypeError, ValueError when the payload is not a token account
    """
    info = parsed["info"]
    token_amount = info["tokenAmount"]
    ui_amount = token_amount.get("uiAmount")
    return HoldingRecord(
        mint=str(info["mint"]),
        amount=float(ui_amount) if ui_amount is not None else 0.0,
        decimals=int(token_amount["decimals"]),
    )


def filter_holdings(accounts: List[Any], min_amount: float) -> List[HoldingRecord]:
    """Parse raw accounts, dropping unparsable ones and dust at or below min_amount."""
    holdings = []
    for account in accounts:
        try:
            holding = parse_token_account(account)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Error parsing token account: {e}")
            continue
        if holding.amount > min_amount:
            holdings.append(holding)
    return holdings


def _parsed_data(keyed: Any) -> Any:
    """jsonParsed payload of a keyed account, or None when the node returned raw bytes."""
    try:
        return keyed.account.data.parsed
    except AttributeError:
        return None


class HoldingsSource:
    """Reads the SPL token accounts owned by one wallet."""

    def __init__(self, config: Dict[str, Any], client: Optional[AsyncClient] = None):
        self.wallet_address = config["WALLET_ADDRESS"]
        self.program_id = config["TOKEN_PROGRAM_ID"]
        self.min_amount = config["MIN_TOKEN_AMOUNT"]
        self.client = client or AsyncClient(
            config["RPC_HTTP_ENDPOINT"],
            commitment=config.get("COMMITMENT", "confirmed"),
            timeout=config["HTTP_TIMEOUT_SECONDS"],
        )

    async def get_token_accounts(self) -> List[Any]:
        """
        Fetch the raw jsonParsed token accounts of the wallet.

        Raises:
            HoldingsFetchError on any RPC or transport failure
        """
        try:
            owner = Pubkey.from_string(self.wallet_address)
            opts = TokenAccountOpts(program_id=Pubkey.from_string(self.program_id))
            resp = await self.client.get_token_accounts_by_owner_json_parsed(owner, opts)
        except Exception as e:
            raise HoldingsFetchError(f"getTokenAccountsByOwner failed: {e}") from e

        if not hasattr(resp, "value"):
            raise HoldingsFetchError(f"Invalid token accounts response: {resp}")

        return [_parsed_data(keyed) for keyed in resp.value]

    async def fetch_holdings(self) -> List[HoldingRecord]:
        """Return the wallet's non-dust holdings, or an empty list if the fetch fails."""
        logger.info(f"Fetching token accounts for wallet: {self.wallet_address}")
        try:
            accounts = await self.get_token_accounts()
        except HoldingsFetchError as e:
            logger.error(f"Error fetching token accounts: {e}")
            return []

        logger.info(f"Found {len(accounts)} raw token accounts")
        holdings = filter_holdings(accounts, self.min_amount)
        logger.info(f"Found {len(holdings)} tokens with non-zero balances")
        return holdings

    async def close(self):
        await self.client.close()


def _to_float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def safe_get(d: Any, *keys: str, default: Any = None) -> Any:
    cur = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def pair_liquidity(pair: Dict[str, Any]) -> float:
    return _to_float(safe_get(pair, "liquidity", "usd"))


def select_most_liquid_pair(pairs: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the pair with the highest USD liquidity; missing liquidity counts as 0."""
    pairs = [pair for pair in pairs if isinstance(pair, dict)]
    if not pairs:
        return None
    return max(pairs, key=pair_liquidity)


def snapshot_from_pair(pair: Dict[str, Any]) -> MarketSnapshot:
    symbol = safe_get(pair, "baseToken", "symbol")
    return MarketSnapshot(
        symbol=str(symbol) if symbol else "Unknown",
        price_usd=_to_float(safe_get(pair, "priceUsd")),
        fdv=_to_float(safe_get(pair, "fdv")),
        volume_24h=_to_float(safe_get(pair, "volume", "h24")),
        liquidity_usd=pair_liquidity(pair),
        price_change_24h=_to_float(safe_get(pair, "priceChange", "h24")),
        pair_id=safe_get(pair, "pairAddress"),
    )


class MarketDataSource:
    """
    DexScreener market data lookup by mint address
    """

    def __init__(self, config: Dict[str, Any]):
        self.base_url = config["DEXSCREENER_BASE_URL"].rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=config["HTTP_TIMEOUT_SECONDS"])

    async def get_pairs(self, mint: str) -> List[Dict[str, Any]]:
        """
        Fetch every DexScreener pair for a mint.

        Raises:
            EnrichmentFetchError on HTTP or transport failure
        """
        url = f"{self.base_url}/latest/dex/tokens/{mint}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise EnrichmentFetchError(mint, f"HTTP {response.status}")
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise EnrichmentFetchError(mint, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            raise EnrichmentFetchError(mint, "invalid response format")
        return data.get("pairs") or []

    async def fetch_snapshot(self, mint: str) -> Optional[MarketSnapshot]:
        """Return the market snapshot of the most liquid pair, or None when unavailable."""
        logger.info(f"Fetching DEXScreener data for mint: {mint}")
        try:
            pairs = await self.get_pairs(mint)
        except EnrichmentFetchError as e:
            logger.error(f"Error fetching DEXScreener data for {e}")
            return None

        try:
            if not isinstance(pairs, list):
                raise TypeError(f"pairs is {type(pairs).__name__}, expected a list")
            pair = select_most_liquid_pair(pairs)
            snapshot = snapshot_from_pair(pair) if pair is not None else None
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"Malformed DEXScreener data for {mint}: {e}")
            return None

        if snapshot is None:
            logger.info(f"No DEXScreener data found for mint: {mint}")
        return snapshot
