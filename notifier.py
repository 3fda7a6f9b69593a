import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

import aiohttp

from errors import NotificationDispatchError
from models import FIRST
from telegram_alert import TelegramNotifier

logger = logging.getLogger("Notifier")

Message = Union[str, Dict[str, Any]]

EMOJIS = {
    "milestone_first": "🚀",
    "milestone_second": "🌕",
    "alert": "⚠️",
}

COLOR_FIRST = 0x00FF00
COLOR_SECOND = 0xFFD700
COLOR_ERROR = 0xFF0000


def format_number(value: float, max_fraction_digits: int = 3) -> str:
    """Group thousands and keep at most max_fraction_digits, without trailing zeros."""
    text = f"{float(value):,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_milestone_message(symbol: str, mc: float, milestone: str, thresholds: Dict[str, float]) -> Dict[str, Any]:
    """Rich message announcing that a token reached a market-cap milestone."""
    threshold = thresholds[milestone]
    emoji = EMOJIS["milestone_first"] if milestone == FIRST else EMOJIS["milestone_second"]

    return {
        "embeds": [{
            "title": f"{emoji} MILESTONE ALERT {emoji}",
            "description": f"**{symbol}** just reached a **${format_number(threshold)}** Market Cap!",
            "color": COLOR_FIRST if milestone == FIRST else COLOR_SECOND,
            "fields": [
                {
                    "name": "Token Details:",
                    "value": f"Market Cap: ${format_number(mc)}\n"
                             f"This is a significant milestone!",
                }
            ],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "footer": {
                "text": "Track this token closely! It's showing momentum!",
            },
        }]
    }


def format_error_message(error: BaseException) -> Dict[str, Any]:
    alert = EMOJIS["alert"]
    return {
        "embeds": [{
            "title": f"{alert} Error Tracking Wallet {alert}",
            "description": f"An error occurred while fetching token data: {error}",
            "color": COLOR_ERROR,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }]
    }


class DiscordNotifier:
    """Posts plain text or embed payloads to a Discord webhook."""

    def __init__(self, webhook_url: str, timeout: float = 15.0):
        self.webhook_url = webhook_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def send(self, content: Message):
        logger.info("Sending Discord message")
        payload = {"content": content} if isinstance(content, str) else content

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status >= 300:
                        body = await response.text()
                        raise NotificationDispatchError(f"Discord webhook returned {response.status}: {body[:200]}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationDispatchError(f"Discord webhook request failed: {e}") from e

        logger.info("Discord message sent successfully")


class LogNotifier:
    """Writes notifications to the log instead of an external channel."""

    async def send(self, content: Message):
        if isinstance(content, str):
            logger.info(f"[NOTIFY] {content}")
            return
        for embed in content.get("embeds", []):
            logger.info(f"[NOTIFY] {embed.get('title', '')} - {embed.get('description', '')}")


def build_notifier(config: Dict[str, Any]):
    backend = str(config.get("NOTIFIER_BACKEND", "log")).lower()
    timeout = config.get("HTTP_TIMEOUT_SECONDS", 15.0)

    if backend == "discord":
        return DiscordNotifier(config["DISCORD_WEBHOOK_URL"], timeout=timeout)
    if backend == "telegram":
        return TelegramNotifier(config["TELEGRAM_BOT_TOKEN"], config["TELEGRAM_CHAT_ID"], timeout=timeout)
    return LogNotifier()


async def send_safely(notifier, content: Message) -> bool:
    """Best-effort delivery: dispatch failures are logged, never raised."""
    try:
        await notifier.send(content)
        return True
    except NotificationDispatchError as e:
        logger.error(f"Failed to send notification: {e}")
        return False
    except Exception:
        logger.exception("Unexpected error while sending notification")
        return False


async def dispatch_all(notifier, messages: List[Message]) -> int:
    """
    Send every message concurrently and wait for all of them to settle.
    One failed delivery never prevents the others.

    Returns:
        Number of messages delivered
    """
    if not messages:
        return 0
    results = await asyncio.gather(
        *(send_safely(notifier, m) for m in messages), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            logger.error(f"Notification dispatch raised: {result!r}")
    return sum(1 for delivered in results if delivered is True)
