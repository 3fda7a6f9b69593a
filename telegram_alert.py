# Filename: telegram_alert.py

import asyncio
import logging
from typing import Any, Dict, Union

import requests

from errors import NotificationDispatchError

logger = logging.getLogger("TelegramNotifier")


def render_markdown(content: Union[str, Dict[str, Any]]) -> str:
    """
    Turns a Discord-style embed payload into Telegram Markdown.
    Plain strings are sent unchanged.
    """
    if isinstance(content, str):
        return content

    blocks = []
    for embed in content.get("embeds", []):
        lines = [f"*{embed.get('title', '')}*"]
        if embed.get("description"):
            # Telegram Markdown uses single asterisks for bold
            lines.append(embed["description"].replace("**", "*"))
        for field in embed.get("fields", []):
            lines.append("")
            lines.append(f"*{field.get('name', '')}*")
            lines.append(field.get("value", ""))
        footer = (embed.get("footer") or {}).get("text")
        if footer:
            lines.append("")
            lines.append(f"_{footer}_")
        blocks.append("\n".join(lines))

    if not blocks and content.get("content"):
        return content["content"]
    return "\n\n".join(blocks)


class TelegramNotifier:
    def __init__(self, bot_token: str, chat_id: str, timeout: float = 15.0):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout

        if not self.bot_token or not self.chat_id:
            logger.error("[Telegram] Missing bot token or chat ID!")

    async def send(self, content: Union[str, Dict[str, Any]]):
        await asyncio.to_thread(self.send_markdown, render_markdown(content))

    def send_markdown(self, text: str):
        """
        Sends a raw Markdown message.

        Raises:
            NotificationDispatchError when Telegram rejects or never receives it
        """
        if not self.bot_token or not self.chat_id:
            raise NotificationDispatchError("Telegram bot token or chat ID not configured")

        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": False
        }

        try:
            response = requests.post(url, data=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationDispatchError(f"Telegram request exception: {e}") from e

        if response.status_code != 200:
            raise NotificationDispatchError(f"Telegram failed: {response.status_code} - {response.text}")
        logger.info("[Telegram] ✅ Message sent successfully.")
