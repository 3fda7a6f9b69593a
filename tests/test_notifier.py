import asyncio

import pytest
import requests

from errors import NotificationDispatchError
from models import FIRST, SECOND
from notifier import (
    COLOR_FIRST,
    COLOR_SECOND,
    DiscordNotifier,
    LogNotifier,
    build_notifier,
    dispatch_all,
    format_error_message,
    format_milestone_message,
    format_number,
)
from telegram_alert import TelegramNotifier, render_markdown

from fakes import RecordingNotifier, make_config

THRESHOLDS = {FIRST: 5000, SECOND: 10000}


def test_format_number_groups_and_trims() -> None:
    assert format_number(5000) == "5,000"
    assert format_number(1234567.891234) == "1,234,567.891"
    assert format_number(0.00001234, 8) == "0.00001234"
    assert format_number(12.5, 2) == "12.5"
    assert format_number(0) == "0"
    assert format_number(-0.0001) == "0"


def test_milestone_message_tiers() -> None:
    first = format_milestone_message("PEPE", 6123.4, FIRST, THRESHOLDS)["embeds"][0]
    second = format_milestone_message("PEPE", 12000, SECOND, THRESHOLDS)["embeds"][0]

    assert first["color"] == COLOR_FIRST
    assert "**PEPE** just reached a **$5,000** Market Cap!" == first["description"]
    assert "Market Cap: $6,123.4" in first["fields"][0]["value"]
    assert second["color"] == COLOR_SECOND
    assert "$10,000" in second["description"]
    assert second["footer"]["text"]


def test_error_message_carries_cause() -> None:
    embed = format_error_message(RuntimeError("timeout"))["embeds"][0]
    assert embed["description"].endswith("timeout")


def test_dispatch_all_waits_for_every_message() -> None:
    notifier = RecordingNotifier(fail_on=lambda content: content == "bad")

    delivered = asyncio.run(dispatch_all(notifier, ["one", "bad", "two"]))

    assert delivered == 2
    assert sorted(notifier.sent) == ["one", "two"]
    assert asyncio.run(dispatch_all(notifier, [])) == 0


def test_build_notifier_follows_backend() -> None:
    assert isinstance(build_notifier(make_config()), LogNotifier)
    assert isinstance(
        build_notifier(make_config(NOTIFIER_BACKEND="discord", DISCORD_WEBHOOK_URL="https://hook")),
        DiscordNotifier,
    )
    assert isinstance(
        build_notifier(make_config(NOTIFIER_BACKEND="telegram", TELEGRAM_BOT_TOKEN="t", TELEGRAM_CHAT_ID="c")),
        TelegramNotifier,
    )


def test_render_markdown_converts_embeds() -> None:
    text = render_markdown(format_milestone_message("WIF", 5100, FIRST, THRESHOLDS))

    assert text.startswith("*🚀 MILESTONE ALERT 🚀*")
    assert "*WIF* just reached a *$5,000* Market Cap!" in text
    assert "_Track this token closely! It's showing momentum!_" in text
    assert render_markdown("plain") == "plain"


def test_telegram_send_raises_dispatch_error_on_failure(monkeypatch) -> None:
    class _Response:
        status_code = 400
        text = "Bad Request"

    monkeypatch.setattr("telegram_alert.requests.post", lambda *args, **kwargs: _Response())
    notifier = TelegramNotifier("token", "chat")

    with pytest.raises(NotificationDispatchError):
        notifier.send_markdown("hello")

    def _raise(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr("telegram_alert.requests.post", _raise)
    with pytest.raises(NotificationDispatchError):
        asyncio.run(notifier.send("hello"))


def test_telegram_send_posts_markdown(monkeypatch) -> None:
    calls = []

    class _Response:
        status_code = 200
        text = "{}"

    def _post(url, data=None, timeout=None):
        calls.append((url, data, timeout))
        return _Response()

    monkeypatch.setattr("telegram_alert.requests.post", _post)

    asyncio.run(TelegramNotifier("token", "chat", timeout=3).send("hi"))

    url, data, timeout = calls[0]
    assert url == "https://api.telegram.org/bottoken/sendMessage"
    assert data["chat_id"] == "chat"
    assert data["parse_mode"] == "Markdown"
    assert timeout == 3


def test_dispatch_all_settles_when_a_backend_raises_unexpectedly() -> None:
    finished = []

    class _Notifier:
        async def send(self, content):
            if content == "crash":
                raise RuntimeError("unexpected")
            await asyncio.sleep(0.05)
            finished.append(content)

    delivered = asyncio.run(dispatch_all(_Notifier(), ["crash", "slow"]))

    assert delivered == 1
    assert finished == ["slow"]
