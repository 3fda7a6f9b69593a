import pytest

from models import TrackedToken
from status_server import create_app, format_percent, format_token
from tracker_state import TrackerState

from fakes import make_config


def _token(mint, price, amount, change):
    return TrackedToken(
        mint=mint, symbol=mint[:3], price_usd=price, fdv=7543.21, volume_24h=1234567.8,
        liquidity_usd=4321.0, price_change_24h=change, amount=amount, value_usd=amount * price,
        updated_at="2026-10-19T12:00:00+00:00",
    )


@pytest.fixture
def state():
    return TrackerState()


@pytest.fixture
def client(state):
    app = create_app(make_config(), state)
    app.config["TESTING"] = True
    return app.test_client()


def test_format_percent_sign_prefix() -> None:
    assert format_percent(3.14159) == "+3.14%"
    assert format_percent(-2.5) == "-2.50%"
    assert format_percent(0) == "0.00%"


def test_format_token_renders_human_readable_strings() -> None:
    row = format_token(_token("MINTAAA", 0.000012345678, 2500000.1234567, 42))

    assert row["price"] == "$0.00001235"
    assert row["marketCap"] == "$7,543.21"
    assert row["priceChange24h"] == "+42.00%"
    assert row["amount"] == "2,500,000.123457"
    assert row["value"] == "$30.86"
    assert row["volume24h"] == "$1,234,567.8"
    assert row["liquidity"] == "$4,321"


def test_status_before_first_poll(client) -> None:
    body = client.get("/").get_json()

    assert body["status"] == "active"
    assert body["wallet"] == make_config()["WALLET_ADDRESS"]
    assert body["lastUpdate"] is None
    assert body["serverTime"]
    assert body["marketCapThresholds"] == {"FIRST": 5000, "SECOND": 10000}
    assert body["updateInterval"] == "45 seconds"
    assert body["knownTokensCount"] == 0
    assert body["trackedTokensCount"] == 0


def test_status_reports_last_successful_poll(client, state) -> None:
    state.update_token(_token("MINTAAA", 1.0, 1.0, 0))
    state.remember(["MINTAAA", "MINTBBB"])
    state.record_poll_success()

    body = client.get("/").get_json()

    assert body["lastUpdate"] == state.get_statistics()["last_successful_poll"]
    assert body["knownTokensCount"] == 2
    assert body["trackedTokensCount"] == 1


def test_tokens_lists_every_tracked_mint(client, state) -> None:
    state.update_token(_token("MINTAAA", 0.5, 10, 5.5))
    state.update_token(_token("MINTBBB", 2.0, 3, -1))

    body = client.get("/tokens").get_json()

    assert body["totalTokens"] == 2
    rows = {row["mint"]: row for row in body["tokens"]}
    assert rows["MINTAAA"]["value"] == "$5"
    assert rows["MINTAAA"]["priceChange24h"] == "+5.50%"
    assert rows["MINTBBB"]["value"] == "$6"
    assert rows["MINTBBB"]["priceChange24h"] == "-1.00%"


def test_tokens_empty_state(client) -> None:
    assert client.get("/tokens").get_json() == {"totalTokens": 0, "tokens": []}
