# status_server.py
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict

from flask import Flask, jsonify

from models import TrackedToken
from notifier import format_number
from tracker_state import TrackerState

logger = logging.getLogger("StatusServer")


def format_percent(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"


def format_token(token: TrackedToken) -> Dict[str, Any]:
    return {
        "mint": token.mint,
        "symbol": token.symbol,
        "price": f"${format_number(token.price_usd, 8)}",
        "marketCap": f"${format_number(token.fdv)}",
        "priceChange24h": format_percent(token.price_change_24h),
        "amount": format_number(token.amount, 6),
        "value": f"${format_number(token.value_usd, 2)}",
        "volume24h": f"${format_number(token.volume_24h)}",
        "liquidity": f"${format_number(token.liquidity_usd)}",
        "lastUpdated": token.updated_at,
    }


def create_app(config: Dict[str, Any], state: TrackerState) -> Flask:
    app = Flask("WalletMilestoneTracker")

    @app.route("/", methods=["GET"])
    def status():
        stats = state.get_statistics()
        return jsonify({
            "status": "active",
            "wallet": config["WALLET_ADDRESS"],
            "lastUpdate": stats["last_successful_poll"],
            "serverTime": datetime.now(timezone.utc).isoformat(),
            "marketCapThresholds": {
                "FIRST": config["MC_THRESHOLD_FIRST"],
                "SECOND": config["MC_THRESHOLD_SECOND"],
            },
            "updateInterval": f"{config['UPDATE_INTERVAL_SECONDS']} seconds",
            "knownTokensCount": stats["known"],
            "trackedTokensCount": stats["tracked"],
        })

    @app.route("/tokens", methods=["GET"])
    def tokens():
        formatted = [format_token(token) for token in state.tokens_snapshot().values()]
        return jsonify({
            "totalTokens": len(formatted),
            "tokens": formatted,
        })

    return app


def run_status_server(app: Flask, host: str, port: int) -> threading.Thread:
    def run_web():
        logger.info(f"Server running at http://{host}:{port}")
        app.run(host=host, port=port, threaded=True)

    thread = threading.Thread(target=run_web, daemon=True)
    thread.start()
    return thread
