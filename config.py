"""
Configuration for the wallet milestone tracker
"""

import os
import json
import logging
from typing import Dict, Any

from errors import ConfigurationError

logger = logging.getLogger("config")

NOTIFIER_BACKENDS = ("discord", "telegram", "log")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Default configuration
DEFAULT_CONFIG = {
    # RPC + Wallet
    "WALLET_ADDRESS": "GB4hy7secjChACoTA9Qv2NJgdnnDFfCCKdSbiLWznmSV",
    "RPC_HTTP_ENDPOINT": "https://api.mainnet-beta.solana.com",
    "COMMITMENT": "confirmed",
    "TOKEN_PROGRAM_ID": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",

    # Market data
    "DEXSCREENER_BASE_URL": "https://api.dexscreener.com",

    # Scan & Timing
    "UPDATE_INTERVAL_SECONDS": 45,
    "HTTP_TIMEOUT_SECONDS": 15.0,

    # Milestones
    "MIN_TOKEN_AMOUNT": 0.000001,
    "MC_THRESHOLD_FIRST": 5000,
    "MC_THRESHOLD_SECOND": 10000,

    # Notifier
    "NOTIFIER_BACKEND": "log",
    "DISCORD_WEBHOOK_URL": "",
    "TELEGRAM_BOT_TOKEN": "",
    "TELEGRAM_CHAT_ID": "",

    # Status server
    "STATUS_HOST": "0.0.0.0",
    "STATUS_PORT": 5000,

    # System
    "LOG_LEVEL": "INFO",
}


def load_config(config_file: str = "config.json") -> Dict[str, Any]:
    """
    Load the configuration from config.json, or from the environment when
    USE_ENV_CONFIG=true. A missing config file is created with the defaults.

    Returns:
        Configuration dictionary
    """
    if os.environ.get("USE_ENV_CONFIG", "").lower() == "true":
        logger.info("Loading configuration from environment variables")
        config = load_config_from_env()
    else:
        if not os.path.exists(config_file):
            with open(config_file, "w") as f:
                json.dump(DEFAULT_CONFIG, f, indent=2)
            logger.info(f"Configuration file created: {config_file}")
            return dict(DEFAULT_CONFIG)

        try:
            with open(config_file, "r") as f:
                config = json.load(f)
            logger.info(f"Configuration loaded from: {config_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            logger.info("Using default configuration")
            return dict(DEFAULT_CONFIG)

    # Fill in missing keys
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return config


def load_config_from_env() -> Dict[str, Any]:
    """
    Load the configuration from environment variables

    Returns:
        Configuration dictionary
    """
    config = {}

    for key, default_value in DEFAULT_CONFIG.items():
        env_value = os.environ.get(key)

        if env_value is not None:
            try:
                if isinstance(default_value, bool):
                    config[key] = env_value.lower() == "true"
                elif isinstance(default_value, int):
                    config[key] = int(env_value)
                elif isinstance(default_value, float):
                    config[key] = float(env_value)
                else:
                    config[key] = env_value
            except ValueError as parse_err:
                logger.warning(f"Could not parse env variable {key}: {parse_err}. Using default value.")
                config[key] = default_value
        else:
            config[key] = default_value

    return config


def validate_config(config: Dict[str, Any]) -> None:
    """Raise ConfigurationError when the configuration cannot run the tracker."""
    if not config.get("WALLET_ADDRESS"):
        raise ConfigurationError("WALLET_ADDRESS is required")

    backend = str(config.get("NOTIFIER_BACKEND", "")).lower()
    if backend not in NOTIFIER_BACKENDS:
        raise ConfigurationError(
            f"NOTIFIER_BACKEND must be one of {', '.join(NOTIFIER_BACKENDS)}, got {backend!r}"
        )
    if backend == "discord" and not config.get("DISCORD_WEBHOOK_URL"):
        raise ConfigurationError("DISCORD_WEBHOOK_URL is required for the discord backend")
    if backend == "telegram" and not (config.get("TELEGRAM_BOT_TOKEN") and config.get("TELEGRAM_CHAT_ID")):
        raise ConfigurationError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID are required for the telegram backend")

    if config["MC_THRESHOLD_FIRST"] >= config["MC_THRESHOLD_SECOND"]:
        raise ConfigurationError("MC_THRESHOLD_FIRST must be lower than MC_THRESHOLD_SECOND")
    if config["UPDATE_INTERVAL_SECONDS"] <= 0:
        raise ConfigurationError("UPDATE_INTERVAL_SECONDS must be positive")
    if config["HTTP_TIMEOUT_SECONDS"] <= 0:
        raise ConfigurationError("HTTP_TIMEOUT_SECONDS must be positive")
    if config["MIN_TOKEN_AMOUNT"] < 0:
        raise ConfigurationError("MIN_TOKEN_AMOUNT must not be negative")

    if str(config.get("LOG_LEVEL", "")).upper() not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
