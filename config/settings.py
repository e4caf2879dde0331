import os
import logging
from dotenv import load_dotenv

API_KEY_PLACEHOLDER = "your_api_key_here"


def _optional_float(value):
    if value is None or value.strip() == "":
        return None
    return float(value)


def _symbol_list(value):
    return [
        s.strip().strip('"').strip("'").upper()
        for s in value.split(",")
        if s.strip().strip('"').strip("'")
    ]


def reload_env():
    """Reload environment variables from .env file."""
    load_dotenv(override=True)

    global API_URL, API_KEY, REQUEST_TIMEOUT
    global PRICE_POLL_INTERVAL, DISCARD_STALE_RESPONSES
    global DEFAULT_SYMBOL, DEFAULT_INTERVAL, PRICE_SYMBOLS
    global CHART_LIMIT, TRADES_LIMIT

    API_URL = os.getenv("API_URL", "http://localhost:4000")
    API_KEY = os.getenv("API_KEY")
    REQUEST_TIMEOUT = _optional_float(os.getenv("REQUEST_TIMEOUT"))

    PRICE_POLL_INTERVAL = float(os.getenv("PRICE_POLL_INTERVAL", "30"))
    DISCARD_STALE_RESPONSES = os.getenv("DISCARD_STALE_RESPONSES", "True").lower() == "true"

    DEFAULT_SYMBOL = os.getenv("DEFAULT_SYMBOL", "BTCUSDT").upper()
    DEFAULT_INTERVAL = os.getenv("DEFAULT_INTERVAL", "1h")
    PRICE_SYMBOLS = _symbol_list(os.getenv("PRICE_SYMBOLS", "BTCUSDT,ETHUSDT"))
    CHART_LIMIT = int(os.getenv("CHART_LIMIT", "24"))
    TRADES_LIMIT = int(os.getenv("TRADES_LIMIT", "20"))

    logging.info("Environment variables reloaded successfully")
    logging.info(f"Backend API: {API_URL} (api key: {api_config()['api_key']})")


def has_api_key(api_key=None) -> bool:
    """True when a real (non-placeholder) API key is configured."""
    key = API_KEY if api_key is None else api_key
    return bool(key) and key != API_KEY_PLACEHOLDER


def api_config() -> dict:
    """Describe the backend configuration without leaking the key itself."""
    if not API_KEY:
        key_state = "UNDEFINED"
    elif API_KEY == API_KEY_PLACEHOLDER:
        key_state = "NOT_SET"
    else:
        key_state = "SET"
    return {
        "base_url": API_URL,
        "has_api_key": has_api_key(),
        "api_key": key_state,
    }


load_dotenv(override=True)

# Backend
API_URL = os.getenv("API_URL", "http://localhost:4000")
API_KEY = os.getenv("API_KEY")
REQUEST_TIMEOUT = _optional_float(os.getenv("REQUEST_TIMEOUT"))  # None = wait indefinitely

# Polling
PRICE_POLL_INTERVAL = float(os.getenv("PRICE_POLL_INTERVAL", "30"))
DISCARD_STALE_RESPONSES = os.getenv("DISCARD_STALE_RESPONSES", "True").lower() == "true"

# Dashboard defaults
DEFAULT_SYMBOL = os.getenv("DEFAULT_SYMBOL", "BTCUSDT").upper()
DEFAULT_INTERVAL = os.getenv("DEFAULT_INTERVAL", "1h")
PRICE_SYMBOLS = _symbol_list(os.getenv("PRICE_SYMBOLS", "BTCUSDT,ETHUSDT"))
CHART_LIMIT = int(os.getenv("CHART_LIMIT", "24"))
TRADES_LIMIT = int(os.getenv("TRADES_LIMIT", "20"))
