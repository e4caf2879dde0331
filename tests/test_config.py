import logging

import pytest

from config import settings
from config.logging_config import (
    get_endpoint_logger, get_polling_logger, log_endpoint_request, setup_dashboard_logging
)

SETTING_NAMES = [
    "API_URL", "API_KEY", "REQUEST_TIMEOUT", "PRICE_POLL_INTERVAL", "DISCARD_STALE_RESPONSES",
    "DEFAULT_SYMBOL", "DEFAULT_INTERVAL", "PRICE_SYMBOLS", "CHART_LIMIT", "TRADES_LIMIT",
]


@pytest.fixture
def restore_settings():
    saved = {name: getattr(settings, name) for name in SETTING_NAMES}
    yield
    for name, value in saved.items():
        setattr(settings, name, value)


class TestApiConfig:

    @pytest.mark.parametrize("key, state, has_key", [
        (None, "UNDEFINED", False),
        ("", "UNDEFINED", False),
        ("your_api_key_here", "NOT_SET", False),
        ("real-key", "SET", True),
    ])
    def test_key_states(self, monkeypatch, key, state, has_key):
        monkeypatch.setattr(settings, "API_KEY", key)

        config = settings.api_config()

        assert config["api_key"] == state
        assert config["has_api_key"] is has_key
        assert config["base_url"] == settings.API_URL


def test_reload_env_reads_environment(monkeypatch, restore_settings):
    monkeypatch.setenv("API_URL", "http://dashboard-backend:4000")
    monkeypatch.setenv("PRICE_POLL_INTERVAL", "5")
    monkeypatch.setenv("PRICE_SYMBOLS", " btcusdt , 'solusdt' ,")
    monkeypatch.setenv("REQUEST_TIMEOUT", "")
    monkeypatch.setenv("DISCARD_STALE_RESPONSES", "false")

    settings.reload_env()

    assert settings.API_URL == "http://dashboard-backend:4000"
    assert settings.PRICE_POLL_INTERVAL == 5.0
    assert settings.PRICE_SYMBOLS == ["BTCUSDT", "SOLUSDT"]
    assert settings.REQUEST_TIMEOUT is None
    assert settings.DISCARD_STALE_RESPONSES is False


def test_logging_streams_are_split(tmp_path):
    config = setup_dashboard_logging(str(tmp_path))
    try:
        log_endpoint_request("GET", "/health", 200, 0.0123)
        get_polling_logger().info("[prices] Poll #1")
        get_endpoint_logger().error("backend exploded")
        logging.getLogger("main").info("general message")
        for handler in config.handlers.values():
            handler.flush()

        endpoints = config.log_files['endpoints'].read_text(encoding='utf-8')
        polling = config.log_files['polling'].read_text(encoding='utf-8')
        errors = config.log_files['errors'].read_text(encoding='utf-8')
        general = config.log_files['general'].read_text(encoding='utf-8')
    finally:
        config.close()

    assert "[GET] /health - 200 - 0.012s" in endpoints
    assert "[prices] Poll #1" in polling
    assert "[prices] Poll #1" not in endpoints
    assert "backend exploded" in errors
    assert "general message" in general
