"""
Tests for configuration loading and logging setup in aura.constants.
"""
import json
import logging
import logging.handlers

import pytest

import aura.constants as constants
from aura.constants import (
    DEFAULT_API_URL, DEFAULT_REQUEST_TIMEOUT, ClientConfig, load_config,
    setup_logging,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("AURA_API_URL", raising=False)
    monkeypatch.delenv("AURA_AUTH_URL", raising=False)


@pytest.fixture
def restore_logger():
    logger = constants.logger
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
    constants.current_log_file_path = None


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.json")
        assert config == ClientConfig()
        assert config.api_url == DEFAULT_API_URL
        assert config.auth_url == DEFAULT_API_URL
        assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "api_url": "https://chat.example.com/",
            "auth_url": "https://auth.example.com",
            "request_timeout_seconds": 5,
            "logging": {"level": "DEBUG"},
        }))
        config = load_config(path)
        assert config.api_url == "https://chat.example.com"
        assert config.auth_url == "https://auth.example.com"
        assert config.request_timeout == 5.0
        assert config.logging == {"level": "DEBUG"}

    def test_auth_url_defaults_to_api_url(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api_url": "https://chat.example.com"}))
        assert load_config(path).auth_url == "https://chat.example.com"

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"api_url": "https://file.example.com"}))
        monkeypatch.setenv("AURA_API_URL", "https://env.example.com")
        monkeypatch.setenv("AURA_AUTH_URL", "https://auth-env.example.com")
        config = load_config(path)
        assert config.api_url == "https://env.example.com"
        assert config.auth_url == "https://auth-env.example.com"

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_invalid_file_gives_defaults(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        assert load_config(path) == ClientConfig()

    def test_to_dict_round_trips_through_from_dict(self):
        config = ClientConfig(api_url="https://a", auth_url="https://b",
                              request_timeout=3, logging={"level": "ERROR"})
        assert ClientConfig.from_dict(config.to_dict()) == config


class TestSetupLogging:
    def test_none_level_disables_logging(self, restore_logger):
        setup_logging({"logging": {"level": "NONE"}})
        assert restore_logger.handlers == []
        assert not restore_logger.isEnabledFor(logging.CRITICAL)
        assert constants.current_log_file_path is None

    def test_console_only(self, restore_logger):
        setup_logging({"logging": {"level": "warning", "log_to_file": False}})
        assert restore_logger.level == logging.WARNING
        assert len(restore_logger.handlers) == 1
        assert constants.current_log_file_path is None
        assert restore_logger.propagate is False

    def test_rotating_file_handler(self, restore_logger, tmp_path, monkeypatch):
        monkeypatch.setattr(constants, "LOG_DIR", tmp_path / "logs")
        setup_logging({"logging": {"level": "DEBUG", "log_file_name": "test.log"}})

        file_handlers = [h for h in restore_logger.handlers
                         if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert constants.current_log_file_path == tmp_path / "logs" / "test.log"

        restore_logger.debug("hello log file")
        file_handlers[0].flush()
        assert "hello log file" in (tmp_path / "logs" / "test.log").read_text()

    def test_unknown_level_defaults_to_info(self, restore_logger):
        setup_logging({"logging": {"level": "LOUD", "log_to_file": False}})
        assert restore_logger.level == logging.INFO
