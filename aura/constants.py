"""
Application constants, configuration loading, and logging setup.
"""
import json
import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from version import __version__

# --- Configuration Constants ---
APP_NAME = "Aura"
APP_VERSION = __version__
APP_SUPPORT_DIR = Path.home() / ".aura"
CONFIG_PATH = Path(os.environ.get("AURA_CONFIG", APP_SUPPORT_DIR / "config.json"))
LOG_DIR = APP_SUPPORT_DIR / ".logs"

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_REQUEST_TIMEOUT = 10  # seconds, applies to auth and message calls

# --- User-visible chat texts ---
ASSISTANT_NAME = "Aura"
GREETING_TEXT = "Hi there! I'm Aura, your AI therapist. How are you feeling today?"
FALLBACK_TEXT = "Sorry, I'm having trouble connecting. Please try again later."
CONNECTION_ERROR_TEXT = (
    "Unable to connect to the server. Please check your internet "
    "connection and try again."
)

# --- Logging Setup ---
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "NONE": None,  # Disables logging entirely
}

logger = logging.getLogger("Aura")

# Track current log file path (set by setup_logging)
current_log_file_path: Optional[Path] = None


def setup_logging(config: Optional[Dict] = None):
    """Configure logging based on the ``logging`` section of the config."""
    global current_log_file_path

    log_cfg = config.get("logging", {}) if config else {}
    log_level_str = log_cfg.get("level", "INFO").upper()
    log_level = LOG_LEVELS.get(log_level_str, logging.INFO)
    log_to_file = log_cfg.get("log_to_file", True)
    log_file_name = log_cfg.get("log_file_name", "aura_client.log")

    logger.handlers.clear()

    if log_level is None:
        logger.setLevel(logging.CRITICAL + 10)
        current_log_file_path = None
        return

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (rotating: 2 MB max, keep 3 backups)
    if log_to_file:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            current_log_file_path = LOG_DIR / log_file_name
            file_handler = logging.handlers.RotatingFileHandler(
                current_log_file_path,
                maxBytes=2 * 1024 * 1024,  # 2 MB
                backupCount=3,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"Failed to create log file: {e}")
            current_log_file_path = None
    else:
        current_log_file_path = None

    logger.setLevel(log_level)
    # Records are handled here; don't duplicate them through the root logger.
    logger.propagate = False


# Initial basic setup (reconfigured once the config is loaded)
logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
logger.setLevel(logging.INFO)


# --- Client configuration ---

@dataclass(frozen=True)
class ClientConfig:
    """Resolved client settings: config file values with env overrides."""
    api_url: str = DEFAULT_API_URL
    auth_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClientConfig":
        api_url = (d.get("api_url") or DEFAULT_API_URL).rstrip("/")
        return cls(
            api_url=api_url,
            auth_url=(d.get("auth_url") or api_url).rstrip("/"),
            request_timeout=float(d.get("request_timeout_seconds",
                                        DEFAULT_REQUEST_TIMEOUT)),
            logging=dict(d.get("logging", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "api_url": self.api_url,
            "auth_url": self.auth_url,
            "request_timeout_seconds": self.request_timeout,
            "logging": dict(self.logging),
        }


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load ``config.json`` and apply ``AURA_API_URL`` / ``AURA_AUTH_URL``.

    A missing file yields the defaults.  An unreadable or invalid file is
    logged and also yields the defaults, so the client can still start.
    """
    config_path = Path(path) if path else CONFIG_PATH
    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                logger.warning(f"Config: {config_path} is not a JSON object, using defaults")
                data = {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Config: failed to read {config_path}: {e}")
            data = {}
    else:
        logger.debug(f"Config: {config_path} not found, using defaults")

    env_api = os.environ.get("AURA_API_URL", "").strip()
    env_auth = os.environ.get("AURA_AUTH_URL", "").strip()
    if env_api:
        data["api_url"] = env_api
    if env_auth:
        data["auth_url"] = env_auth

    return ClientConfig.from_dict(data)
