import json
import os
from typing import Optional

import keyring
from dotenv import load_dotenv
from keyring.errors import KeyringError

from notion_sync.constants import MAX_APPEND_BLOCKS, NOTION_API_BASE_URL, NOTION_API_VERSION
from notion_sync.exceptions import NotionSyncError
from notion_sync.logger import logger

CONFIG_FILE = os.getenv("NOTION_SYNC_CONFIG", "notion_sync.json")
KEYRING_SERVICE = "notion-sync"
KEYRING_API_KEY = "api_key"


class ConfigError(NotionSyncError):
    """Raised when a required configuration value is missing."""


# ============================================================
# Global Configuration Variables
# ============================================================
NOTION_API_KEY: str = ""
NOTION_VERSION: str = NOTION_API_VERSION
NOTION_BASE_URL: str = NOTION_API_BASE_URL

# ============================================================
# Application Constants
# ============================================================
# Blocks per append-children request (API maximum is 100)
BATCH_CHUNK_SIZE: int = MAX_APPEND_BLOCKS

# Concurrent requests allowed through the bulkhead
MAX_PARALLEL_REQUESTS: int = 10

# Retry settings for 409 / 429 / 503 responses
API_MAX_RETRIES: int = 10
API_RETRY_BASE_DELAY: float = 0.25

# Circuit breaker: consecutive server errors before opening, seconds open
CIRCUIT_BREAKER_THRESHOLD: int = 3
CIRCUIT_BREAKER_RESET_SECONDS: float = 3.0

# Request timeout in seconds
API_TIMEOUT: float = 30.0

# Whether to use keyring for secure token storage
USE_KEYRING: bool = os.getenv("NOTION_SYNC_USE_KEYRING", "1") != "0"


# ============================================================
# Secure Token Storage (keyring)
# ============================================================
def _load_from_keyring(key: str) -> Optional[str]:
    """Load a secret from the OS keyring."""
    if not USE_KEYRING:
        return None
    try:
        return keyring.get_password(KEYRING_SERVICE, key)
    except KeyringError as e:
        logger.debug(f"Keyring unavailable: {e}")
        return None


def _save_to_keyring(key: str, value: str) -> bool:
    """Save a secret to the OS keyring."""
    if not USE_KEYRING or not value:
        return False
    try:
        keyring.set_password(KEYRING_SERVICE, key, value)
        return True
    except KeyringError as e:
        logger.debug(f"Keyring unavailable: {e}")
        return False


def _read_config_file(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Config file {path} is not valid JSON: {e}")
        return {}
    except OSError as e:
        logger.warning(f"Failed to read config file {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


# ============================================================
# Configuration Loading
# ============================================================
def load_config(config_path: Optional[str] = None) -> None:
    """Load configuration from the environment, keyring and JSON file.

    Environment variables (including a local .env file) win over the keyring,
    which wins over the JSON file.
    """
    global NOTION_API_KEY, NOTION_VERSION, NOTION_BASE_URL

    load_dotenv()
    data = _read_config_file(config_path or CONFIG_FILE)

    NOTION_API_KEY = (
        os.getenv("NOTION_API_KEY")
        or _load_from_keyring(KEYRING_API_KEY)
        or data.get("notion_api_key", "")
    )
    NOTION_VERSION = os.getenv("NOTION_VERSION") or data.get("notion_version") or NOTION_API_VERSION
    NOTION_BASE_URL = os.getenv("NOTION_BASE_URL") or data.get("notion_base_url") or NOTION_API_BASE_URL


def require_api_key() -> str:
    """Return the configured API key or raise ConfigError."""
    if not NOTION_API_KEY:
        raise ConfigError(
            "NOTION_API_KEY not found. Set it in the environment, a .env file, "
            f"the keyring or {CONFIG_FILE}."
        )
    return NOTION_API_KEY


def save_api_key(api_key: str, config_path: Optional[str] = None) -> None:
    """Save the API key to keyring (preferred) or the JSON file (fallback)."""
    global NOTION_API_KEY
    NOTION_API_KEY = api_key

    path = config_path or CONFIG_FILE
    data = _read_config_file(path)

    if _save_to_keyring(KEYRING_API_KEY, api_key):
        # Don't store the key in JSON if keyring is working
        if "notion_api_key" not in data:
            return
        data.pop("notion_api_key")
    else:
        data["notion_api_key"] = api_key

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


# Load configuration on module import
load_config()
