"""Configuration loader for bitwarden-secrets-provider.

Config lives in the XDG config directory:
~/.config/bitwarden-secrets-provider/config.yml

A different file can be selected with the config_path preference, stored
next to it in preferences.json.
"""
import json
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlparse

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "bitwarden-secrets-provider"
PREFERENCES_FILE = CONFIG_DIR / "preferences.json"

ACCESS_TOKEN_ENV = "BWS_ACCESS_TOKEN"
SERVER_URL_ENV = "BWS_SERVER_URL"


def default_config_path() -> Path:
    return CONFIG_DIR / "config.yml"


def _load_preferences() -> Dict[str, Any]:
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        with open(PREFERENCES_FILE, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read preferences file {PREFERENCES_FILE}: {e}")
        return {}


def get_config_path_preference() -> Optional[str]:
    """Return the stored config_path preference, or None if unset."""
    return _load_preferences().get("config_path")


def set_config_path_preference(path: str) -> None:
    """Store the config_path preference."""
    preferences = _load_preferences()
    preferences["config_path"] = path
    PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2)
    logger.info(f"Preference 'config_path' set to: {path}")


def clear_config_path_preference() -> None:
    """Remove the config_path preference if present."""
    preferences = _load_preferences()
    if "config_path" not in preferences:
        logger.debug("Preference 'config_path' not set, nothing to clear")
        return
    del preferences["config_path"]
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2)
    logger.info("Preference 'config_path' cleared")


def _get_config_path() -> str:
    """
    Resolve the config file path. Evaluated on every call, never cached.

    Priority order:
    1. config_path preference
    2. Default location: ~/.config/bitwarden-secrets-provider/config.yml

    Raises:
        FileNotFoundError: If no config file exists in either location
    """
    config_path_pref = get_config_path_preference()
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   bws-provider config set-path /path/to/your/config.yml\n"
    )


def _resolve_access_token(auth: Dict[str, Any]) -> str:
    env_token = os.getenv(ACCESS_TOKEN_ENV)
    if env_token:
        logger.debug(f"Using access token from {ACCESS_TOKEN_ENV}")
        return env_token

    if auth.get("access_token"):
        return str(auth["access_token"])

    token_env = auth.get("access_token_env")
    if token_env:
        token = os.getenv(token_env)
        if not token:
            raise ConfigurationError(f"Environment variable {token_env} named by 'authentication.access_token_env' is not set")
        return token

    raise ConfigurationError(
        "Missing access token. Set the BWS_ACCESS_TOKEN environment variable or add to your config:\n"
        "authentication:\n"
        "  access_token_env: BWS_ACCESS_TOKEN"
    )


def _validate_server_url(server_url: str) -> None:
    parsed = urlparse(server_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Invalid 'bws.server_url': {server_url} (expected an http(s) URL)")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Explicit file to load (resolved from preferences if omitted)

    Returns:
        Dict with keys:
        - access_token: resolved token (never log it)
        - server_url: server URL or ""
        - binary: bws executable name or path
        - timeout: seconds per bws call, or None

    Raises:
        FileNotFoundError: If no config file can be found
        ConfigurationError: If the file is unreadable or invalid
    """
    if config_path is None:
        config_path = _get_config_path()

    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found at: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigurationError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file at {config_path} must contain a mapping")

    auth = config.get("authentication") or {}
    if not isinstance(auth, dict):
        raise ConfigurationError("'authentication' must be a mapping")

    bws = config.get("bws") or {}
    if not isinstance(bws, dict):
        raise ConfigurationError("'bws' must be a mapping")

    server_url = os.getenv(SERVER_URL_ENV) or bws.get("server_url") or ""
    if server_url:
        _validate_server_url(server_url)

    timeout = bws.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(f"Invalid 'bws.timeout': {timeout!r} (expected a positive number of seconds)")

    resolved = {
        "access_token": _resolve_access_token(auth),
        "server_url": server_url,
        "binary": bws.get("binary") or "bws",
        "timeout": timeout,
    }

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using bws binary: {resolved['binary']}")
    if server_url:
        logger.debug(f"Using server URL: {server_url}")

    return resolved
