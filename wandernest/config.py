"""Runtime configuration: .env loading, API key lookup, search tuning and logging."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import keyring
from keyring.errors import KeyringError
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from wandernest.errors import ConfigError

logger = logging.getLogger(__name__)

# Keyring service name for storing API keys
KEYRING_SERVICE = "wandernest"

# Mapping of providers to keyring key names
KEYRING_KEYS = {
    "Claude": "anthropic_api_key",
    "Unsplash": "unsplash_access_key",
}

# Mapping of providers to environment variable names
ENV_VAR_KEYS = {
    "Claude": "ANTHROPIC_API_KEY",
    "Unsplash": "UNSPLASH_ACCESS_KEY",
}

ENV_PREFIX = "WANDERNEST_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class SearchSettings(BaseModel):
    """Tunable constants for the fuzzy index, suggestions and listing pages."""

    threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    distance: int = Field(default=100, ge=0)
    min_match_char_length: int = Field(default=2, ge=1)
    suggestion_limit: int = Field(default=8, ge=1)
    page_size: int = Field(default=12, ge=1)
    debounce_seconds: float = Field(default=0.15, ge=0.0)


class Settings(BaseModel):
    search: SearchSettings = Field(default_factory=SearchSettings)
    catalog_path: Path | None = None  # None uses the bundled catalog
    data_dir: Path = Path("plans")
    unsplash_access_key: str = ""
    anthropic_api_key: str = ""
    local_mode: bool = False
    debug: bool = False
    log_level: str = "INFO"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes"}


def get_api_key(provider: str, local_mode: bool = False) -> str:
    """Get an API key for ``provider``.

    Local mode: Load from keyring, fall back to environment variables.
    Remote mode: Environment variables only.
    """
    env_var = ENV_VAR_KEYS.get(provider, "")

    if local_mode:
        key_name = KEYRING_KEYS.get(provider, "")
        try:
            key = keyring.get_password(KEYRING_SERVICE, key_name)
            if key:
                return key
        except KeyringError as e:
            logger.warning("Keyring lookup for %s failed: %s", provider, e)

    return os.getenv(env_var, "") if env_var else ""


def save_api_key(provider: str, api_key: str) -> bool:
    """Save an API key to the keyring (local mode only)."""
    key_name = KEYRING_KEYS.get(provider, "")
    if not api_key or not key_name:
        return False

    try:
        keyring.set_password(KEYRING_SERVICE, key_name, api_key)
        return True
    except KeyringError as e:
        logger.warning("Could not save %s key to keyring: %s", provider, e)
        return False


def load_search_settings() -> SearchSettings:
    """
    Read ``WANDERNEST_*`` overrides for the search constants.

    Raises:
        ConfigError: If an override is not a valid value for its setting
    """
    overrides = {}
    for name in SearchSettings.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value != "":
            overrides[name] = value
    try:
        return SearchSettings.model_validate(overrides)
    except ValidationError as e:
        names = ", ".join(f"{ENV_PREFIX}{str(err['loc'][0]).upper()}" for err in e.errors())
        raise ConfigError(f"Invalid search settings in {names}: {e}") from e


def load_settings(local_mode: bool = False, debug: bool | None = None) -> Settings:
    """
    Load .env into the environment and build the application settings.

    Args:
        local_mode: Read API keys from the keyring before the environment
        debug: Force debug mode on or off; defaults to the DEBUG variable

    Returns:
        Settings for this process
    """
    load_dotenv()

    if debug is None:
        debug = _env_flag("DEBUG")

    catalog_path = os.getenv(f"{ENV_PREFIX}CATALOG_PATH") or None
    return Settings(
        search=load_search_settings(),
        catalog_path=catalog_path,
        data_dir=os.getenv(f"{ENV_PREFIX}DATA_DIR", "plans"),
        unsplash_access_key=get_api_key("Unsplash", local_mode),
        anthropic_api_key=get_api_key("Claude", local_mode),
        local_mode=local_mode,
        debug=debug,
        log_level="DEBUG" if debug else os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
