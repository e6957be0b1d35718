"""
Configuration for the Changelog Bot.

Settings come from environment variables, optionally seeded from a local
``.env`` file. The three credentials are required; everything else has a
default. Missing credentials fail fast at startup.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from changelog_bot.errors import ConfigError
from changelog_bot.utils import get_env_var, get_logger


logger = get_logger("config")

REQUIRED_VARS = ["SLACK_TOKEN", "CHANNEL_ID", "OPENAI_API_KEY"]

DEFAULT_CHANGELOG_URL = "https://changelog.shopify.com/"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds
DEFAULT_FAILURE_ALERT_THRESHOLD = 3


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""
    slack_token: str
    channel_id: str
    openai_api_key: str
    openai_model: str = DEFAULT_OPENAI_MODEL
    changelog_url: str = DEFAULT_CHANGELOG_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    schedule_interval_hours: float = 0.0
    failure_alert_threshold: int = DEFAULT_FAILURE_ALERT_THRESHOLD
    log_level: str = "INFO"
    dry_run: bool = False

    @property
    def schedule_interval_seconds(self) -> float:
        return self.schedule_interval_hours * 3600


def find_missing_vars(names: Optional[List[str]] = None) -> List[str]:
    """
    List the required environment variables that are unset or blank.

    Args:
        names: Variable names to check. Defaults to REQUIRED_VARS.

    Returns:
        Missing variable names, in the order given.
    """
    missing = []
    for name in names or REQUIRED_VARS:
        value = os.environ.get(name)
        if not value or value.strip() == "":
            missing.append(name)
    return missing


def _parse_float(name: str, default: float) -> float:
    raw = get_env_var(name, required=False)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got: {raw}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got: {raw}")
    return value


def _parse_int(name: str, default: int) -> int:
    raw = get_env_var(name, required=False)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a valid integer, got: {raw}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got: {raw}")
    return value


def _parse_bool(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("true", "1", "yes")


def load_settings(use_dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    Args:
        use_dotenv: If True, load a ``.env`` file from the working directory
                    first. Variables already in the environment win.

    Returns:
        Settings instance.

    Raises:
        ConfigError: If a required variable is missing or a value is malformed.
    """
    if use_dotenv:
        load_dotenv(override=False)

    missing = find_missing_vars()
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    settings = Settings(
        slack_token=get_env_var("SLACK_TOKEN"),
        channel_id=get_env_var("CHANNEL_ID"),
        openai_api_key=get_env_var("OPENAI_API_KEY"),
        openai_model=get_env_var("OPENAI_MODEL", required=False, default=DEFAULT_OPENAI_MODEL),
        changelog_url=get_env_var("CHANGELOG_URL", required=False, default=DEFAULT_CHANGELOG_URL),
        request_timeout=_parse_float("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        schedule_interval_hours=_parse_float("SCHEDULE_INTERVAL_HOURS", 0.0),
        failure_alert_threshold=_parse_int("FAILURE_ALERT_THRESHOLD", DEFAULT_FAILURE_ALERT_THRESHOLD),
        log_level=get_env_var("LOG_LEVEL", required=False, default="INFO").upper(),
        dry_run=_parse_bool("DRY_RUN"),
    )

    logger.debug(f"Loaded settings for channel {settings.channel_id}")
    return settings
