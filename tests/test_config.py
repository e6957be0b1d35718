"""
Tests for configuration loading.
"""

import os
from unittest.mock import patch

import pytest

from changelog_bot.config import (
    DEFAULT_CHANGELOG_URL,
    find_missing_vars,
    load_settings,
)
from changelog_bot.errors import ConfigError


@pytest.fixture
def required_env():
    return {
        "SLACK_TOKEN": "xoxb-test",
        "CHANNEL_ID": "C0123456",
        "OPENAI_API_KEY": "sk-test",
    }


class TestLoadSettings:
    """Tests for load_settings."""

    def test_required_only(self, required_env):
        with patch.dict(os.environ, required_env, clear=True):
            settings = load_settings(use_dotenv=False)

        assert settings.slack_token == "xoxb-test"
        assert settings.channel_id == "C0123456"
        assert settings.openai_api_key == "sk-test"
        assert settings.openai_model == "gpt-3.5-turbo"
        assert settings.changelog_url == DEFAULT_CHANGELOG_URL
        assert settings.request_timeout == 30.0
        assert settings.schedule_interval_seconds == 0
        assert settings.failure_alert_threshold == 3
        assert settings.dry_run is False

    def test_optional_values(self, required_env):
        env = dict(required_env)
        env.update({
            "OPENAI_MODEL": "gpt-4o-mini",
            "CHANGELOG_URL": "https://example.com/changelog",
            "REQUEST_TIMEOUT": "10",
            "SCHEDULE_INTERVAL_HOURS": "12",
            "FAILURE_ALERT_THRESHOLD": "0",
            "LOG_LEVEL": "debug",
            "DRY_RUN": "yes",
        })
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings(use_dotenv=False)

        assert settings.openai_model == "gpt-4o-mini"
        assert settings.changelog_url == "https://example.com/changelog"
        assert settings.request_timeout == 10.0
        assert settings.schedule_interval_seconds == 12 * 3600
        assert settings.failure_alert_threshold == 0
        assert settings.log_level == "DEBUG"
        assert settings.dry_run is True

    def test_missing_required_fails_fast(self):
        with patch.dict(os.environ, {"SLACK_TOKEN": "xoxb-test"}, clear=True):
            with pytest.raises(ConfigError) as exc_info:
                load_settings(use_dotenv=False)

        assert "CHANNEL_ID" in str(exc_info.value)
        assert "OPENAI_API_KEY" in str(exc_info.value)

    def test_blank_value_counts_as_missing(self, required_env):
        required_env["CHANNEL_ID"] = "   "
        with patch.dict(os.environ, required_env, clear=True):
            assert find_missing_vars() == ["CHANNEL_ID"]

    @pytest.mark.parametrize("name,value", [
        ("REQUEST_TIMEOUT", "soon"),
        ("SCHEDULE_INTERVAL_HOURS", "-1"),
        ("FAILURE_ALERT_THRESHOLD", "2.5"),
    ])
    def test_malformed_numbers(self, required_env, name, value):
        required_env[name] = value
        with patch.dict(os.environ, required_env, clear=True):
            with pytest.raises(ConfigError, match=name):
                load_settings(use_dotenv=False)

    @patch("changelog_bot.config.load_dotenv")
    def test_dotenv_loaded(self, mock_load_dotenv, required_env):
        with patch.dict(os.environ, required_env, clear=True):
            load_settings()

        mock_load_dotenv.assert_called_once_with(override=False)
