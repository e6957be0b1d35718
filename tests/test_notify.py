"""
Unit tests for the notify module.

Tests cover message formatting, the Slack Web API client and the
failure-swallowing post helper.
"""

from unittest.mock import Mock

import pytest
import requests

from changelog_bot.errors import MessagingError
from changelog_bot.notify import (
    FALLBACK_SUMMARY,
    SLACK_API_BASE,
    SlackAPIError,
    SlackClient,
    create_slack_session,
    format_message,
    post,
)
from changelog_bot.parse import ChangelogEntry


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def entry():
    return ChangelogEntry(
        date="March 5, 2024",
        title="New Checkout Extensibility Features",
        description="Checkout UI extensions can now render banners.",
        type="New Checkout",
        link="https://changelog.shopify.com/posts/42",
        summary="Banners are here.",
    )


def slack_response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return SlackClient(session, "C0123456", timeout=7)


# =============================================================================
# Formatting Tests
# =============================================================================


class TestFormatMessage:
    """Tests for notification text formatting."""

    def test_exact_template(self, entry):
        assert format_message(entry) == (
            "🔑 Title: *New Checkout Extensibility Features*\n"
            "📅 Date: March 5, 2024\n"
            "❓Overview: Checkout UI extensions can now render banners.\n"
            "🗨️ Description: Banners are here.\n"
            "\n"
            "🌀 Type: New Checkout\n"
            "🔗 Link: https://changelog.shopify.com/posts/42"
        )

    def test_missing_summary_uses_fallback(self, entry):
        entry.summary = None
        assert f"🗨️ Description: {FALLBACK_SUMMARY}\n" in format_message(entry)

    def test_empty_summary_is_kept(self, entry):
        entry.summary = ""
        assert "🗨️ Description: \n" in format_message(entry)

    def test_id_found_in_title_line(self, entry):
        title_line = format_message(entry).splitlines()[0]
        assert entry.id in title_line


# =============================================================================
# Slack Client Tests
# =============================================================================


class TestCreateSlackSession:

    def test_bearer_token(self):
        session = create_slack_session("xoxb-test")
        assert session.headers["Authorization"] == "Bearer xoxb-test"


class TestSlackClient:
    """Tests for the Slack Web API wrapper."""

    def test_get_last_message(self, client, session):
        session.get.return_value = slack_response(
            {"ok": True, "messages": [{"text": "latest"}]}
        )

        assert client.get_last_message() == {"text": "latest"}
        session.get.assert_called_once_with(
            f"{SLACK_API_BASE}/conversations.history",
            timeout=7,
            params={"channel": "C0123456", "limit": 1}
        )

    def test_get_last_message_empty_channel(self, client, session):
        session.get.return_value = slack_response({"ok": True, "messages": []})
        assert client.get_last_message() is None

    def test_post_message(self, client, session):
        session.post.return_value = slack_response({"ok": True, "ts": "1.2"})

        data = client.post_message("hello")

        assert data["ts"] == "1.2"
        session.post.assert_called_once_with(
            f"{SLACK_API_BASE}/chat.postMessage",
            timeout=7,
            json={"channel": "C0123456", "text": "hello"}
        )

    def test_ok_false_raises(self, client, session):
        session.post.return_value = slack_response({"ok": False, "error": "channel_not_found"})

        with pytest.raises(SlackAPIError) as exc_info:
            client.post_message("hello")

        assert exc_info.value.error == "channel_not_found"

    def test_http_error_raises(self, client, session):
        session.get.return_value = slack_response({}, status_code=500)

        with pytest.raises(SlackAPIError) as exc_info:
            client.fetch_history()

        assert exc_info.value.status_code == 500

    def test_invalid_json_raises(self, client, session):
        response = slack_response(None)
        response.json.side_effect = ValueError("no json")
        session.post.return_value = response

        with pytest.raises(SlackAPIError):
            client.post_message("hello")

    def test_network_error_raises(self, client, session):
        session.post.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(SlackAPIError):
            client.post_message("hello")

    def test_timeout_raises(self, client, session):
        session.get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(SlackAPIError, match="timeout"):
            client.get_last_message()

    def test_slack_error_is_messaging_error(self):
        assert issubclass(SlackAPIError, MessagingError)

    def test_check_connection(self, client, session):
        session.post.return_value = slack_response({"ok": True, "user": "bot"})
        assert client.check_connection() is True

        session.post.return_value = slack_response({"ok": False, "error": "invalid_auth"})
        assert client.check_connection() is False


class TestPost:
    """Tests for the failure-swallowing post helper."""

    def test_success(self, client, session):
        session.post.return_value = slack_response({"ok": True})
        assert post(client, "hello") is True

    def test_failure_swallowed(self, client, session):
        session.post.return_value = slack_response({"ok": False, "error": "not_in_channel"})
        assert post(client, "hello") is False
