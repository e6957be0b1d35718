"""
Notify module for the Changelog Bot pipeline.

This module handles talking to the Slack channel:
- formatting the changelog notification text
- reading the most recent channel message (used by the dedup check)
- posting messages

Uses the Slack Web API over requests. Slack answers most errors with
HTTP 200 and ``"ok": false``, so both the status and the body are checked.
"""

from typing import Any, Dict, List, Optional

import requests

from changelog_bot.errors import MessagingError
from changelog_bot.parse import ChangelogEntry
from changelog_bot.utils import get_logger


# Module logger
logger = get_logger("notify")

# Slack API configuration
SLACK_API_BASE = "https://slack.com/api"
DEFAULT_TIMEOUT = 30  # seconds

FALLBACK_SUMMARY = "No OpenAi overview"

MESSAGE_TEMPLATE = (
    "🔑 Title: *{title}*\n"
    "📅 Date: {date}\n"
    "❓Overview: {description}\n"
    "🗨️ Description: {summary}\n"
    "\n"
    "🌀 Type: {type}\n"
    "🔗 Link: {link}"
)


class SlackAPIError(MessagingError):
    """Custom exception for Slack Web API errors."""

    def __init__(self, message: str, error: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.error = error
        self.status_code = status_code


def format_message(entry: ChangelogEntry) -> str:
    """
    Format the Slack notification for a changelog entry.

    Args:
        entry: The scraped entry. A missing summary is replaced by
               FALLBACK_SUMMARY.

    Returns:
        Slack mrkdwn message text.
    """
    summary = entry.summary if entry.summary is not None else FALLBACK_SUMMARY
    return MESSAGE_TEMPLATE.format(
        title=entry.title,
        date=entry.date,
        description=entry.description,
        summary=summary,
        type=entry.type,
        link=entry.link,
    )


def create_slack_session(token: str) -> requests.Session:
    """
    Create a requests session configured for the Slack Web API.

    Args:
        token: Slack bot token.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()
    session.headers.update({
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json; charset=utf-8",
        "User-Agent": "ChangelogBot/1.0"
    })
    return session


class SlackClient:
    """
    Minimal Slack Web API client bound to one channel.

    Args:
        session: Session created by create_slack_session.
        channel_id: Target channel ID.
        timeout: Request timeout in seconds.
    """

    def __init__(self, session: requests.Session, channel_id: str, timeout: float = DEFAULT_TIMEOUT):
        self.session = session
        self.channel_id = channel_id
        self.timeout = timeout

    def _check_response(self, method: str, response: requests.Response) -> Dict[str, Any]:
        if response.status_code != 200:
            raise SlackAPIError(
                f"Slack API {method} failed: HTTP {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise SlackAPIError(f"Slack API {method} returned invalid JSON", status_code=200)

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            raise SlackAPIError(f"Slack API {method} error: {error}", error=error, status_code=200)

        return data

    def _call(self, method: str, http_method: str = "POST", **kwargs: Any) -> Dict[str, Any]:
        url = f"{SLACK_API_BASE}/{method}"
        try:
            if http_method == "GET":
                response = self.session.get(url, timeout=self.timeout, **kwargs)
            else:
                response = self.session.post(url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            raise SlackAPIError(f"Slack API {method} request timeout")
        except requests.exceptions.RequestException as e:
            raise SlackAPIError(f"Slack API {method} request failed: {e}")

        return self._check_response(method, response)

    def fetch_history(self, limit: int = 1) -> List[Dict[str, Any]]:
        """
        Read the newest messages of the channel, newest first.

        Raises:
            SlackAPIError: If the request fails.
        """
        data = self._call(
            "conversations.history",
            http_method="GET",
            params={"channel": self.channel_id, "limit": limit}
        )
        return data.get("messages") or []

    def get_last_message(self) -> Optional[Dict[str, Any]]:
        """
        Return the most recent channel message, or None if the channel is empty.

        Raises:
            SlackAPIError: If the request fails.
        """
        messages = self.fetch_history(limit=1)
        if not messages:
            return None
        return messages[0]

    def post_message(self, text: str) -> Dict[str, Any]:
        """
        Post text to the channel.

        Returns:
            Slack API response data.

        Raises:
            SlackAPIError: If the message could not be posted.
        """
        data = self._call(
            "chat.postMessage",
            json={"channel": self.channel_id, "text": text}
        )
        logger.debug(f"Posted message ts={data.get('ts')}")
        return data

    def check_connection(self) -> bool:
        """
        Verify the Slack token with auth.test.

        Returns:
            True if the token is valid, False otherwise.
        """
        try:
            data = self._call("auth.test")
        except SlackAPIError as e:
            logger.warning(f"Slack connection check failed: {e}")
            return False

        logger.debug(f"Slack connection OK, authenticated as {data.get('user')}")
        return True

    def close(self) -> None:
        self.session.close()


def post(slack: SlackClient, message: str) -> bool:
    """
    Send message verbatim to the configured channel.

    Failures are logged and swallowed.

    Returns:
        True if Slack accepted the message, False otherwise.
    """
    try:
        slack.post_message(message)
    except SlackAPIError as e:
        logger.error(f"Error sending message to Slack: {e}")
        return False

    logger.info(f"Message sent to channel {slack.channel_id}")
    return True
