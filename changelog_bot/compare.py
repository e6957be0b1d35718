"""
Compare module for the Changelog Bot pipeline.

Decides whether an entry was already announced. There is no local state:
the most recent message in the Slack channel acts as the record of what
was last sent.
"""

from typing import Optional

from changelog_bot.notify import SlackAPIError, SlackClient
from changelog_bot.utils import get_logger


# Module logger
logger = get_logger("compare")


def get_last_message_text(slack: SlackClient) -> Optional[str]:
    """
    Fetch the text of the most recent channel message.

    Args:
        slack: Slack client bound to the target channel.

    Returns:
        The message text, or None if the channel is empty or the read failed.
    """
    try:
        message = slack.get_last_message()
    except SlackAPIError as e:
        logger.error(f"Error fetching last message from Slack: {e}")
        return None

    if message is None:
        logger.debug("Channel has no messages")
        return None

    return message.get("text") or None


def contains_entry_id(text: Optional[str], entry_id: str) -> bool:
    """Return True if text contains entry_id as a substring."""
    if not text:
        return False
    return entry_id in text


def already_posted(entry_id: str, slack: SlackClient) -> bool:
    """
    Check whether the latest channel message already announces entry_id.

    Only the single most recent message is inspected. An empty channel or
    a failed read counts as "not posted" so that a send is attempted.

    Args:
        entry_id: Dedup identifier of the entry.
        slack: Slack client bound to the target channel.

    Returns:
        True if the last message contains entry_id, False otherwise.
    """
    if not entry_id:
        logger.warning("Empty entry ID matches any message; the entry title is probably missing")

    last_text = get_last_message_text(slack)
    posted = contains_entry_id(last_text, entry_id)

    if posted:
        logger.info(f"Message with ID {entry_id} already exists in Slack channel")
    else:
        logger.debug(f"No previous message with ID {entry_id}")

    return posted
