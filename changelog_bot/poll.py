"""
Poll module for the Changelog Bot pipeline.

Fetches the changelog index, parses the newest entry, summarizes it and
assembles the Slack notification.
"""

import dataclasses
from typing import Optional

import requests

from changelog_bot.config import DEFAULT_CHANGELOG_URL
from changelog_bot.errors import FetchError, ParseError
from changelog_bot.fetch import DEFAULT_TIMEOUT, fetch_page
from changelog_bot.notify import format_message
from changelog_bot.parse import ChangelogEntry, parse_latest_entry
from changelog_bot.summarize import Summarizer
from changelog_bot.utils import get_base_origin, get_logger


# Module logger
logger = get_logger("poll")


class ChangelogPoller:
    """
    Reads the newest entry from the changelog.

    Args:
        session: requests session used for the index page.
        summarizer: Summarizer for entry detail pages.
        changelog_url: URL of the changelog index page.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        session: requests.Session,
        summarizer: Summarizer,
        changelog_url: str = DEFAULT_CHANGELOG_URL,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.session = session
        self.summarizer = summarizer
        self.changelog_url = changelog_url
        self.base_origin = get_base_origin(changelog_url)
        self.timeout = timeout

    def check_changelog(self) -> ChangelogEntry:
        """
        Scrape, summarize and format the newest entry.

        Returns:
            ChangelogEntry with summary and message filled in.

        Raises:
            FetchError: If the index page could not be fetched.
            ParseError: If the index page has no changelog posts.
        """
        html = fetch_page(self.changelog_url, self.session, self.timeout)
        entry = parse_latest_entry(html, self.base_origin)

        summary = self.summarizer.summarize(entry.link)
        if summary is None:
            logger.warning(f"No summary available for {entry.link}")

        entry = dataclasses.replace(entry, summary=summary)
        return dataclasses.replace(entry, message=format_message(entry))

    def poll_latest(self) -> Optional[ChangelogEntry]:
        """
        Like check_changelog, but returns None instead of raising.
        """
        try:
            return self.check_changelog()
        except FetchError as e:
            logger.error(f"Error fetching changelog: {e}")
        except ParseError as e:
            logger.error(f"Error parsing changelog: {e}")
        return None
