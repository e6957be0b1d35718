"""
Parse module for the Changelog Bot pipeline.

This module handles parsing HTML from the changelog site:
- the index page, to extract the newest changelog entry
- an entry detail page, to extract the text handed to the summarizer
- the summarizer output, to strip bracketed link placeholders
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from changelog_bot.errors import ParseError
from changelog_bot.utils import get_logger, make_absolute_link


# Module logger
logger = get_logger("parse")

# Selectors for the changelog index page
POST_SELECTOR = ".changelog-post"
DATE_SELECTOR = ".post-block__date span"
TITLE_SELECTOR = ".post-block__link"
DESCRIPTION_SELECTOR = ".post__content"
TYPE_TAG_SELECTOR = ".status-tag.feature"
TYPE_MINOR_SELECTOR = ".status-tag.feature + .text-minor"

# Selector for the entry detail page body
CONTENT_SELECTOR = ".post__content"

ID_LENGTH = 10

DATE_FORMATS = [
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y-%m-%d",
    "%d %B %Y",
    "%d %b %Y",
]

BRACKETED_SPAN = re.compile(r"\[.*?\]")


@dataclass
class ChangelogEntry:
    """
    One changelog entry as scraped from the index page.

    Attributes:
        date: Date text as shown on the page.
        title: Entry title.
        description: Raw text of the entry's content block.
        type: Status tag and the minor text next to it, space-joined.
        link: Absolute URL of the entry detail page.
        summary: Language model summary, None when unavailable.
        message: Formatted notification text, filled in by the poller.
    """
    date: str
    title: str
    description: str
    type: str
    link: str
    summary: Optional[str] = None
    message: str = ""

    @property
    def id(self) -> str:
        return make_entry_id(self.title)


def make_entry_id(title: str, length: int = ID_LENGTH) -> str:
    """
    Derive the dedup identifier for an entry.

    The identifier is the first ``length`` characters of the title. Two
    titles sharing that prefix produce the same identifier.
    """
    return title[:length]


def clean_response(text: str) -> str:
    """
    Remove bracketed placeholders such as "[Learn more about text lists]".

    Nested brackets are not supported; the match is non-greedy.
    """
    return BRACKETED_SPAN.sub("", text)


def extract_relevant_text(html: str) -> str:
    """
    Extract the paragraph text of an entry detail page.

    Finds the first content container and joins the trimmed text of every
    paragraph inside it with a blank line.

    Args:
        html: Raw HTML of the detail page.

    Returns:
        The joined paragraph text, or an empty string when the page has no
        content container or no paragraphs.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one(CONTENT_SELECTOR)
    if container is None:
        logger.debug("No content container found on detail page")
        return ""

    paragraphs = [p.get_text().strip() for p in container.find_all("p")]
    return "\n\n".join(paragraphs).strip()


def _select_text(element: Tag, selector: str) -> str:
    """Return the stripped text of all matches for selector, or ""."""
    return "".join(match.get_text() for match in element.select(selector)).strip()


def parse_post_date(text: str) -> Optional[datetime]:
    """
    Parse a changelog date string, trying each known format.

    Returns:
        datetime if one of DATE_FORMATS matches, None otherwise.
    """
    text = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def select_latest_post(posts: List[Tag]) -> Tag:
    """
    Pick the newest post from the changelog listing.

    If every post has a parseable date, the post with the greatest date is
    returned (earliest in document order on ties). Otherwise the page is
    trusted to list the newest post first.

    Args:
        posts: Non-empty list of post elements in document order.

    Returns:
        The selected post element.
    """
    dates = [parse_post_date(_select_text(post, DATE_SELECTOR)) for post in posts]

    if all(d is not None for d in dates):
        newest = max(range(len(posts)), key=lambda i: (dates[i], -i))
        return posts[newest]

    logger.debug("Post dates not parseable, using document order")
    return posts[0]


def parse_entry(post: Tag, base_origin: str) -> ChangelogEntry:
    """
    Extract the fields of a single changelog post element.

    Missing sub-elements yield empty strings.

    Args:
        post: The post element.
        base_origin: Site origin used to absolutize relative links.

    Returns:
        ChangelogEntry without summary or message.
    """
    date = _select_text(post, DATE_SELECTOR)
    title = _select_text(post, TITLE_SELECTOR)
    description = _select_text(post, DESCRIPTION_SELECTOR)
    entry_type = _select_text(post, TYPE_TAG_SELECTOR) + " " + _select_text(post, TYPE_MINOR_SELECTOR)

    link_element = post.select_one(TITLE_SELECTOR)
    href = ""
    if link_element is not None and link_element.get("href"):
        href = str(link_element["href"])

    return ChangelogEntry(
        date=date,
        title=title,
        description=description,
        type=entry_type,
        link=make_absolute_link(href, base_origin),
    )


def parse_latest_entry(html: str, base_origin: str) -> ChangelogEntry:
    """
    Parse the changelog index page and return its newest entry.

    Args:
        html: Raw HTML of the changelog index.
        base_origin: Site origin used to absolutize relative links.

    Returns:
        ChangelogEntry for the newest post.

    Raises:
        ParseError: If the page contains no changelog posts.
    """
    if not html:
        raise ParseError("Empty changelog page")

    soup = BeautifulSoup(html, "html.parser")
    posts = soup.select(POST_SELECTOR)

    if not posts:
        raise ParseError(f"No elements matching '{POST_SELECTOR}' on changelog page")

    logger.debug(f"Found {len(posts)} changelog post(s)")

    entry = parse_entry(select_latest_post(posts), base_origin)
    logger.info(f"Latest changelog entry: {entry.title!r} ({entry.date})")

    return entry
