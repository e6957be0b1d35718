"""
Fetch module for the Changelog Bot pipeline.

This module handles fetching the changelog index and entry detail pages.
Every request carries an explicit timeout; failures are reported once and
never retried.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from changelog_bot.errors import FetchError
from changelog_bot.utils import get_logger


# Module logger
logger = get_logger("fetch")

# Default configuration
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FetchResult:
    """
    Represents the result of fetching a single URL.

    Attributes:
        source_url: The original URL that was fetched.
        html_content: Raw HTML content if successful, None otherwise.
        success: Whether the fetch was successful.
        error_message: Error description if fetch failed, None otherwise.
        status_code: HTTP status code if request was made, None otherwise.
    """
    source_url: str
    html_content: Optional[str]
    success: bool
    error_message: Optional[str] = None
    status_code: Optional[int] = None


def create_session() -> requests.Session:
    """
    Create a requests session with browser-like default headers.

    Returns:
        Configured requests.Session instance.
    """
    session = requests.Session()

    session.headers.update({
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
    })

    return session


def validate_url(url: str) -> bool:
    """
    Validate that a URL is well-formed and uses HTTP/HTTPS.

    Args:
        url: URL string to validate.

    Returns:
        True if URL is valid, False otherwise.
    """
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    except ValueError:
        return False


def fetch_single_url(
    url: str,
    session: requests.Session,
    timeout: float = DEFAULT_TIMEOUT
) -> FetchResult:
    """
    Fetch a single URL and return the result.

    Args:
        url: URL to fetch.
        session: Configured requests session.
        timeout: Request timeout in seconds.

    Returns:
        FetchResult containing the fetch outcome.
    """
    logger.debug(f"Fetching URL: {url}")

    if not validate_url(url):
        logger.warning(f"Invalid URL format: {url}")
        return FetchResult(
            source_url=url,
            html_content=None,
            success=False,
            error_message="Invalid URL format"
        )

    try:
        response = session.get(url, timeout=timeout)

        if response.status_code == 200:
            logger.info(f"Successfully fetched {url} ({len(response.text)} bytes)")
            return FetchResult(
                source_url=url,
                html_content=response.text,
                success=True,
                status_code=response.status_code
            )
        else:
            logger.warning(f"HTTP {response.status_code} for {url}")
            return FetchResult(
                source_url=url,
                html_content=None,
                success=False,
                error_message=f"HTTP {response.status_code}",
                status_code=response.status_code
            )

    except requests.exceptions.Timeout:
        logger.warning(f"Timeout fetching {url}")
        return FetchResult(
            source_url=url,
            html_content=None,
            success=False,
            error_message="Request timeout"
        )

    except requests.exceptions.ConnectionError as e:
        logger.warning(f"Connection error for {url}: {e}")
        return FetchResult(
            source_url=url,
            html_content=None,
            success=False,
            error_message=f"Connection error: {str(e)}"
        )

    except requests.exceptions.RequestException as e:
        logger.error(f"Request exception for {url}: {e}")
        return FetchResult(
            source_url=url,
            html_content=None,
            success=False,
            error_message=f"Request failed: {str(e)}"
        )


def fetch_page(
    url: str,
    session: requests.Session,
    timeout: float = DEFAULT_TIMEOUT
) -> str:
    """
    Fetch a page and return its HTML, raising on any failure.

    Args:
        url: URL to fetch.
        session: Configured requests session.
        timeout: Request timeout in seconds.

    Returns:
        Response body as text.

    Raises:
        FetchError: If the request failed or did not return HTTP 200.
    """
    result = fetch_single_url(url, session, timeout)

    if not result.success:
        raise FetchError(
            f"Failed to fetch {url}: {result.error_message}",
            url=url,
            status_code=result.status_code
        )

    return result.html_content or ""
