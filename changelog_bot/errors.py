"""
Exception types shared across the Changelog Bot pipeline.

Components raise these internally and convert them into fallback values
at their own boundary; only the orchestrator inspects them directly.
"""

from typing import Optional


class ChangelogBotError(Exception):
    """Base class for all Changelog Bot errors."""


class ConfigError(ChangelogBotError):
    """Raised when required configuration is missing or malformed."""


class FetchError(ChangelogBotError):
    """Raised when an HTTP fetch fails or returns a non-200 status."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(ChangelogBotError):
    """Raised when the changelog page has no recognizable entry."""


class SummarizationError(ChangelogBotError):
    """Raised when the language model call fails or returns nothing usable."""


class MessagingError(ChangelogBotError):
    """Raised when reading from or posting to the chat channel fails."""
