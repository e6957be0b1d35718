"""
Summarize module for the Changelog Bot pipeline.

Fetches a changelog entry's detail page, extracts its text and asks an
OpenAI chat model for a short overview. Failures never escape the
Summarizer: they are logged and reported as a missing summary (None).
"""

from typing import Any, Optional

import requests
from openai import OpenAI, OpenAIError

from changelog_bot.errors import FetchError, SummarizationError
from changelog_bot.fetch import DEFAULT_TIMEOUT, fetch_page
from changelog_bot.parse import clean_response, extract_relevant_text
from changelog_bot.utils import get_logger


# Module logger
logger = get_logger("summarize")

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 200

SYSTEM_PROMPT = "You are a helpful Shopify Support assistant."
USER_PROMPT_TEMPLATE = (
    "Summarize this for me: {text}. "
    "If there're any Learn More link - please include it as well at the end"
)


def create_openai_client(api_key: str, timeout: float = DEFAULT_TIMEOUT) -> OpenAI:
    """
    Create an OpenAI client with an explicit request timeout and no retries.

    Args:
        api_key: OpenAI API key.
        timeout: Per-request timeout in seconds.

    Returns:
        OpenAI client instance.
    """
    return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def build_messages(text: str) -> list:
    """Build the chat messages for a summary request."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(text=text)},
    ]


class Summarizer:
    """
    Produces short overviews of changelog entry pages.

    Args:
        client: OpenAI-compatible client exposing ``chat.completions.create``.
        session: requests session used to fetch detail pages.
        model: Chat model name.
        max_tokens: Cap on generated tokens.
        timeout: Timeout in seconds for page fetches.
    """

    def __init__(
        self,
        client: Any,
        session: requests.Session,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.client = client
        self.session = session
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    def complete(self, text: str) -> str:
        """
        Ask the model to summarize text.

        Returns:
            The stripped completion content.

        Raises:
            SummarizationError: On API errors or an empty/malformed response.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(text),
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            raise SummarizationError(f"OpenAI request failed: {e}")

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise SummarizationError(f"Malformed OpenAI response: {e}")

        if not content or not content.strip():
            raise SummarizationError("OpenAI returned an empty summary")

        logger.debug(f"Summary finish reason: {getattr(response.choices[0], 'finish_reason', None)}")
        return content.strip()

    def summarize(self, url: str) -> Optional[str]:
        """
        Summarize the changelog entry at url.

        Args:
            url: Absolute URL of the entry detail page.

        Returns:
            Cleaned summary text, or None if any step failed or
            nothing is left after cleaning.
        """
        logger.info(f"Summarizing {url}")

        try:
            html = fetch_page(url, self.session, self.timeout)
            text = extract_relevant_text(html)
            if not text:
                logger.warning(f"No paragraph text found on {url}")
            summary = self.complete(text)
        except FetchError as e:
            logger.error(f"Error summarizing webpage: {e}")
            return None
        except SummarizationError as e:
            logger.error(f"Error summarizing webpage {url}: {e}")
            return None

        cleaned = clean_response(summary).strip()
        if not cleaned:
            logger.warning(f"Summary for {url} was empty after removing placeholders")
            return None

        logger.info(f"Summary ready ({len(cleaned)} chars)")
        return cleaned
