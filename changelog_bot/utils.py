"""
Utility functions for the Changelog Bot pipeline.

This module provides:
- Central logging configuration
- Environment variable helpers
- URL helpers used when resolving changelog links
"""

import logging
import os
import sys
from typing import Optional
from urllib.parse import urlparse


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure and return the root logger for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO.

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger("changelog_bot")
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Name for the logger, typically the module name.

    Returns:
        Logger instance configured as a child of the main application logger.
    """
    return logging.getLogger(f"changelog_bot.{name}")


def get_env_var(name: str, required: bool = True, default: Optional[str] = None) -> Optional[str]:
    """
    Get an environment variable with optional requirement enforcement.

    Args:
        name: Name of the environment variable.
        required: If True, raises ValueError when variable is not set.
                  Defaults to True.
        default: Default value if variable is not set and not required.

    Returns:
        Value of the environment variable or default.

    Raises:
        ValueError: If required=True and the variable is not set.
    """
    value = os.environ.get(name)

    if value is None or value.strip() == "":
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return default

    return value.strip()


def get_base_origin(url: str) -> str:
    """
    Return the scheme and host part of a URL, without a trailing slash.

    >>> get_base_origin("https://changelog.shopify.com/posts?page=2")
    'https://changelog.shopify.com'
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def make_absolute_link(link: str, base_origin: str) -> str:
    """
    Turn a scraped href into an absolute URL.

    Links that already start with a scheme are returned untouched; anything
    else is appended to the site's origin as-is, so "/posts/42" becomes
    "<origin>/posts/42".

    Args:
        link: The href attribute value (may be empty).
        base_origin: Origin such as "https://changelog.shopify.com".

    Returns:
        Absolute URL string.
    """
    if link.startswith("http"):
        return link
    return f"{base_origin}{link}"
