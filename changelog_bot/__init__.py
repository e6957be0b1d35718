"""
Changelog Bot - Slack notifications for new changelog entries.

This package provides functionality to:
- Fetch the public changelog page and its entry detail pages
- Parse the newest changelog entry out of the HTML
- Summarize the entry with an OpenAI chat model
- Skip entries that were already announced in the Slack channel
- Post a formatted notification to Slack
"""

__version__ = "1.0.0"
__author__ = "Changelog Bot Team"
