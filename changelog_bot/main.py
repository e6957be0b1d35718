#!/usr/bin/env python3
"""
Main orchestration module for the Changelog Bot.

This module coordinates the pipeline:
fetch → parse → summarize → compare → notify

It handles configuration loading, logging setup, the optional recurring
schedule and error handling for the entire workflow.
"""

import os
import sys
import threading
import time
from enum import Enum
from typing import Callable, Optional, Tuple

from changelog_bot.compare import already_posted
from changelog_bot.config import Settings, load_settings
from changelog_bot.errors import ConfigError, FetchError, ParseError
from changelog_bot.fetch import create_session
from changelog_bot.notify import SlackClient, create_slack_session, post
from changelog_bot.poll import ChangelogPoller
from changelog_bot.summarize import Summarizer, create_openai_client
from changelog_bot.utils import get_logger, setup_logging


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ENV_ERROR = 2

ALERT_TEMPLATE = (
    ":warning: Changelog Bot could not read {url} "
    "for {count} consecutive run(s). Last error: {error}"
)


class RunStatus(Enum):
    """Outcome of one orchestration cycle."""
    POSTED = "posted"
    DUPLICATE = "duplicate"
    SCRAPE_FAILED = "scrape_failed"
    SEND_FAILED = "send_failed"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"


def run_once(poller: ChangelogPoller, slack: SlackClient, dry_run: bool = False) -> RunStatus:
    """
    Execute one poll → dedup → notify cycle.

    Args:
        poller: Changelog poller.
        slack: Slack client bound to the target channel.
        dry_run: If True, log the message instead of posting it.

    Returns:
        RunStatus describing what happened.

    Raises:
        FetchError: If the changelog page could not be fetched.
        ParseError: If the changelog page had no entries.
    """
    status, _ = run_cycle(poller, slack, dry_run=dry_run)
    return status


def run_cycle(
    poller: ChangelogPoller,
    slack: SlackClient,
    dry_run: bool = False,
    last_announced_id: Optional[str] = None
) -> Tuple[RunStatus, str]:
    """
    Run one cycle and also report the ID of the entry it handled.

    Args:
        poller: Changelog poller.
        slack: Slack client bound to the target channel.
        dry_run: If True, log the message instead of posting it.
        last_announced_id: ID this process already posted or found in the
                           channel. An entry with this ID is a duplicate
                           even when the channel's last message is
                           something else, such as a failure alert.

    Returns:
        Tuple of (status, entry_id).

    Raises:
        FetchError: If the changelog page could not be fetched.
        ParseError: If the changelog page had no entries.
    """
    logger = get_logger("main")

    logger.info("[Stage 1/3] Checking changelog...")
    entry = poller.check_changelog()

    logger.info(f"[Stage 2/3] Checking channel for ID {entry.id!r}...")
    if last_announced_id is not None and entry.id == last_announced_id:
        logger.info(f"Skipping {entry.title!r}, already announced by this process")
        return RunStatus.DUPLICATE, entry.id

    if already_posted(entry.id, slack):
        logger.info(f"Skipping {entry.title!r}, already announced")
        return RunStatus.DUPLICATE, entry.id

    logger.info("[Stage 3/3] Sending notification...")
    if dry_run:
        logger.info(f"[DRY RUN] Would post:\n{entry.message}")
        return RunStatus.DRY_RUN, entry.id

    if post(slack, entry.message):
        return RunStatus.POSTED, entry.id
    return RunStatus.SEND_FAILED, entry.id


class ChangelogWatcher:
    """
    Runs the pipeline with an overlap guard and scrape-failure alerting.

    A trigger that fires while a run is still in progress is skipped. After
    ``alert_threshold`` consecutive scrape failures one alert is posted to
    the channel; the count resets on the next successful scrape. A
    threshold of 0 disables alerting.

    The alert displaces the channel's last message, so the watcher also
    remembers the last entry ID it posted or found already announced and
    never posts that entry again.
    """

    def __init__(
        self,
        poller: ChangelogPoller,
        slack: SlackClient,
        alert_threshold: int = 3,
        dry_run: bool = False
    ):
        self.poller = poller
        self.slack = slack
        self.alert_threshold = alert_threshold
        self.dry_run = dry_run
        self.consecutive_failures = 0
        self.last_announced_id: Optional[str] = None
        self._lock = threading.Lock()

    def run(self) -> RunStatus:
        logger = get_logger("main")

        if not self._lock.acquire(blocking=False):
            logger.warning("Previous run still in progress, skipping this trigger")
            return RunStatus.SKIPPED

        try:
            status, entry_id = run_cycle(
                self.poller,
                self.slack,
                dry_run=self.dry_run,
                last_announced_id=self.last_announced_id
            )
        except (FetchError, ParseError) as e:
            logger.error(f"Changelog scrape failed: {e}")
            self._record_failure(e)
            return RunStatus.SCRAPE_FAILED
        finally:
            self._lock.release()

        self.consecutive_failures = 0
        if status in (RunStatus.POSTED, RunStatus.DUPLICATE):
            self.last_announced_id = entry_id
        return status

    def _record_failure(self, error: Exception) -> None:
        logger = get_logger("main")
        self.consecutive_failures += 1

        if self.alert_threshold and self.consecutive_failures == self.alert_threshold:
            alert = ALERT_TEMPLATE.format(
                url=self.poller.changelog_url,
                count=self.consecutive_failures,
                error=error
            )
            if self.dry_run:
                logger.info(f"[DRY RUN] Would post alert:\n{alert}")
            else:
                logger.warning(f"Posting scrape failure alert after {self.consecutive_failures} failure(s)")
                post(self.slack, alert)


def run_forever(
    watcher: ChangelogWatcher,
    interval_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
    max_runs: Optional[int] = None
) -> int:
    """
    Re-run the watcher on a fixed interval.

    The first run happens immediately. An unexpected error in one run is
    logged and does not stop the schedule.

    Args:
        watcher: The watcher to trigger.
        interval_seconds: Seconds to wait between runs.
        sleep: Sleep function, replaceable in tests.
        max_runs: Stop after this many runs; None runs until interrupted.

    Returns:
        Number of runs performed.
    """
    logger = get_logger("main")
    runs = 0

    while max_runs is None or runs < max_runs:
        try:
            status = watcher.run()
        except Exception as e:
            logger.exception(f"Unexpected error in scheduled run: {e}")
            status = None
        runs += 1
        if status is not None:
            logger.info(f"Run {runs} finished: {status.value}")

        if max_runs is not None and runs >= max_runs:
            break

        logger.info(f"Next check in {interval_seconds:.0f}s")
        sleep(interval_seconds)

    return runs


def build_watcher(settings: Settings) -> ChangelogWatcher:
    """
    Construct the pipeline components from settings.

    Returns:
        A ChangelogWatcher wired to real HTTP, OpenAI and Slack clients.
    """
    http_session = create_session()
    summarizer = Summarizer(
        client=create_openai_client(settings.openai_api_key, settings.request_timeout),
        session=http_session,
        model=settings.openai_model,
        timeout=settings.request_timeout,
    )
    poller = ChangelogPoller(
        session=http_session,
        summarizer=summarizer,
        changelog_url=settings.changelog_url,
        timeout=settings.request_timeout,
    )
    slack = SlackClient(
        create_slack_session(settings.slack_token),
        settings.channel_id,
        timeout=settings.request_timeout,
    )
    return ChangelogWatcher(
        poller,
        slack,
        alert_threshold=settings.failure_alert_threshold,
        dry_run=settings.dry_run,
    )


def main() -> int:
    """
    Main entry point for the Changelog Bot.

    Sets up logging, loads settings and runs the pipeline once, or on a
    schedule when SCHEDULE_INTERVAL_HOURS is set.

    Returns:
        Exit code for the process.
    """
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
    logger = get_logger("main")

    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_ENV_ERROR

    setup_logging(settings.log_level)

    if settings.dry_run:
        logger.info("Running in DRY RUN mode - messages will not be posted")

    watcher = build_watcher(settings)

    try:
        if not settings.dry_run and not watcher.slack.check_connection():
            logger.warning("Slack connection check failed, notifications may fail")

        if settings.schedule_interval_seconds > 0:
            logger.info(f"Checking changelog every {settings.schedule_interval_hours:g} hour(s)")
            run_forever(watcher, settings.schedule_interval_seconds)
        else:
            status = watcher.run()
            logger.info(f"Run finished: {status.value}")
            if status == RunStatus.SCRAPE_FAILED:
                return EXIT_FAILURE

        return EXIT_SUCCESS

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error in pipeline: {e}")
        return EXIT_FAILURE

    finally:
        watcher.slack.close()
        watcher.poller.session.close()


if __name__ == "__main__":
    sys.exit(main())
