"""
Polling session that follows one stack operation to its outcome.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional, Union

import click

from .config import MonitorConfig
from .cursor import EventCursor
from .feed import CloudFormationEventFeed, EventFeed, is_stack_missing
from .models import (
    ALREADY_CREATED,
    Operation,
    Outcome,
    Rejected,
    Resolved,
    StackEvent,
    region_from_id,
    stack_name_from_id,
)
from .report import build_stack_console_url, format_event_line, render_outcome
from .tracker import ProgressTracker

logger = logging.getLogger(__name__)

# Tolerated clock skew between this host and CloudFormation event timestamps
CLOCK_SKEW = timedelta(seconds=5)


class MonitorSession:
    """
    One monitoring session for one stack and one operation.

    Each session owns its cursor, tracker and configuration; sessions never
    share state, so several stacks can be monitored side by side.
    """

    def __init__(
        self,
        operation: Operation,
        stack_id: str,
        feed: EventFeed,
        config: Optional[MonitorConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        echo: Callable[[str], None] = click.echo,
        region: Optional[str] = None,
        since: Optional[datetime] = None,
    ):
        self.operation = operation
        self.stack_id = stack_id
        self.stack_name = stack_name_from_id(stack_id)
        self.feed = feed
        self.config = config or MonitorConfig()
        self.sleep = sleep
        self.echo = echo
        self.region = region or region_from_id(stack_id)
        self.cursor = EventCursor()
        self.tracker = ProgressTracker(self.stack_name, operation, self.config.failure_policy)
        self.monitored_since = _as_utc(since) - CLOCK_SKEW if since is not None else None
        self.poll_count = 0
        self.outcome: Optional[Outcome] = None

    def run(self) -> Outcome:
        """
        Poll the event feed until the operation reaches an outcome.

        Returns:
            Resolved or Rejected outcome

        Raises:
            Exception: Any feed error other than a deleted stack during a delete
        """
        if self.outcome is not None:
            return self.outcome

        logger.info(f"Monitoring {self.operation.value} of stack {self.stack_name}")

        while True:
            self.poll_count += 1
            try:
                events = self.feed.describe_events(self.stack_id)
            except Exception as e:
                if self.operation is Operation.DELETE and is_stack_missing(e):
                    logger.debug(f"Stack {self.stack_name} no longer exists: {e}")
                    return self._finish(Resolved(Operation.DELETE.success_status))
                logger.debug(f"Event feed call {self.poll_count} failed: {e}")
                raise

            outcome = self.poll(events)
            if outcome is not None:
                return self._finish(outcome)

            logger.debug(f"Poll {self.poll_count}: stack status {self.tracker.root_status or 'unknown'}")
            self.sleep(self.config.poll_interval_seconds)

    def poll(self, events) -> Optional[Outcome]:
        """
        Feed one response of the event feed through the cursor and tracker.

        Args:
            events: Events as returned by the feed, newest first

        Returns:
            The outcome if the session is over, otherwise None
        """
        for event in self.cursor.admit(events):
            if self._is_stale(event):
                continue
            self.tracker.observe(event)
            if self.config.verbose:
                self.echo(format_event_line(event))
        return self.tracker.settle()

    def _is_stale(self, event: StackEvent) -> bool:
        # Events from earlier operations on the same stack
        if self.monitored_since is None or event.timestamp is None:
            return False
        return _as_utc(event.timestamp) < self.monitored_since

    def _finish(self, outcome: Outcome) -> Outcome:
        self.outcome = outcome
        if isinstance(outcome, Rejected):
            logger.warning("Operation failed!")
            console_url = build_stack_console_url(self.stack_id, self.region)
            if console_url:
                logger.warning(f"View the full error output: {console_url}")
        else:
            logger.info(f"Stack {self.operation.value} finished...")
        return outcome


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are UTC, as CloudFormation reports them
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_stack_id(stack_ref: Union[str, Mapping[str, Any]]) -> str:
    """
    Extract the stack id from a stack reference.

    Args:
        stack_ref: Stack id, or a create/update response carrying ``StackId``

    Returns:
        Stack id

    Raises:
        ValueError: If no stack id can be found
    """
    if isinstance(stack_ref, str):
        if not stack_ref:
            raise ValueError("Stack id must not be empty")
        return stack_ref
    if isinstance(stack_ref, Mapping) and stack_ref.get("StackId"):
        return stack_ref["StackId"]
    raise ValueError(f"Invalid stack reference: {stack_ref!r}")


def monitor(
    operation: Union[Operation, str],
    stack_ref: Union[str, Mapping[str, Any]],
    config: Optional[MonitorConfig] = None,
    feed: Optional[EventFeed] = None,
    sleep: Callable[[float], None] = time.sleep,
    echo: Callable[[str], None] = click.echo,
    region: Optional[str] = None,
    since: Optional[datetime] = None,
) -> Optional[str]:
    """
    Monitor a stack operation until it completes.

    Args:
        operation: "create", "update" or "delete"
        stack_ref: Stack id, create/update response, or ``ALREADY_CREATED``
        config: Session settings, defaults to ``MonitorConfig()``
        feed: Event feed, defaults to a CloudFormation feed for ``region``
        sleep: Delay function called between polls
        echo: Output function for verbose event lines
        region: AWS region
        since: Time the operation was requested; older events are ignored.
            When omitted, the whole feed is tracked

    Returns:
        Final stack status, or None when there was nothing to monitor

    Raises:
        DeploymentFailedError: If a resource failure ended the operation
    """
    if isinstance(stack_ref, str) and stack_ref == ALREADY_CREATED:
        logger.debug("Stack already created, nothing to monitor")
        return None

    operation = Operation(operation)
    stack_id = resolve_stack_id(stack_ref)
    if feed is None:
        feed = CloudFormationEventFeed(region=region)

    session = MonitorSession(
        operation,
        stack_id,
        feed,
        config=config,
        sleep=sleep,
        echo=echo,
        region=region,
        since=since,
    )
    return render_outcome(session.run())
