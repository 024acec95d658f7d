"""
Progress tracking state machine for a stack operation.

The root stack's own status decides when a session stops. Nested stacks and
resources reach their own COMPLETE statuses long before (or after) the stack
as a whole, so they never end a session. Failures on any resource are
remembered so that, once the stack settles into its rollback status, the
first failing resource is reported rather than the generic rollback status.

State Transitions:
    POLLING → RESOLVED   (root terminal, no failure recorded)
    POLLING → REJECTED   (root terminal with a failure, or early abort policy)
"""

import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

from .classify import Classification, classify, is_in_progress_for, is_terminal_status
from .config import FailurePolicy
from .models import Operation, Outcome, Rejected, Resolved, StackEvent

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    """Progress tracker states."""
    POLLING = "polling"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ProgressTracker:
    """Tracks the root stack status and the first resource failure."""

    def __init__(
        self,
        stack_name: str,
        operation: Operation,
        failure_policy: FailurePolicy = FailurePolicy.WAIT,
    ):
        self.stack_name = stack_name
        self.operation = operation
        self.failure_policy = failure_policy
        self.root_status: Optional[str] = None
        self.latest_failure: Optional[Tuple[str, str]] = None
        self.root_started = False
        self.state = TrackerState.POLLING
        self.outcome: Optional[Outcome] = None

    @property
    def is_terminal(self) -> bool:
        return self.state is not TrackerState.POLLING

    @property
    def root_terminal(self) -> bool:
        return self.root_status is not None and is_terminal_status(self.root_status, self.operation)

    def observe(self, event: StackEvent) -> Classification:
        """
        Apply one newly admitted event.

        Args:
            event: Event, in oldest to newest order

        Returns:
            The event's classification
        """
        tags = classify(event, self.stack_name)
        if self.is_terminal:
            return tags

        if tags.is_root:
            if self.root_terminal:
                logger.debug(f"Ignoring {event.resource_status} after terminal {self.root_status}")
            else:
                self.root_status = event.resource_status
                if is_in_progress_for(event.resource_status, self.operation):
                    self.root_started = True

        if (tags.failed or tags.rollback_trigger) and self.latest_failure is None:
            reason = event.status_reason or event.resource_status
            self.latest_failure = (event.logical_resource_id, reason)
            logger.debug(f"Recorded failure on {event.logical_resource_id}: {reason}")

        return tags

    def settle(self) -> Optional[Outcome]:
        """
        Decide whether the session is over after a poll's events were observed.

        Returns:
            The outcome when the tracker reached a terminal state, None to keep polling
        """
        if self.is_terminal:
            return self.outcome

        if self.root_terminal:
            if self.latest_failure is not None:
                return self._reject()
            self.state = TrackerState.RESOLVED
            self.outcome = Resolved(self.root_status)
            return self.outcome

        if self.latest_failure is not None and self._abort_early():
            logger.debug(f"Aborting early under {self.failure_policy.value} policy")
            return self._reject()

        return None

    def process(self, events: Iterable[StackEvent]) -> Optional[Outcome]:
        """Observe a poll's worth of events, then settle."""
        for event in events:
            self.observe(event)
        return self.settle()

    def _abort_early(self) -> bool:
        if self.failure_policy is FailurePolicy.FAIL_FAST:
            return True
        if self.failure_policy is FailurePolicy.FAIL_BEFORE_START:
            return not self.root_started
        return False

    def _reject(self) -> Outcome:
        resource, reason = self.latest_failure
        self.state = TrackerState.REJECTED
        self.outcome = Rejected(resource, reason)
        return self.outcome
