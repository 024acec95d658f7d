"""
Classification of stack events and stack statuses.
"""

from dataclasses import dataclass
from enum import Enum

from .models import STACK_RESOURCE_TYPE, Operation, StackEvent


class EventScope(Enum):
    """Whether an event is about the monitored stack or one of its resources."""
    ROOT = "root"
    CHILD = "child"


@dataclass(frozen=True)
class Classification:
    """Tags computed for one event."""
    scope: EventScope
    failed: bool
    rollback_trigger: bool

    @property
    def is_root(self) -> bool:
        """Whether the event is about the monitored stack itself."""
        return self.scope is EventScope.ROOT


def is_root_event(event: StackEvent, stack_name: str) -> bool:
    """Check whether an event describes the monitored stack itself."""
    return event.logical_resource_id == stack_name and event.resource_type == STACK_RESOURCE_TYPE


def is_failure(event: StackEvent) -> bool:
    """Check whether an event reports a failed resource operation."""
    return event.resource_status.endswith("_FAILED")


def is_rollback_trigger(event: StackEvent) -> bool:
    """Check whether an event reports the start of an update rollback."""
    return event.resource_status == "UPDATE_ROLLBACK_IN_PROGRESS"


def classify(event: StackEvent, stack_name: str) -> Classification:
    """
    Classify a single event.

    Args:
        event: Event to classify
        stack_name: Name of the monitored stack

    Returns:
        Classification
    """
    scope = EventScope.ROOT if is_root_event(event, stack_name) else EventScope.CHILD
    return Classification(
        scope=scope,
        failed=is_failure(event),
        rollback_trigger=is_rollback_trigger(event),
    )


def is_terminal_status(status: str, operation: Operation) -> bool:
    """
    Check whether a root stack status ends the operation.

    Args:
        status: Root stack status
        operation: Operation being monitored

    Returns:
        True if the stack will not progress further on its own
    """
    if not status:
        return False
    if status == operation.success_status:
        return True
    # A create configured to delete on failure finishes as DELETE_COMPLETE
    if status == "DELETE_COMPLETE":
        return True
    return (
        status.endswith("ROLLBACK_COMPLETE")
        or status.endswith("ROLLBACK_FAILED")
        or status.endswith("_FAILED")
    )


def is_in_progress_for(status: str, operation: Operation) -> bool:
    """Check whether a root stack status shows the operation has started."""
    return status == operation.in_progress_status
