"""
Outcome reporting and event line rendering.
"""

import urllib.parse
from typing import Optional

from .errors import DeploymentFailedError
from .models import Outcome, Rejected, Resolved, StackEvent


def render_outcome(outcome: Outcome) -> str:
    """
    Turn a session outcome into the monitor's result.

    Args:
        outcome: Terminal tracker outcome

    Returns:
        The final stack status for a resolved session

    Raises:
        DeploymentFailedError: If the session was rejected
    """
    if isinstance(outcome, Rejected):
        raise DeploymentFailedError(outcome.resource, outcome.reason)
    if isinstance(outcome, Resolved):
        return outcome.status
    raise TypeError(f"Unknown outcome: {outcome!r}")


def format_event_line(event: StackEvent) -> str:
    """Render one classified event for verbose output."""
    parts = [event.resource_status, event.resource_type, event.logical_resource_id]
    if event.status_reason:
        parts.append(event.status_reason)
    line = " - ".join(parts)
    if event.timestamp is not None:
        line = f"{event.timestamp:%Y-%m-%d %H:%M:%S} {line}"
    return line


def build_stack_console_url(stack_id: str, region: Optional[str]) -> Optional[str]:
    """
    Build the CloudFormation console URL for a stack.

    Args:
        stack_id: Stack name or ARN
        region: AWS region, None when unknown

    Returns:
        Console URL, or None without a region
    """
    if not region:
        return None
    encoded_id = urllib.parse.quote(stack_id, safe='')
    return f"https://console.aws.amazon.com/cloudformation/home?region={region}#/stack/detail?stackId={encoded_id}"
