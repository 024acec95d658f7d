"""
Data models for stack events and monitoring outcomes.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


# Resource type CloudFormation reports on events about a stack itself
STACK_RESOURCE_TYPE = "AWS::CloudFormation::Stack"

# Passed instead of a stack reference when there was nothing to deploy
ALREADY_CREATED = "alreadyCreated"


class Operation(Enum):
    """Stack operation being monitored."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def success_status(self) -> str:
        """Status the root stack reports when the operation succeeds."""
        return f"{self.value.upper()}_COMPLETE"

    @property
    def in_progress_status(self) -> str:
        """Status the root stack reports while the operation runs."""
        return f"{self.value.upper()}_IN_PROGRESS"


@dataclass(frozen=True)
class StackEvent:
    """A single entry of a stack's event feed."""
    event_id: str
    stack_name: str
    logical_resource_id: str
    resource_type: str
    resource_status: str
    status_reason: Optional[str] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "StackEvent":
        """
        Build an event from a ``describe_stack_events`` item.

        Args:
            data: One element of the ``StackEvents`` list

        Returns:
            StackEvent
        """
        return cls(
            event_id=data["EventId"],
            stack_name=data.get("StackName", ""),
            logical_resource_id=data.get("LogicalResourceId", ""),
            resource_type=data.get("ResourceType", ""),
            resource_status=data.get("ResourceStatus") or "",
            status_reason=data.get("ResourceStatusReason") or None,
            timestamp=data.get("Timestamp"),
        )


@dataclass(frozen=True)
class Resolved:
    """The operation finished; ``status`` is the final root stack status."""
    status: str


@dataclass(frozen=True)
class Rejected:
    """The operation failed because of ``resource``."""
    resource: str
    reason: str


Outcome = Union[Resolved, Rejected]


def stack_name_from_id(stack_id: str) -> str:
    """
    Derive the stack name from a stack id.

    Args:
        stack_id: Stack name or stack ARN
            (``arn:aws:cloudformation:<region>:<account>:stack/<name>/<guid>``)

    Returns:
        The stack name
    """
    if stack_id.startswith("arn:") and ":stack/" in stack_id:
        return stack_id.split(":stack/", 1)[1].split("/", 1)[0]
    return stack_id


def region_from_id(stack_id: str) -> Optional[str]:
    """Return the region embedded in a stack ARN, if any."""
    if stack_id.startswith("arn:"):
        parts = stack_id.split(":")
        if len(parts) > 3 and parts[3]:
            return parts[3]
    return None
