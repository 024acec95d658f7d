"""
Stackmon - CloudFormation stack operation monitor.

This package polls the event feed of a CloudFormation stack while a create,
update or delete runs, and resolves to the final stack status or to the
first resource failure that caused the operation to roll back.
"""

from .config import FailurePolicy, MonitorConfig
from .errors import DeploymentFailedError, StackmonError
from .feed import CloudFormationEventFeed, EventFeed
from .models import ALREADY_CREATED, Operation, Rejected, Resolved, StackEvent
from .session import MonitorSession, monitor

__version__ = "0.1.0"

__all__ = [
    "ALREADY_CREATED",
    "CloudFormationEventFeed",
    "DeploymentFailedError",
    "EventFeed",
    "FailurePolicy",
    "MonitorConfig",
    "MonitorSession",
    "Operation",
    "Rejected",
    "Resolved",
    "StackEvent",
    "StackmonError",
    "monitor",
]
