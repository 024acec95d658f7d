"""
Event feed clients for CloudFormation stacks.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

from .models import StackEvent

logger = logging.getLogger(__name__)


class EventFeed(ABC):
    """Source of stack events."""

    @abstractmethod
    def describe_events(self, stack_id: str) -> List[StackEvent]:
        """
        Return the events known for a stack, newest first.

        The full history is returned on every call; callers deduplicate.
        Implementations raise on failure.
        """


class CloudFormationEventFeed(EventFeed):
    """Reads stack events through the CloudFormation API."""

    def __init__(self, client=None, region: Optional[str] = None):
        self.region = region
        self.cloudformation_client = client

    def _get_client(self):
        """Lazy initialization of CloudFormation client."""
        if self.cloudformation_client is None:
            self.cloudformation_client = boto3.client('cloudformation', region_name=self.region)
        return self.cloudformation_client

    def describe_events(self, stack_id: str) -> List[StackEvent]:
        response = self._get_client().describe_stack_events(StackName=stack_id)
        events = [StackEvent.from_api(item) for item in response.get('StackEvents', [])]
        logger.debug(f"Fetched {len(events)} events for stack {stack_id}")
        return events


def error_message(error: BaseException) -> str:
    """
    Extract the provider message from a feed error.

    Args:
        error: Exception raised by an event feed

    Returns:
        The API error message for botocore client errors, ``str(error)`` otherwise
    """
    if isinstance(error, ClientError):
        message = error.response.get('Error', {}).get('Message')
        if message:
            return message
    return str(error)


def is_stack_missing(error: BaseException) -> bool:
    """Check whether a feed error says the stack no longer exists."""
    return "does not exist" in error_message(error)
