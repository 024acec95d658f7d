"""
Shared fixtures for stackmon tests.
"""

import itertools
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from stackmon.feed import EventFeed
from stackmon.models import STACK_RESOURCE_TYPE, StackEvent

STACK_NAME = "new-service-dev"


@pytest.fixture
def make_event():
    """Factory for stack events with fresh ids; defaults describe the root stack."""
    counter = itertools.count()

    def _make(status, logical_id=STACK_NAME, resource_type=STACK_RESOURCE_TYPE, reason=None, event_id=None):
        return StackEvent(
            event_id=event_id or f"1a2b{next(counter):04d}",
            stack_name=STACK_NAME,
            logical_resource_id=logical_id,
            resource_type=resource_type,
            resource_status=status,
            status_reason=reason,
            timestamp=datetime.now(timezone.utc),
        )

    return _make


@pytest.fixture
def feed_of():
    """
    Build a feed whose successive calls return the given responses.

    Each response is a list of events (returned newest first, with the
    history of earlier responses appended) or an exception to raise.
    """
    def _build(*responses):
        history = []

        def _describe(stack_id):
            response = next(steps)
            if isinstance(response, BaseException):
                raise response
            history[:0] = list(response)
            return list(history)

        steps = iter(responses)
        feed = Mock(spec=EventFeed)
        feed.describe_events.side_effect = _describe
        return feed

    return _build
