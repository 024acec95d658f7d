"""
Deduplication of the stack event feed across polls.
"""

from typing import List, Sequence, Set

from .models import StackEvent


class EventCursor:
    """Remembers which events of a session were already admitted."""

    def __init__(self):
        self.seen_event_ids: Set[str] = set()

    def admit(self, events: Sequence[StackEvent]) -> List[StackEvent]:
        """
        Filter out events admitted by an earlier call.

        Args:
            events: Events as returned by the feed, newest first

        Returns:
            New events, oldest first
        """
        new_events = []
        for event in reversed(events):
            if event.event_id in self.seen_event_ids:
                continue
            self.seen_event_ids.add(event.event_id)
            new_events.append(event)
        return new_events

    def __len__(self) -> int:
        return len(self.seen_event_ids)
