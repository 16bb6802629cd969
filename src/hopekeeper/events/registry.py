from typing import Dict, Iterable, List

from ..core.errors import SchemaError
from .model import GameEvent


class EventRegistry:
    def __init__(self):
        self._events: Dict[str, GameEvent] = {}
        self._by_trigger: Dict[str, List[GameEvent]] = {}

    def add(self, event: GameEvent):
        if event.id in self._events:
            raise SchemaError(f"Duplicate event id '{event.id}'.")
        self._events[event.id] = event
        self._by_trigger.setdefault(event.trigger, []).append(event)

    def add_all(self, events: Iterable[GameEvent]):
        events = list(events)
        ids = [e.id for e in events]
        duplicates = sorted({i for i in ids if ids.count(i) > 1} | (set(ids) & set(self._events)))
        if duplicates:
            raise SchemaError(f"Duplicate event ids: {', '.join(duplicates)}.")
        for event in events:
            self.add(event)

    def get(self, event_id: str) -> GameEvent:
        if event_id not in self._events:
            raise ValueError(f"Event with ID '{event_id}' not found.")
        return self._events[event_id]

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._events

    def __len__(self) -> int:
        return len(self._events)

    def candidates_for_trigger(self, trigger: str) -> List[GameEvent]:
        """Events authored for `trigger`, in load order."""
        return list(self._by_trigger.get(trigger, []))

    def triggers(self) -> List[str]:
        return sorted(self._by_trigger)

    def all_events(self) -> List[GameEvent]:
        return list(self._events.values())
