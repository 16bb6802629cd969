from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Generic, List, Optional, Tuple, TypeVar


E = TypeVar("E")
Handler = Callable[[Any, E], None]


@dataclass(frozen=True)
class VariableChanged:
    var_name: str
    new_value: float
    clear: bool = False


@dataclass(frozen=True)
class CollectionChanged:
    clear: bool = False
    provider_id: Optional[str] = None
    change: Optional[str] = None  # "add" | "remove"; None on clear


class ChangeNotifier(Generic[E]):
    """
    Synchronous publish/subscribe channel for one kind of change.

    Handlers run in registration order right after the mutation is applied.
    A publish issued from inside a handler is queued and delivered once the
    current round of handlers has finished, so handlers never see interleaved
    notifications.
    """

    def __init__(self):
        self._handlers: List[Handler] = []
        self._pending: Deque[Tuple[Any, E]] = deque()
        self._dispatching = False

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, sender: Any, event: E):
        self._pending.append((sender, event))
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                current_sender, current_event = self._pending.popleft()
                for handler in list(self._handlers):
                    handler(current_sender, current_event)
        finally:
            self._dispatching = False
            self._pending.clear()

    def __len__(self) -> int:
        return len(self._handlers)
