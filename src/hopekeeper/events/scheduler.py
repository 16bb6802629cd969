from __future__ import annotations
import logging
import random
from typing import TYPE_CHECKING, AbstractSet, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.errors import ActionExecutionError
from ..core.ids import EventId
from ..core.rng import get_seeded_rng
from .actions import Action
from .model import GameEvent
from .registry import EventRegistry
from .selection import SelectionStrategy, WeightedSelection

if TYPE_CHECKING:
    from ..state.game_state import GameState

logger = logging.getLogger(__name__)


def is_eligible(event: GameEvent, trigger: str, state: GameState, fired: AbstractSet[str]) -> bool:
    if event.trigger != trigger or event.disabled:
        return False
    if event.once and event.id in fired:
        return False
    if not event.exclusions.isdisjoint(fired):
        return False
    # Conditions are pure, so stopping at the first false one is only a shortcut.
    return all(condition.evaluate(state) for condition in event.conditions)


def execute_actions(event_id: str, actions: Sequence[Action], state: GameState):
    """Runs actions in order. The first fault stops the sequence."""
    for index, action in enumerate(actions):
        try:
            action.execute(state)
        except Exception as e:
            logger.debug("Event '%s' failed at action %d (%s): %s", event_id, index, action.kind, e)
            raise ActionExecutionError(event_id, index, f"{type(e).__name__}: {e}") from e


class EventScheduler:
    """
    Fires at most one eligible event per trigger occasion.

    The fired set is the scheduler's own history of which events have run;
    GameEvents themselves stay immutable and can be shared between schedulers.
    """

    def __init__(
        self,
        events: Iterable[GameEvent] = (),
        rng: Optional[random.Random] = None,
        strategy: Optional[SelectionStrategy] = None,
    ):
        self.registry = EventRegistry()
        self.registry.add_all(events)
        self.rng = rng or get_seeded_rng()
        self.strategy = strategy or WeightedSelection()
        self._fired: Set[EventId] = set()
        # (event id, error) for candidates whose conditions raised during the last selection
        self.skipped: List[Tuple[EventId, str]] = []

    def add_events(self, events: Iterable[GameEvent]):
        self.registry.add_all(events)

    @property
    def fired(self) -> FrozenSet[EventId]:
        return frozenset(self._fired)

    def has_fired(self, event_id: str) -> bool:
        return event_id in self._fired

    def reset(self):
        """Forgets firing history, e.g. when a new game run starts."""
        self._fired.clear()
        self.skipped = []

    def is_eligible(self, event: GameEvent, trigger: str, state: GameState) -> bool:
        return is_eligible(event, trigger, state, self._fired)

    def eligible_events(self, trigger: str, state: GameState) -> List[GameEvent]:
        """
        Candidates for `trigger` that pass the eligibility predicate. A candidate
        whose conditions raise is treated as ineligible and noted in `skipped`.
        """
        eligible = []
        self.skipped = []
        for event in self.registry.candidates_for_trigger(trigger):
            try:
                if is_eligible(event, trigger, state, self._fired):
                    eligible.append(event)
            except Exception as e:
                logger.warning("Skipping event '%s' on trigger '%s': condition failed: %s", event.id, trigger, e)
                self.skipped.append((event.id, f"{type(e).__name__}: {e}"))
        return eligible

    def select(self, trigger: str, state: GameState) -> Optional[GameEvent]:
        eligible = self.eligible_events(trigger, state)
        if not eligible:
            logger.debug("No eligible event for trigger '%s'", trigger)
            return None
        chosen = self.strategy.choose(eligible, self.rng)
        if chosen is not None:
            logger.debug("Trigger '%s' selected '%s' out of %d candidates", trigger, chosen.id, len(eligible))
        return chosen

    def trigger(self, trigger: str, state: GameState) -> Optional[GameEvent]:
        """
        Selects and fires one event for `trigger`. Returns the fired event, or
        None if nothing was eligible.

        Raises ActionExecutionError if one of the event's actions fails. The
        event is recorded as fired regardless, so a broken action is not
        retried on every later occasion.
        """
        event = self.select(trigger, state)
        if event is None:
            return None
        self.fire(event, state)
        return event

    def fire(self, event: GameEvent, state: GameState):
        try:
            execute_actions(event.id, event.actions, state)
        finally:
            self._fired.add(event.id)
