from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

from ..core.ids import EventId
from .actions import Action
from .conditions import Condition


@dataclass(frozen=True)
class GameEvent:
    id: EventId
    trigger: str
    # All must hold; empty means always eligible once the trigger matches.
    conditions: Tuple[Condition, ...] = ()
    # Executed in order. The loader never produces an event without actions.
    actions: Tuple[Action, ...] = ()
    # Relative weight among events eligible for the same trigger.
    probability: float = 1.0
    exclusions: FrozenSet[EventId] = field(default_factory=frozenset)
    once: bool = False
    disabled: bool = False
