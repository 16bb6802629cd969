from __future__ import annotations
import math
import random
from typing import Dict, Optional, Protocol, Sequence, Type

from .model import GameEvent


class SelectionStrategy(Protocol):
    def choose(self, candidates: Sequence[GameEvent], rng: random.Random) -> Optional[GameEvent]:
        """Picks one of the eligible candidates, or None to let the occasion pass."""
        ...


def _weight(event: GameEvent) -> float:
    w = event.probability
    if math.isnan(w) or w <= 0:
        return 0.0
    return w


class WeightedSelection:
    """
    Weighted random draw with weight = probability, normalised over the
    candidates. Non-positive weights sit out the draw; if every weight is
    non-positive the pick is uniform.
    """

    def choose(self, candidates: Sequence[GameEvent], rng: random.Random) -> Optional[GameEvent]:
        if not candidates:
            return None
        weighted = [(event, _weight(event)) for event in candidates]
        positive = [(event, w) for event, w in weighted if w > 0]
        if not positive:
            return rng.choice(list(candidates))
        unbounded = [event for event, w in positive if math.isinf(w)]
        if unbounded:
            return rng.choice(unbounded)
        events_only = [event for event, _ in positive]
        weights = [w for _, w in positive]
        if not math.isfinite(math.fsum(weights)):
            # finite weights whose total overflows; the ratios are what matter
            top = max(weights)
            weights = [w / top for w in weights]
        return rng.choices(events_only, weights=weights, k=1)[0]


class UniformSelection:
    def choose(self, candidates: Sequence[GameEvent], rng: random.Random) -> Optional[GameEvent]:
        if not candidates:
            return None
        return rng.choice(list(candidates))


class IndependentChanceSelection:
    """
    Treats probability as a per-event activation chance: every candidate rolls
    once, and one of those that passed is picked uniformly.
    """

    def choose(self, candidates: Sequence[GameEvent], rng: random.Random) -> Optional[GameEvent]:
        passed = [event for event in candidates if rng.random() < _weight(event)]
        if not passed:
            return None
        return rng.choice(passed)


STRATEGIES: Dict[str, Type] = {
    "weighted": WeightedSelection,
    "uniform": UniformSelection,
    "chance": IndependentChanceSelection,
}


def get_strategy(name: str) -> SelectionStrategy:
    if name not in STRATEGIES:
        raise ValueError(f"Unknown selection strategy '{name}'. Expected one of: {', '.join(sorted(STRATEGIES))}.")
    return STRATEGIES[name]()
