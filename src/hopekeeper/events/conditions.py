from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Mapping, Optional, Tuple

from ..core.errors import DescriptorError
from .factory import DescriptorFactory, optional_count, optional_number, require

if TYPE_CHECKING:
    from ..state.game_state import GameState


class Condition:
    """A side-effect free predicate over the game state."""
    kind: ClassVar[str]

    def evaluate(self, state: GameState) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class VarRangeCondition(Condition):
    kind: ClassVar[str] = "var_range"
    var: str
    min: Optional[float] = None
    max: Optional[float] = None

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "VarRangeCondition":
        low = optional_number(obj, "min")
        high = optional_number(obj, "max")
        if low is not None and high is not None and low > high:
            raise DescriptorError(f"'var_range' descriptor has min {low} greater than max {high}.")
        return cls(var=require(obj, "var", str), min=low, max=high)

    def evaluate(self, state: GameState) -> bool:
        value = state.get_var(self.var)
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class HasItemCondition(Condition):
    kind: ClassVar[str] = "has_item"
    item: str
    count: int = 1

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "HasItemCondition":
        return cls(item=require(obj, "item", str), count=optional_count(obj))

    def evaluate(self, state: GameState) -> bool:
        return state.player_inventory.count(self.item) >= self.count


@dataclass(frozen=True)
class HasStatusCondition(Condition):
    kind: ClassVar[str] = "has_status"
    status: str

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "HasStatusCondition":
        return cls(status=require(obj, "status", str))

    def evaluate(self, state: GameState) -> bool:
        return self.status in state.player_status


@dataclass(frozen=True)
class NotCondition(Condition):
    kind: ClassVar[str] = "not"
    condition: Condition

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "NotCondition":
        inner = require(obj, "condition", Mapping)
        return cls(condition=condition_factory.from_descriptor(inner))

    def evaluate(self, state: GameState) -> bool:
        return not self.condition.evaluate(state)


@dataclass(frozen=True)
class AnyCondition(Condition):
    kind: ClassVar[str] = "any"
    conditions: Tuple[Condition, ...]

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "AnyCondition":
        items = require(obj, "conditions", list)
        if not items:
            raise DescriptorError("'any' descriptor requires at least one condition.")
        return cls(conditions=tuple(condition_factory.from_descriptor(item) for item in items))

    def evaluate(self, state: GameState) -> bool:
        return any(c.evaluate(state) for c in self.conditions)


class ConditionFactory(DescriptorFactory[Condition]):
    def __init__(self):
        super().__init__("Condition")


def register_builtin(factory: ConditionFactory):
    for variant in (VarRangeCondition, HasItemCondition, HasStatusCondition, NotCondition, AnyCondition):
        factory.register(variant.kind, variant.from_descriptor)


# Global factory instance
condition_factory = ConditionFactory()
register_builtin(condition_factory)
