from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Mapping, Optional, Tuple

from ..core.errors import DescriptorError
from ..state.prompts import ChoiceOption, ChoicePrompt, MessagePrompt
from .factory import DescriptorFactory, check, optional, optional_count, require, require_number

if TYPE_CHECKING:
    from ..state.game_state import GameState


class Action:
    """A unit of side effects applied to the game state."""
    kind: ClassVar[str]

    def execute(self, state: GameState) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class NoopAction(Action):
    kind: ClassVar[str] = "noop"

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "NoopAction":
        return cls()

    def execute(self, state: GameState) -> None:
        pass


@dataclass(frozen=True)
class SetVarAction(Action):
    kind: ClassVar[str] = "set_var"
    var: str
    value: float

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "SetVarAction":
        return cls(var=require(obj, "var", str), value=require_number(obj, "value"))

    def execute(self, state: GameState) -> None:
        state.set_var(self.var, self.value)


@dataclass(frozen=True)
class ChangeVarAction(Action):
    kind: ClassVar[str] = "change_var"
    var: str
    delta: float

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "ChangeVarAction":
        return cls(var=require(obj, "var", str), delta=require_number(obj, "delta"))

    def execute(self, state: GameState) -> None:
        state.change_var(self.var, self.delta)


@dataclass(frozen=True)
class GiveItemAction(Action):
    kind: ClassVar[str] = "give_item"
    item: str
    count: int = 1

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "GiveItemAction":
        return cls(item=require(obj, "item", str), count=optional_count(obj))

    def execute(self, state: GameState) -> None:
        state.player_inventory.add(state.item_registry.get(self.item), self.count)


@dataclass(frozen=True)
class TakeItemAction(Action):
    kind: ClassVar[str] = "take_item"
    item: str
    count: int = 1

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "TakeItemAction":
        return cls(item=require(obj, "item", str), count=optional_count(obj))

    def execute(self, state: GameState) -> None:
        state.player_inventory.remove(self.item, self.count)


@dataclass(frozen=True)
class AddStatusAction(Action):
    kind: ClassVar[str] = "add_status"
    status: str

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "AddStatusAction":
        return cls(status=require(obj, "status", str))

    def execute(self, state: GameState) -> None:
        state.player_status.add(state.status_registry.get(self.status))


@dataclass(frozen=True)
class RemoveStatusAction(Action):
    kind: ClassVar[str] = "remove_status"
    status: str

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "RemoveStatusAction":
        return cls(status=require(obj, "status", str))

    def execute(self, state: GameState) -> None:
        state.player_status.remove(self.status)


@dataclass(frozen=True)
class MessageAction(Action):
    kind: ClassVar[str] = "message"
    text: str
    confirm: str = "message.ok"
    icon: Optional[str] = None

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "MessageAction":
        return cls(
            text=require(obj, "text", str),
            confirm=optional(obj, "confirm", str, "message.ok"),
            icon=optional(obj, "icon", str),
        )

    def execute(self, state: GameState) -> None:
        state.post(MessagePrompt(self.text, self.confirm, self.icon))


@dataclass(frozen=True)
class ChoiceAction(Action):
    kind: ClassVar[str] = "choice"
    text: str
    options: Tuple[ChoiceOption, ...]
    icon: Optional[str] = None

    @classmethod
    def from_descriptor(cls, obj: Mapping[str, Any]) -> "ChoiceAction":
        raw_choices = require(obj, "choices", list)
        if not raw_choices:
            raise DescriptorError("'choice' descriptor requires at least one choice.")
        options = []
        seen = set()
        for raw in raw_choices:
            if not isinstance(raw, Mapping):
                raise DescriptorError(f"'choice' option must be a mapping, got {raw!r}.")
            label = require(raw, "label", str)
            choice_id = require(raw, "id", int)
            if choice_id in seen:
                raise DescriptorError(f"'choice' option id {choice_id} is used twice.")
            seen.add(choice_id)
            branch = check(raw, "actions", list) if raw.get("actions") is not None else []
            options.append(ChoiceOption(
                label=label,
                id=choice_id,
                actions=tuple(action_factory.from_descriptor(item) for item in branch),
            ))
        return cls(text=require(obj, "text", str), options=tuple(options), icon=optional(obj, "icon", str))

    def execute(self, state: GameState) -> None:
        state.post(ChoicePrompt(self.text, self.options, self.icon))


class ActionFactory(DescriptorFactory[Action]):
    def __init__(self):
        super().__init__("Action")


BUILTIN_ACTIONS = (
    NoopAction, SetVarAction, ChangeVarAction, GiveItemAction, TakeItemAction,
    AddStatusAction, RemoveStatusAction, MessageAction, ChoiceAction,
)


def register_builtin(factory: ActionFactory):
    for variant in BUILTIN_ACTIONS:
        factory.register(variant.kind, variant.from_descriptor)


# Global factory instance
action_factory = ActionFactory()
register_builtin(action_factory)
