from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple, Union

if TYPE_CHECKING:
    from ..events.actions import Action


@dataclass(frozen=True)
class MessagePrompt:
    text: str
    confirm: str = "message.ok"
    icon: Optional[str] = None
    event_id: Optional[str] = None


@dataclass(frozen=True)
class ChoiceOption:
    label: str
    id: int
    actions: Tuple["Action", ...] = ()


@dataclass(frozen=True)
class ChoicePrompt:
    text: str
    options: Tuple[ChoiceOption, ...]
    icon: Optional[str] = None
    event_id: Optional[str] = None

    def option(self, choice_id: int) -> ChoiceOption:
        for opt in self.options:
            if opt.id == choice_id:
                return opt
        raise ValueError(f"Choice '{choice_id}' is not one of the offered options.")


Prompt = Union[MessagePrompt, ChoicePrompt]
