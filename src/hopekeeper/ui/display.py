from __future__ import annotations
import asyncio
from typing import Callable, Optional, Protocol, Sequence, Tuple

from ..core.errors import DisplayBusyError

Choice = Tuple[str, int]


class GameDisplay(Protocol):
    async def display_message(self, text: str, confirm: str, icon: Optional[str] = None) -> None:
        """Shows a message and returns once the player acknowledges it."""
        ...

    async def display_choices(self, text: str, choices: Sequence[Choice], icon: Optional[str] = None) -> int:
        """Shows a message with (label, id) choices and returns the chosen id."""
        ...


class ExclusiveDisplay:
    """
    Wraps a display so that at most one request is outstanding. A request
    issued while another is pending raises DisplayBusyError.
    """

    def __init__(self, inner: GameDisplay):
        self._inner = inner
        self._pending = False

    @property
    def busy(self) -> bool:
        return self._pending

    def _claim(self):
        if self._pending:
            raise DisplayBusyError("A display request is already waiting for the player.")
        self._pending = True

    async def display_message(self, text: str, confirm: str, icon: Optional[str] = None) -> None:
        self._claim()
        try:
            await self._inner.display_message(text, confirm, icon)
        finally:
            self._pending = False

    async def display_choices(self, text: str, choices: Sequence[Choice], icon: Optional[str] = None) -> int:
        if not choices:
            raise ValueError("display_choices needs at least one choice.")
        self._claim()
        try:
            choice_id = await self._inner.display_choices(text, choices, icon)
        finally:
            self._pending = False
        if choice_id not in {cid for _, cid in choices}:
            raise ValueError(f"Display returned unknown choice id {choice_id!r}.")
        return choice_id


class ConsoleDisplay:
    """Plain terminal display. Blocking input runs off the event loop thread."""

    def __init__(self, input_fn: Callable[[str], str] = input, print_fn: Callable[..., None] = print):
        self._input = input_fn
        self._print = print_fn

    def _show(self, text: str, icon: Optional[str]):
        self._print()
        self._print(text)
        if icon:
            self._print(f"[{icon}]")

    async def display_message(self, text: str, confirm: str, icon: Optional[str] = None) -> None:
        self._show(text, icon)
        await asyncio.to_thread(self._input, f"({confirm}) ")

    async def display_choices(self, text: str, choices: Sequence[Choice], icon: Optional[str] = None) -> int:
        self._show(text, icon)
        for i, (label, _) in enumerate(choices, 1):
            self._print(f" {i}) {label}")
        while True:
            answer = await asyncio.to_thread(self._input, "> ")
            try:
                selected = int(answer)
            except ValueError:
                continue
            if 1 <= selected <= len(choices):
                return choices[selected - 1][1]


class AutoDisplay:
    """Acknowledges every message and always takes the first choice. Used for unattended runs."""

    def __init__(self, print_fn: Optional[Callable[..., None]] = None):
        self._print = print_fn

    async def display_message(self, text: str, confirm: str, icon: Optional[str] = None) -> None:
        if self._print:
            self._print(text)

    async def display_choices(self, text: str, choices: Sequence[Choice], icon: Optional[str] = None) -> int:
        if self._print:
            self._print(f"{text} -> {choices[0][0]}")
        return choices[0][1]
