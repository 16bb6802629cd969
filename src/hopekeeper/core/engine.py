from __future__ import annotations
import dataclasses
import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from .errors import ActionExecutionError
from .log import AuditLog
from ..events.model import GameEvent
from ..events.scheduler import EventScheduler, execute_actions
from ..state.game_state import GameState
from ..state.prompts import ChoicePrompt, MessagePrompt
from ..ui.display import AutoDisplay, ExclusiveDisplay, GameDisplay

logger = logging.getLogger(__name__)

YEAR_VAR = "year"
MONTH_VAR = "month"
MAX_YEAR = 1_000_000

GAME_START = "gameStart"
YEAR_START = "yearStart"
MONTH_START = "monthStart"


@dataclass
class TurnReport:
    turn: int
    log: AuditLog


class GameEngine:
    """
    Drives the calendar and hands every trigger occasion to the scheduler.

    Dispatch is synchronous; the engine only suspends while the display waits
    for the player. Action faults are logged and audited, never propagated,
    so one broken event does not stop the game.
    """

    def __init__(
        self,
        state: GameState,
        scheduler: EventScheduler,
        display: Optional[GameDisplay] = None,
        months_per_year: int = 12,
    ):
        self.state = state
        self.scheduler = scheduler
        self.display = ExclusiveDisplay(display or AutoDisplay())
        self.months_per_year = months_per_year
        self.turn = 0
        self.log = AuditLog()
        if not state.has_var(YEAR_VAR):
            state.define_var(YEAR_VAR, 1, 1, MAX_YEAR)
        if not state.has_var(MONTH_VAR):
            state.define_var(MONTH_VAR, 1, 1, months_per_year)

    @property
    def year(self) -> int:
        return int(self.state.get_var(YEAR_VAR))

    @property
    def month(self) -> int:
        return int(self.state.get_var(MONTH_VAR))

    def dispatch(self, trigger: str) -> Optional[GameEvent]:
        """Fires at most one event for `trigger`. Queued prompts are left for flush_prompts."""
        queued = len(self.state.prompts)
        try:
            event = self.scheduler.trigger(trigger, self.state)
        except ActionExecutionError as e:
            self._audit_skipped(trigger)
            logger.warning("Recovered from failing event '%s' on trigger '%s': %s", e.event_id, trigger, e)
            self._tag_prompts(queued, e.event_id)
            self.log.add_entry(
                "event.failed",
                self.turn,
                event_id=e.event_id,
                trigger=trigger,
                reason=str(e),
                details={"action_index": e.action_index},
            )
            return None

        self._audit_skipped(trigger)
        if event is None:
            self.log.add_entry("trigger.idle", self.turn, trigger=trigger, reason=f"No event for '{trigger}'.")
            return None

        self._tag_prompts(queued, event.id)
        self.log.add_entry(
            "event.fired",
            self.turn,
            event_id=event.id,
            trigger=trigger,
            reason=f"Event '{event.id}' fired on '{trigger}'.",
            details={"actions": [action.kind for action in event.actions]},
        )
        return event

    def _audit_skipped(self, trigger: str):
        for event_id, error in self.scheduler.skipped:
            self.log.add_entry(
                "event.skipped",
                self.turn,
                event_id=event_id,
                trigger=trigger,
                reason=f"Conditions of '{event_id}' failed: {error}",
            )

    def _tag_prompts(self, start: int, event_id: str):
        prompts = list(self.state.prompts)
        for i in range(start, len(prompts)):
            if prompts[i].event_id is None:
                prompts[i] = dataclasses.replace(prompts[i], event_id=event_id)
        self.state.prompts.clear()
        self.state.prompts.extend(prompts)

    async def flush_prompts(self):
        """
        Shows queued prompts one at a time, running chosen options as they
        resolve. Prompts posted by a chosen option come right after the choice,
        ahead of whatever the event had queued behind it.
        """
        pending = deque(self.state.take_prompts())
        try:
            while pending:
                prompt = pending.popleft()
                if isinstance(prompt, MessagePrompt):
                    await self.display.display_message(prompt.text, prompt.confirm, prompt.icon)
                elif isinstance(prompt, ChoicePrompt):
                    await self._resolve_choice(prompt)
                    pending.extendleft(reversed(self.state.take_prompts()))
        finally:
            # anything not shown yet goes back to the state
            self.state.prompts.extendleft(reversed(pending))

    async def _resolve_choice(self, prompt: ChoicePrompt):
        choices = [(option.label, option.id) for option in prompt.options]
        choice_id = await self.display.display_choices(prompt.text, choices, prompt.icon)
        option = prompt.option(choice_id)
        event_id = prompt.event_id or "<choice>"
        self.log.add_entry(
            "choice.resolved",
            self.turn,
            event_id=prompt.event_id,
            reason=f"Chose '{option.label}'.",
            details={"choice_id": option.id},
        )
        queued = len(self.state.prompts)
        try:
            execute_actions(event_id, option.actions, self.state)
        except ActionExecutionError as e:
            logger.warning("Recovered from failing choice %d of event '%s': %s", option.id, event_id, e)
            self.log.add_entry(
                "event.failed",
                self.turn,
                event_id=prompt.event_id,
                reason=str(e),
                details={"action_index": e.action_index, "choice_id": option.id},
            )
        self._tag_prompts(queued, event_id)

    async def run_trigger(self, trigger: str) -> Optional[GameEvent]:
        event = self.dispatch(trigger)
        await self.flush_prompts()
        return event

    async def start(self) -> TurnReport:
        """Opens the first month of a run."""
        self.log = AuditLog()
        await self.run_trigger(GAME_START)
        await self.run_trigger(YEAR_START)
        await self.run_trigger(MONTH_START)
        return TurnReport(turn=self.turn, log=self.log)

    async def advance_month(self) -> TurnReport:
        """Moves the calendar one month ahead and plays out its triggers."""
        self.turn += 1
        self.log = AuditLog()
        month = self.month + 1
        if month > self.months_per_year:
            self.state.set_var(MONTH_VAR, 1)
            self.state.change_var(YEAR_VAR, 1)
            await self.run_trigger(YEAR_START)
        else:
            self.state.set_var(MONTH_VAR, month)
        await self.run_trigger(MONTH_START)
        return TurnReport(turn=self.turn, log=self.log)

    def reset(self):
        """Starts a fresh run: state back to initial values, firing history forgotten."""
        self.state.reset()
        self.scheduler.reset()
        self.turn = 0
        self.log = AuditLog()
