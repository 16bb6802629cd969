from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import httpx
import yaml

from ..core.errors import ContentLoadError, FormatError, MissingFieldError, SchemaError, SourceUnavailableError
from ..core.ids import EventId
from .actions import ActionFactory, action_factory as default_action_factory
from .conditions import ConditionFactory, condition_factory as default_condition_factory
from .model import GameEvent

logger = logging.getLogger(__name__)

Source = Union[str, Path]


def _is_url(source: Source) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


class GameEventLoader:
    """
    Turns an authored content document into validated GameEvents.

    Loading is all-or-nothing: the first malformed record aborts the load and
    no partial event list is ever returned.
    """

    def __init__(
        self,
        condition_factory: Optional[ConditionFactory] = None,
        action_factory: Optional[ActionFactory] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._condition_factory = condition_factory or default_condition_factory
        self._action_factory = action_factory or default_action_factory
        self._client = client
        self.timeout = timeout

    async def load(self, source: Source) -> List[GameEvent]:
        """Fetches `source` (http(s) URL or file path) and parses it."""
        text = await self._fetch(source)
        return self.load_from_text(text, source=str(source))

    def load_from_path(self, path: Source) -> List[GameEvent]:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise SourceUnavailableError(str(path), e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise FormatError(f"'{path}' is not valid UTF-8 text: {e}") from e
        return self.load_from_text(text, source=str(path))

    def load_from_text(self, text: str, source: str = "<text>") -> List[GameEvent]:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise FormatError(f"Malformed content in {source}: {e}") from e
        events = self.parse_events(document)
        logger.info("Loaded %d events from %s", len(events), source)
        return events

    def parse_events(self, document: Any) -> List[GameEvent]:
        if not isinstance(document, list):
            raise SchemaError("expected array of event definitions.")
        events = []
        for index, item in enumerate(document):
            try:
                events.append(self.parse_event(item))
            except ContentLoadError as e:
                raise e.at(f"events[{index}]")
        return events

    def parse_event(self, obj: Any) -> GameEvent:
        if not isinstance(obj, Mapping):
            raise SchemaError(f"Event definition must be a mapping, got {type(obj).__name__}.")

        if obj.get('id') is None:
            raise MissingFieldError('id')
        event_id = EventId(str(obj['id']))

        if obj.get('trigger') is None:
            raise MissingFieldError('trigger')
        trigger = str(obj['trigger'])

        conditions = []
        raw_conditions = obj.get('conditions')
        if isinstance(raw_conditions, list):
            for index, item in enumerate(raw_conditions):
                try:
                    conditions.append(self._condition_factory.from_descriptor(item))
                except ContentLoadError as e:
                    raise e.at(f"conditions[{index}]")

        probability = self._parse_probability(obj.get('probability'))

        raw_exclusions = obj.get('exclusions')
        exclusions = frozenset(EventId(str(x)) for x in raw_exclusions) if isinstance(raw_exclusions, list) else frozenset()

        raw_actions = obj.get('actions')
        if not isinstance(raw_actions, list):
            raise MissingFieldError('actions')
        if not raw_actions:
            raise SchemaError(f"Event '{event_id}' must have at least one action.")
        actions = []
        for index, item in enumerate(raw_actions):
            try:
                actions.append(self._action_factory.from_descriptor(item))
            except ContentLoadError as e:
                raise e.at(f"actions[{index}]")

        return GameEvent(
            id=event_id,
            trigger=trigger,
            conditions=tuple(conditions),
            actions=tuple(actions),
            probability=probability,
            exclusions=exclusions,
            once=bool(obj.get('once')),
            disabled=bool(obj.get('disabled')),
        )

    @staticmethod
    def _parse_probability(value: Any) -> float:
        if value is None:
            return 1.0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SchemaError(f"'probability' must be a number, got {value!r}.")
        return float(value)

    async def _fetch(self, source: Source) -> str:
        if _is_url(source):
            try:
                if self._client is not None:
                    response = await self._client.get(source)
                else:
                    async with httpx.AsyncClient(timeout=self.timeout) as client:
                        response = await client.get(source)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise SourceUnavailableError(str(source), str(e)) from e
            return response.text

        try:
            return await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
        except OSError as e:
            raise SourceUnavailableError(str(source), e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise FormatError(f"'{source}' is not valid UTF-8 text: {e}") from e
