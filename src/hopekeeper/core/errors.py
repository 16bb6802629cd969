from __future__ import annotations
from typing import Optional


class HopekeeperError(Exception):
    """Base for internal errors."""


class ContentLoadError(HopekeeperError):
    """Raised while turning authored content into events. Aborts the whole load."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def at(self, location: str) -> "ContentLoadError":
        # Locations nest outward: "actions[0]" becomes "events[3].actions[0]".
        if self.location:
            sep = "" if self.location.startswith("[") else "."
            self.location = f"{location}{sep}{self.location}"
        else:
            self.location = location
        return self

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class SchemaError(ContentLoadError):
    """The document is not the expected shape."""


class MissingFieldError(SchemaError):
    def __init__(self, field: str, location: Optional[str] = None):
        super().__init__(f"Missing required field '{field}'.", location)
        self.field = field


class DescriptorError(ContentLoadError):
    """Unknown or malformed condition/action descriptor."""


class SourceUnavailableError(ContentLoadError):
    def __init__(self, source: str, detail: str):
        super().__init__(f"Unable to fetch '{source}': {detail}")
        self.source = source
        self.detail = detail


class FormatError(ContentLoadError):
    """Content text is not valid structured text."""


class ConfigError(HopekeeperError):
    pass


class ActionExecutionError(HopekeeperError):
    def __init__(self, event_id: str, action_index: int, detail: str):
        super().__init__(f"Event '{event_id}' failed at action {action_index}: {detail}")
        self.event_id = event_id
        self.action_index = action_index
        self.detail = detail


class DisplayBusyError(HopekeeperError):
    """A display request was issued while another one is still pending."""
