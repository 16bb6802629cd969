from __future__ import annotations
from typing import Any, Callable, Dict, Generic, List, Mapping, Tuple, Type, TypeVar, Union

from ..core.errors import DescriptorError

T = TypeVar("T")
Constructor = Callable[[Mapping[str, Any]], T]

DISCRIMINANT = "type"
_NUMBER = (int, float)


class DescriptorFactory(Generic[T]):
    """
    Maps a descriptor's `type` tag to the constructor of one variant.
    Unknown tags are rejected at lookup, there is no fallback variant.
    """

    def __init__(self, capability: str):
        self.capability = capability
        self._constructors: Dict[str, Constructor] = {}

    def register(self, kind: str, constructor: Constructor):
        if kind in self._constructors:
            raise ValueError(f"{self.capability} kind '{kind}' is already registered.")
        self._constructors[kind] = constructor

    def kinds(self) -> List[str]:
        return sorted(self._constructors)

    def from_descriptor(self, obj: Any) -> T:
        if not isinstance(obj, Mapping):
            raise DescriptorError(f"{self.capability} descriptor must be a mapping, got {type(obj).__name__}.")
        kind = obj.get(DISCRIMINANT)
        if kind is None:
            raise DescriptorError(f"{self.capability} descriptor is missing '{DISCRIMINANT}'.")
        constructor = self._constructors.get(kind) if isinstance(kind, str) else None
        if constructor is None:
            raise DescriptorError(f"Unknown {self.capability.lower()} type '{kind}'.")
        return constructor(obj)


def require(obj: Mapping[str, Any], key: str, types: Union[Type, Tuple[Type, ...]]) -> Any:
    """Returns obj[key], raising DescriptorError if it is absent or of the wrong type."""
    if obj.get(key) is None:
        raise DescriptorError(f"'{obj.get(DISCRIMINANT)}' descriptor requires '{key}'.")
    return check(obj, key, types)


def optional(obj: Mapping[str, Any], key: str, types: Union[Type, Tuple[Type, ...]], default: Any = None) -> Any:
    if obj.get(key) is None:
        return default
    return check(obj, key, types)


def check(obj: Mapping[str, Any], key: str, types: Union[Type, Tuple[Type, ...]]) -> Any:
    value = obj[key]
    # bool is an int subclass but never a valid number or count here
    if isinstance(value, bool) or not isinstance(value, types):
        raise DescriptorError(f"'{obj.get(DISCRIMINANT)}' descriptor field '{key}' has invalid value {value!r}.")
    return value


def require_number(obj: Mapping[str, Any], key: str) -> float:
    return require(obj, key, _NUMBER)


def optional_number(obj: Mapping[str, Any], key: str, default: Any = None) -> Any:
    return optional(obj, key, _NUMBER, default)


def optional_count(obj: Mapping[str, Any], key: str = "count") -> int:
    count = optional(obj, key, int, 1)
    if count < 1:
        raise DescriptorError(f"'{obj.get(DISCRIMINANT)}' descriptor field '{key}' must be at least 1.")
    return count
