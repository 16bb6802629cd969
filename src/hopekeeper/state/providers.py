from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Generic, List, Optional, Type, TypeVar
import yaml

from ..core.errors import ConfigError
from ..core.ids import ItemId, StatusId


@dataclass(frozen=True)
class Item:
    id: ItemId
    name: str
    description: str = ""
    icon: Optional[str] = None
    rarity: int = 0 # 3+ uncommon, 6+ rare, 10+ legendary


@dataclass(frozen=True)
class Status:
    id: StatusId
    name: str
    description: str = ""
    icon: Optional[str] = None


P = TypeVar("P", Item, Status)


class ProviderRegistry(Generic[P]):
    """Definitions of effect providers (items, statuses) keyed by id."""

    def __init__(self, kind: Type[P]):
        self._kind = kind
        self._providers: Dict[str, P] = {}

    def load_from_yaml(self, path: Path):
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Unable to read '{path}': {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in '{path}': {e}") from e

        if data is None:
            raise ConfigError(f"YAML file '{path}' is empty or malformed.")
        if not isinstance(data, list):
            raise ConfigError(f"Top level of {path} must be a list of definitions.")

        for p_data in data:
            if not isinstance(p_data, dict):
                raise ConfigError(f"Definition in {path} must be a mapping: {p_data!r}")
            if 'id' not in p_data or 'name' not in p_data:
                raise ConfigError(f"Definition in {path} must have 'id' and 'name': {p_data}")
            if p_data['id'] in self._providers:
                raise ConfigError(f"Duplicate {self._kind.__name__} ID '{p_data['id']}' in {path}.")
            try:
                provider = self._build(p_data)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid definition '{p_data['id']}' in {path}: {e}") from e
            self.add(provider)

    def _build(self, p_data: dict) -> P:
        fields = {
            'id': p_data['id'],
            'name': p_data['name'],
            'description': p_data.get('description', ''),
            'icon': p_data.get('icon'),
        }
        if self._kind is Item:
            fields['rarity'] = int(p_data.get('rarity', 0))
        return self._kind(**fields)

    def add(self, provider: P):
        self._providers[provider.id] = provider

    def get(self, provider_id: str) -> P:
        if provider_id not in self._providers:
            raise ValueError(f"{self._kind.__name__} with ID '{provider_id}' not found.")
        return self._providers[provider_id]

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def all(self) -> List[P]:
        return list(self._providers.values())


class ItemRegistry(ProviderRegistry[Item]):
    def __init__(self):
        super().__init__(Item)


class StatusRegistry(ProviderRegistry[Status]):
    def __init__(self):
        super().__init__(Status)
