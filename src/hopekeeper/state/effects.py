from typing import Dict, Generic, List, Tuple, TypeVar

from .notify import ChangeNotifier, CollectionChanged
from .providers import Item, Status

P = TypeVar("P", Item, Status)


class EffectProviderCollection(Generic[P]):
    """
    Holds effect providers (items, statuses) with a count per provider id.
    Every mutation publishes a CollectionChanged on `changed`.
    """

    max_count: int = 0 # 0 means unbounded

    def __init__(self):
        self._entries: Dict[str, Tuple[P, int]] = {}
        self.changed: ChangeNotifier[CollectionChanged] = ChangeNotifier()

    @property
    def items(self) -> Dict[str, Tuple[P, int]]:
        return dict(self._entries)

    def count(self, provider_id: str) -> int:
        """Returns how many of a provider are held, 0 if none."""
        entry = self._entries.get(provider_id)
        return entry[1] if entry else 0

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, provider: P, count: int = 1):
        """Adds `count` of a provider to the collection."""
        if count < 0:
            raise ValueError("Count to add must be non-negative.")
        current = self.count(provider.id)
        new_count = current + count
        if self.max_count:
            new_count = min(new_count, self.max_count)
        if new_count == current:
            return
        self._entries[provider.id] = (provider, new_count)
        self.changed.publish(self, CollectionChanged(provider_id=provider.id, change="add"))

    def remove(self, provider_id: str, count: int = 1) -> int:
        """
        Removes up to `count` of a provider, clamping at zero.
        Returns the actual amount removed.
        """
        if count < 0:
            raise ValueError("Count to remove must be non-negative.")
        current = self.count(provider_id)
        removed = min(count, current)
        if removed == 0:
            return 0
        if current - removed == 0:
            del self._entries[provider_id]
        else:
            provider = self._entries[provider_id][0]
            self._entries[provider_id] = (provider, current - removed)
        self.changed.publish(self, CollectionChanged(provider_id=provider_id, change="remove"))
        return removed

    def clear(self):
        self._entries.clear()
        self.changed.publish(self, CollectionChanged(clear=True))

    def definitions(self) -> List[P]:
        return [provider for provider, _ in self._entries.values()]


class Inventory(EffectProviderCollection[Item]):
    pass


class StatusTable(EffectProviderCollection[Status]):
    # A status is either present or not.
    max_count = 1
