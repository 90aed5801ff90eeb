"""
State Store - In-Memory Key/Value Record

🧠 Test configuration and hook log:
Hook callbacks read feature flags from the state store and write what they
observed back into it. Tests seed flags before exercising the harness and
assert on recorded keys afterwards. One store belongs to one module
context, so tests never share it.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
import copy
import logging

logger = logging.getLogger(__name__)


@dataclass
class StateEntry:
    """Value stored in the state record with write metadata"""
    value: Any
    updated_at: datetime = field(default_factory=datetime.now)
    write_count: int = 1


class StateStore:
    """
    Flat key/value store standing in for persistent test configuration.

    Values are deep-copied on the way in and out so that callers mutating a
    returned structure do not silently change the stored one; a callback
    must call ``set`` to persist a change.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._entries: Dict[str, StateEntry] = {}
        if initial:
            self.set_multiple(initial)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or ``default`` when the key is absent"""
        entry = self._entries.get(key)
        if entry is None:
            return default
        return copy.deepcopy(entry.value)

    def get_multiple(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Get the values of every present key"""
        return {key: self.get(key) for key in keys if key in self._entries}

    def set(self, key: str, value: Any):
        """Store a value"""
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = StateEntry(value=copy.deepcopy(value))
        else:
            entry.value = copy.deepcopy(value)
            entry.updated_at = datetime.now()
            entry.write_count += 1
        logger.debug(f"State set: {key}")

    def set_multiple(self, data: Dict[str, Any]):
        """Store several values"""
        for key, value in data.items():
            self.set(key, value)

    def delete(self, key: str) -> bool:
        """Delete a key, returning whether it existed"""
        if key in self._entries:
            del self._entries[key]
            logger.debug(f"State deleted: {key}")
            return True
        return False

    def delete_multiple(self, keys: Iterable[str]):
        """Delete several keys"""
        for key in keys:
            self.delete(key)

    def has(self, key: str) -> bool:
        """Check whether a key is present"""
        return key in self._entries

    def write_count(self, key: str) -> int:
        """Number of times a key has been written since it was created"""
        entry = self._entries.get(key)
        return entry.write_count if entry else 0

    def keys(self) -> List[str]:
        return list(self._entries)

    def reset(self):
        """Clear all state, as the test harness does between runs"""
        self._entries.clear()
        logger.debug("State reset")

    def to_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self._entries}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


# Export main components
__all__ = ["StateEntry", "StateStore"]
