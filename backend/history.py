import copy
import time
from dataclasses import dataclass, field

from config import HISTORY_LIMIT


@dataclass
class HistoryEntry:
    snapshot: list
    timestamp: float = field(default_factory=time.time)


class HistoryManager:
    """
    Snapshot-based undo/redo.

    Entries are deep copies, so later edits to live state never reach a
    stored snapshot. The pointer marks the entry matching the live state;
    pushing truncates anything after it. At most `limit` entries are kept,
    oldest dropped first.
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        self.limit = max(1, int(limit))
        self._entries: list[HistoryEntry] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, state) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(HistoryEntry(snapshot=copy.deepcopy(state)))
        while len(self._entries) > self.limit:
            self._entries.pop(0)
        self._index = len(self._entries) - 1

    def undo(self):
        """Step back one entry and return a copy of it, or None at the oldest entry."""
        if not self.can_undo:
            return None
        self._index -= 1
        return copy.deepcopy(self._entries[self._index].snapshot)

    def redo(self):
        if not self.can_redo:
            return None
        self._index += 1
        return copy.deepcopy(self._entries[self._index].snapshot)

    def clear(self) -> None:
        self._entries.clear()
        self._index = -1
