from typing import Iterable, List, Optional, Sequence

from clipstack.database.base import HistoryStorage
from clipstack.models.entry import ClipboardEntry


class MemoryHistoryStorage(HistoryStorage):
    """Process-local storage; keeps every saved snapshot for inspection."""

    def __init__(self, entries: Optional[Iterable[ClipboardEntry]] = None):
        self._entries: List[ClipboardEntry] = [e.model_copy() for e in entries or []]
        self.saves: List[List[ClipboardEntry]] = []

    def load(self) -> List[ClipboardEntry]:
        return [e.model_copy() for e in self._entries]

    def save(self, entries: Sequence[ClipboardEntry]) -> bool:
        snapshot = [e.model_copy() for e in entries]
        self._entries = snapshot
        self.saves.append(snapshot)
        return True

    @property
    def last_saved(self) -> Optional[List[ClipboardEntry]]:
        return self.saves[-1] if self.saves else None
