import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from clipstack.core.history import (
    DEFAULT_HISTORY_LIMIT,
    ClipboardHistory,
    EntryRef,
    LimitSource,
)
from clipstack.database.base import HistoryStorage
from clipstack.models.entry import ClipboardEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryHints:
    last_inserted_id: Optional[str]
    pinned_scroll_target_id: Optional[str]


class HistoryService:
    """Thread-safe front for ``ClipboardHistory`` that mirrors it to storage.

    Mutations run under one lock. The resulting collection is copied while
    the lock is held and written to storage after it is released, so slow
    storage never blocks readers. A version counter keeps an older snapshot
    from overwriting a newer one when saves from two threads interleave.
    """

    def __init__(
        self,
        storage: HistoryStorage,
        history_limit: LimitSource = DEFAULT_HISTORY_LIMIT,
        autosave: bool = True,
    ) -> None:
        self.storage = storage
        self.autosave = autosave
        self._lock = threading.RLock()
        self._save_lock = threading.Lock()
        self._version = 0
        self._saved_version = 0
        self._history = ClipboardHistory(self._load(), history_limit=history_limit)

    def _load(self) -> List[ClipboardEntry]:
        try:
            entries = self.storage.load()
        except Exception as e:
            logger.error(f"History load failed, starting empty: {e}")
            return []
        return list(entries or [])

    # ── Reads ────────────────────────────────────────────────

    def entries(self) -> List[ClipboardEntry]:
        with self._lock:
            return self._snapshot()

    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        with self._lock:
            entry = self._history.get(entry_id)
            return entry.model_copy() if entry is not None else None

    def hints(self) -> HistoryHints:
        with self._lock:
            return HistoryHints(
                last_inserted_id=self._history.last_inserted_id,
                pinned_scroll_target_id=self._history.pinned_scroll_target_id,
            )

    @property
    def history_limit(self) -> int:
        with self._lock:
            return self._history.history_limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    # ── Mutations ────────────────────────────────────────────

    def add_item(self, entry: ClipboardEntry) -> bool:
        return self._mutate(lambda: self._history.add_item(entry.model_copy()))

    def toggle_pin(self, entry: EntryRef) -> bool:
        return self._mutate(lambda: self._history.toggle_pin(entry))

    def delete(self, entry: EntryRef) -> bool:
        return self._mutate(lambda: self._history.delete(entry))

    def clear_history(self) -> bool:
        self._mutate(self._history.clear_history, always_persist=True)
        return True

    def flush(self) -> bool:
        with self._lock:
            if self._saved_version >= self._version:
                return True
            version, snapshot = self._version, self._snapshot()
        return self._persist(version, snapshot)

    # ── Internals ────────────────────────────────────────────

    def _mutate(self, operation, always_persist: bool = False) -> bool:
        with self._lock:
            changed = operation()
            if not (changed or always_persist):
                return False
            self._version += 1
            version, snapshot = self._version, self._snapshot()

        if self.autosave:
            self._persist(version, snapshot)
        return changed

    def _snapshot(self) -> List[ClipboardEntry]:
        return [e.model_copy() for e in self._history.entries]

    def _persist(self, version: int, snapshot: List[ClipboardEntry]) -> bool:
        with self._save_lock:
            if version <= self._saved_version:
                return True
            try:
                ok = self.storage.save(snapshot)
            except Exception as e:
                logger.error(f"History save raised: {e}")
                ok = False
            if not ok:
                logger.error(f"History save failed; keeping {len(snapshot)} entries in memory")
                return False
            self._saved_version = version
            return True

    def close(self) -> None:
        self.flush()
        self.storage.close()

    def __enter__(self) -> "HistoryService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
