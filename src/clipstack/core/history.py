"""
In-memory clipboard history.

Owns the ordered collection of entries and keeps it in shape after every
mutation:

- pinned entries come before unpinned ones;
- each partition is ordered by ``captured_at``, newest first, with ties kept
  in their previous relative order;
- at most ``history_limit`` unpinned entries are kept (pinned are exempt);
- no two unpinned entries are duplicates;
- ids are unique.

Nothing here performs I/O or locking; see ``services.history_service`` for
the thread-safe, persisting wrapper.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Union

from clipstack.models.entry import ClipboardEntry, entry_id_of

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

LimitSource = Union[int, Callable[[], int]]
EntryRef = Union[ClipboardEntry, str]


def sort_by_pinned_and_date(entries: List[ClipboardEntry]) -> List[ClipboardEntry]:
    """Stable sort: pinned first, then most recent first within each group."""
    ordered = sorted(entries, key=lambda e: e.captured_at, reverse=True)
    ordered.sort(key=lambda e: not e.is_pinned)
    return ordered


class ClipboardHistory:

    def __init__(
        self,
        entries: Optional[Iterable[ClipboardEntry]] = None,
        history_limit: LimitSource = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._limit_source = history_limit
        self._entries: List[ClipboardEntry] = []
        self.last_inserted_id: Optional[str] = None
        self.pinned_scroll_target_id: Optional[str] = None

        if entries:
            self._entries = self._restore(entries)

    # ── Reads ────────────────────────────────────────────────

    @property
    def history_limit(self) -> int:
        source = self._limit_source
        limit = source() if callable(source) else source
        return max(int(limit), 0)

    @property
    def entries(self) -> List[ClipboardEntry]:
        return list(self._entries)

    @property
    def pinned(self) -> List[ClipboardEntry]:
        return [e for e in self._entries if e.is_pinned]

    @property
    def unpinned(self) -> List[ClipboardEntry]:
        return [e for e in self._entries if not e.is_pinned]

    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ClipboardEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_or_id: object) -> bool:
        if not isinstance(entry_or_id, (ClipboardEntry, str)):
            return False
        return self.get(entry_id_of(entry_or_id)) is not None

    # ── Mutations ────────────────────────────────────────────

    def add_item(self, entry: ClipboardEntry) -> bool:
        """Insert a freshly captured entry at the top.

        Re-copying the content of the current most recent unpinned entry is
        a no-op. Otherwise an older unpinned duplicate is dropped so the
        content moves to the front. Returns whether anything changed.
        """
        if self._entries:
            first = self._entries[0]
            if not first.is_pinned and entry.is_duplicate(first):
                logger.debug(f"Ignoring re-copy of {first.id}")
                return False

        if self.get(entry.id) is not None:
            logger.warning(f"Entry id {entry.id} already in history; ignoring")
            return False

        for index, existing in enumerate(self._entries):
            if not existing.is_pinned and existing.is_duplicate(entry):
                del self._entries[index]
                self._forget_hints({existing.id})
                break

        self._entries.insert(0, entry)
        self.last_inserted_id = entry.id
        self._entries = sort_by_pinned_and_date(self._entries)
        self._trim()
        return True

    def toggle_pin(self, entry_or_id: EntryRef) -> bool:
        entry = self.get(entry_id_of(entry_or_id))
        if entry is None:
            logger.debug(f"toggle_pin: {entry_id_of(entry_or_id)} not in history")
            return False

        entry.is_pinned = not entry.is_pinned
        self._entries = sort_by_pinned_and_date(self._entries)
        self.pinned_scroll_target_id = entry.id
        # unpinning may leave an unpinned duplicate or one entry too many
        self._collapse_duplicates()
        self._trim()
        return True

    def delete(self, entry_or_id: EntryRef) -> bool:
        entry_id = entry_id_of(entry_or_id)
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False

        self._entries = remaining
        self._forget_hints({entry_id})
        return True

    def clear_history(self) -> bool:
        changed = bool(self._entries)
        self._entries = []
        self.last_inserted_id = None
        self.pinned_scroll_target_id = None
        return changed

    # ── Internals ────────────────────────────────────────────

    def _trim(self) -> None:
        pinned = [e for e in self._entries if e.is_pinned]
        unpinned = [e for e in self._entries if not e.is_pinned]
        limit = self.history_limit
        evicted = unpinned[limit:]
        if not evicted:
            return

        self._entries = pinned + unpinned[:limit]
        self._forget_hints({e.id for e in evicted})
        logger.debug(f"Evicted {len(evicted)} entries over limit {limit}")

    def _collapse_duplicates(self) -> None:
        kept: List[ClipboardEntry] = []
        dropped = set()
        for entry in self._entries:
            if not entry.is_pinned and any(
                not k.is_pinned and k.is_duplicate(entry) for k in kept
            ):
                dropped.add(entry.id)
                continue
            kept.append(entry)

        if dropped:
            self._entries = kept
            self._forget_hints(dropped)

    def _forget_hints(self, entry_ids: set) -> None:
        if self.last_inserted_id in entry_ids:
            self.last_inserted_id = None
        if self.pinned_scroll_target_id in entry_ids:
            self.pinned_scroll_target_id = None

    def _restore(self, entries: Iterable[ClipboardEntry]) -> List[ClipboardEntry]:
        seen = set()
        unique: List[ClipboardEntry] = []
        for entry in entries:
            if entry.id in seen:
                logger.warning(f"Dropping restored entry with duplicate id {entry.id}")
                continue
            seen.add(entry.id)
            unique.append(entry)

        self._entries = sort_by_pinned_and_date(unique)
        self._collapse_duplicates()
        self._trim()
        return self._entries
