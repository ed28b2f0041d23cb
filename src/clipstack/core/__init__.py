"""
In-memory history core.

The ordering, deduplication and retention rules live here, free of any
locking or storage concerns.
"""

from clipstack.core.history import (
    DEFAULT_HISTORY_LIMIT,
    ClipboardHistory,
    sort_by_pinned_and_date,
)

__all__ = [
    'ClipboardHistory',
    'DEFAULT_HISTORY_LIMIT',
    'sort_by_pinned_and_date',
]
