"""Service layer for ClipStack."""

from .capture import entry_from_capture, payload_from_capture
from .history_service import HistoryHints, HistoryService

__all__ = ["HistoryService", "HistoryHints", "entry_from_capture", "payload_from_capture"]
