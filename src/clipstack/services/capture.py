"""
Adapter for external clipboard pollers.

ClipStack does not watch the system clipboard itself. A platform reader
produces ``(payload, metadata)`` pairs and hands them to
:func:`entry_from_capture`; the resulting entry goes to
``HistoryService.add_item``.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from clipstack.models.entry import (
    ClipboardEntry,
    FileGroupPayload,
    FilePayload,
    ImagePayload,
    PayloadUnion,
    TextPayload,
)

logger = logging.getLogger(__name__)

FILE_TYPES = {"file", "folder"}
FILE_GROUP_TYPES = {"file_group", "fileGroup"}


def payload_from_capture(payload: Union[bytes, str, None], metadata: Dict[str, Any]) -> Optional[PayloadUnion]:
    """Map a platform reader's ``(payload, metadata)`` pair to an entry payload.

    ``metadata["type"]`` selects the kind. Files are referenced by the path
    in the metadata; the bytes a reader may have attached are not kept.
    Returns ``None`` for blank text.
    """
    clip_type = metadata.get("type", "text")

    if clip_type == "text":
        if isinstance(payload, (bytes, bytearray)):
            text = bytes(payload).decode("utf-8", errors="replace")
        else:
            text = payload or ""
        if not text.strip():
            return None
        return TextPayload(text=text)

    if clip_type == "image":
        if isinstance(payload, str):
            raise ValueError("image capture must carry bytes")
        return ImagePayload(data=bytes(payload or b""))

    if clip_type in FILE_TYPES:
        return FilePayload(path=str(metadata.get("path", "")))

    if clip_type in FILE_GROUP_TYPES:
        paths = metadata.get("paths") or []
        return FileGroupPayload(paths=tuple(str(p) for p in paths))

    raise ValueError(f"Unsupported clipboard type: {clip_type!r}")


def entry_from_capture(
    payload: Union[bytes, str, None],
    metadata: Dict[str, Any],
    captured_at: Optional[datetime] = None,
) -> Optional[ClipboardEntry]:
    content = payload_from_capture(payload, metadata)
    if content is None:
        logger.debug("Skipping blank text capture")
        return None

    if captured_at is None:
        return ClipboardEntry(payload=content)
    return ClipboardEntry(payload=content, captured_at=captured_at)
