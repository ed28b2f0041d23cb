import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from clipstack.database.base import HistoryStorage
from clipstack.models.entry import ClipboardEntry

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = "history.json"


class JsonHistoryStorage(HistoryStorage):
    """History kept as a single JSON document on local disk.

    The document is a list of entries in display order. Saves go through a
    temporary file in the same directory and an atomic rename, so a crash
    mid-write leaves the previous document intact.
    """

    def __init__(self, base_dir: Optional[Path] = None, file_name: str = HISTORY_FILE_NAME):
        if base_dir is None:
            base_dir = Path.home() / ".clipstack"
        self.base_dir = Path(base_dir)
        self.path = self.base_dir / file_name

    def load(self) -> List[ClipboardEntry]:
        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            entries = [ClipboardEntry.from_dict(d) for d in data]
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Failed to load history from {self.path}: {e}")
            return []

        logger.info(f"Loaded {len(entries)} entries from {self.path}")
        return entries

    def save(self, entries: Sequence[ClipboardEntry]) -> bool:
        tmp_name = None
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=".history-", suffix=".tmp", dir=self.base_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump([e.to_dict() for e in entries], handle,
                          ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save history to {self.path}: {e}")
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except OSError:
                    pass
