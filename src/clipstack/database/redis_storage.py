"""
Redis-backed history storage.

Key layout (``prefix`` defaults to ``clipstack``):

    <prefix>:history              list of entry ids, display order
    <prefix>:entry:<id>           hash {
                                      "id": "i_01J9ZQ...",
                                      "payload": '{"kind": "text", "text": "..."}',
                                      "isPinned": "0" | "1",
                                      "capturedAt": "2025-04-12T12:45:00+00:00"
                                  }

Every save watches the id list and rewrites it and the hashes in a single
MULTI/EXEC transaction, retried when another writer changes the list first.
Hashes of entries that are no longer in the collection are removed.
"""

import json
import logging
from typing import Any, Dict, List, Sequence

import redis
from pydantic import ValidationError

from clipstack.database.base import HistoryStorage
from clipstack.models.entry import ClipboardEntry

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "clipstack"


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisHistoryStorage(HistoryStorage):

    def __init__(self, client: redis.Redis, prefix: str = DEFAULT_PREFIX):
        self.client = client
        self.prefix = prefix

    @property
    def list_key(self) -> str:
        return f"{self.prefix}:history"

    def entry_key(self, entry_id: str) -> str:
        return f"{self.prefix}:entry:{entry_id}"

    def load(self) -> List[ClipboardEntry]:
        try:
            item_ids = [_text(i) for i in self.client.lrange(self.list_key, 0, -1)]
            entries = []
            for item_id in item_ids:
                data = self.client.hgetall(self.entry_key(item_id))
                if not data:
                    logger.warning(f"History lists {item_id} but its hash is missing")
                    continue
                entries.append(self._from_hash(data))
        except (redis.RedisError, KeyError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load history from Redis: {e}")
            return []

        logger.info(f"Loaded {len(entries)} entries from Redis")
        return entries

    def save(self, entries: Sequence[ClipboardEntry]) -> bool:
        new_ids = [e.id for e in entries]

        def rewrite(pipe: redis.client.Pipeline) -> None:
            # runs again from the top if another writer touches the id list first
            old_ids = {_text(i) for i in pipe.lrange(self.list_key, 0, -1)}
            pipe.multi()
            for item_id in old_ids - set(new_ids):
                pipe.delete(self.entry_key(item_id))
            pipe.delete(self.list_key)
            for entry in entries:
                pipe.hset(self.entry_key(entry.id), mapping=self._to_hash(entry))
            if new_ids:
                pipe.rpush(self.list_key, *new_ids)

        try:
            self.client.transaction(rewrite, self.list_key)
            return True
        except redis.RedisError as e:
            logger.error(f"Failed to save history to Redis: {e}")
            return False

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _to_hash(entry: ClipboardEntry) -> Dict[str, str]:
        data = entry.to_dict()
        return {
            "id": data["id"],
            "payload": json.dumps(data["payload"], ensure_ascii=False),
            "isPinned": "1" if entry.is_pinned else "0",
            "capturedAt": data["capturedAt"],
        }

    @staticmethod
    def _from_hash(data: Dict[Any, Any]) -> ClipboardEntry:
        fields: Dict[str, str] = {_text(k): _text(v) for k, v in data.items()}
        return ClipboardEntry.model_validate({
            "id": fields["id"],
            "payload": json.loads(fields["payload"]),
            "isPinned": fields.get("isPinned") == "1",
            "capturedAt": fields["capturedAt"],
        })
