from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import redis
from dotenv import load_dotenv

from clipstack.core.history import DEFAULT_HISTORY_LIMIT
from clipstack.database import (
    HistoryStorage,
    JsonHistoryStorage,
    MemoryHistoryStorage,
    RedisHistoryStorage,
)
from clipstack.database.redis_storage import DEFAULT_PREFIX

STORAGE_BACKENDS = ("json", "redis", "memory")


def _to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def validate_history_limit(limit: int) -> int:
    if limit < 1:
        raise ValueError(f"history limit must be at least 1, got {limit}")
    return limit


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    decode_responses: bool = True
    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(cls) -> "RedisConfig":
        options = {
            "prefix": os.getenv("CLIPSTACK_REDIS_PREFIX") or cls.prefix,
            "decode_responses": _to_bool(os.getenv("REDIS_DECODE_RESPONSES"), default=True),
        }

        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri, **options)

        return cls(
            host=os.getenv("REDIS_HOST", cls.host),
            port=_to_int("REDIS_PORT", os.getenv("REDIS_PORT"), cls.port),
            db=_to_int("REDIS_DB", os.getenv("REDIS_DB"), cls.db),
            password=os.getenv("REDIS_PASSWORD") or None,
            **options,
        )

    @classmethod
    def from_uri(cls, uri: str, **options) -> "RedisConfig":
        """Parse ``redis://[:password@]host[:port][/db]``; ``options`` fill the other fields."""
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        return cls(
            host=parsed.hostname or cls.host,
            port=parsed.port or cls.port,
            db=_to_int("Redis URI database", parsed.path.lstrip("/"), cls.db),
            password=parsed.password or None,
            **options,
        )

    def create_client(self) -> redis.Redis:
        return redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=self.decode_responses,
        )


@dataclass(frozen=True)
class AppConfig:
    history_limit: int = DEFAULT_HISTORY_LIMIT
    storage_backend: str = "json"
    data_dir: Path = field(default_factory=lambda: Path.home() / ".clipstack")
    api_host: str = "127.0.0.1"
    api_port: int = 3001
    redis_config: RedisConfig = field(default_factory=RedisConfig)

    def __post_init__(self) -> None:
        validate_history_limit(self.history_limit)
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"CLIPSTACK_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {self.storage_backend!r}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "AppConfig":
        load_dotenv(dotenv_path=env_path)

        data_dir_raw = os.getenv("CLIPSTACK_DATA_DIR")
        data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else Path.home() / ".clipstack"

        return cls(
            history_limit=_to_int("CLIPSTACK_HISTORY_LIMIT",
                                  os.getenv("CLIPSTACK_HISTORY_LIMIT"), DEFAULT_HISTORY_LIMIT),
            storage_backend=(os.getenv("CLIPSTACK_STORAGE") or "json").strip().lower(),
            data_dir=data_dir,
            api_host=os.getenv("CLIPSTACK_API_HOST", "127.0.0.1"),
            api_port=_to_int("CLIPSTACK_API_PORT", os.getenv("CLIPSTACK_API_PORT"), 3001),
            redis_config=RedisConfig.from_env(),
        )

    def create_storage(self) -> HistoryStorage:
        if self.storage_backend == "redis":
            return RedisHistoryStorage(self.redis_config.create_client(),
                                       prefix=self.redis_config.prefix)
        if self.storage_backend == "memory":
            return MemoryHistoryStorage()
        return JsonHistoryStorage(self.data_dir)


class HistorySettings:
    """Runtime-adjustable settings read by the history on every add."""

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._lock = threading.Lock()
        self._history_limit = validate_history_limit(history_limit)

    @property
    def history_limit(self) -> int:
        with self._lock:
            return self._history_limit

    @history_limit.setter
    def history_limit(self, value: int) -> None:
        validate_history_limit(value)
        with self._lock:
            self._history_limit = value

    def get_history_limit(self) -> int:
        return self.history_limit

    @classmethod
    def from_config(cls, config: AppConfig) -> "HistorySettings":
        return cls(history_limit=config.history_limit)
