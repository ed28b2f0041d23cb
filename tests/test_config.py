from pathlib import Path

import pytest

from clipstack.config import AppConfig, HistorySettings, RedisConfig
from clipstack.database import JsonHistoryStorage, MemoryHistoryStorage, RedisHistoryStorage

ENV_VARS = [
    "CLIPSTACK_HISTORY_LIMIT", "CLIPSTACK_STORAGE", "CLIPSTACK_DATA_DIR",
    "CLIPSTACK_API_HOST", "CLIPSTACK_API_PORT", "CLIPSTACK_REDIS_PREFIX",
    "REDIS_URI", "REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD",
    "REDIS_DECODE_RESPONSES",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # set then delete so monkeypatch also undoes values load_dotenv writes
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def empty_env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("", encoding="utf-8")
    return path


def test_defaults(empty_env_file):
    config = AppConfig.from_env(env_path=empty_env_file)
    assert config.history_limit == 50
    assert config.storage_backend == "json"
    assert config.data_dir == Path.home() / ".clipstack"
    assert config.api_port == 3001
    assert config.redis_config == RedisConfig()


def test_values_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CLIPSTACK_HISTORY_LIMIT=7\n"
        "CLIPSTACK_STORAGE=redis\n"
        f"CLIPSTACK_DATA_DIR={tmp_path / 'store'}\n"
        "REDIS_URI=redis://:secret@cache.local:6380/2\n"
        "CLIPSTACK_REDIS_PREFIX=clips\n",
        encoding="utf-8",
    )
    config = AppConfig.from_env(env_path=env_file)
    assert config.history_limit == 7
    assert config.storage_backend == "redis"
    assert config.data_dir == tmp_path / "store"
    assert config.redis_config == RedisConfig(
        host="cache.local", port=6380, db=2, password="secret", prefix="clips")


@pytest.mark.parametrize("connection", [
    {"REDIS_URI": "redis://cache.local:6380/2"},
    {"REDIS_HOST": "cache.local", "REDIS_PORT": "6380", "REDIS_DB": "2"},
])
def test_redis_options_apply_to_uri_and_host_settings(monkeypatch, connection):
    for name, value in connection.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("REDIS_DECODE_RESPONSES", "false")
    monkeypatch.setenv("CLIPSTACK_REDIS_PREFIX", "clips")

    assert RedisConfig.from_env() == RedisConfig(
        host="cache.local", port=6380, db=2, decode_responses=False, prefix="clips")


def test_redis_uri_without_options_uses_defaults():
    assert RedisConfig.from_uri("rediss://cache.local") == RedisConfig(host="cache.local")
    with pytest.raises(ValueError):
        RedisConfig.from_uri("redis://cache.local/zero")


def test_process_env_wins_over_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CLIPSTACK_HISTORY_LIMIT=7\n", encoding="utf-8")
    monkeypatch.setenv("CLIPSTACK_HISTORY_LIMIT", "12")
    assert AppConfig.from_env(env_path=env_file).history_limit == 12


@pytest.mark.parametrize("name,value", [
    ("CLIPSTACK_HISTORY_LIMIT", "0"),
    ("CLIPSTACK_HISTORY_LIMIT", "many"),
    ("CLIPSTACK_STORAGE", "sqlite"),
    ("REDIS_URI", "http://localhost"),
])
def test_invalid_values_raise(monkeypatch, empty_env_file, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        AppConfig.from_env(env_path=empty_env_file)


def test_create_storage(tmp_path):
    assert isinstance(AppConfig(data_dir=tmp_path).create_storage(), JsonHistoryStorage)
    assert isinstance(AppConfig(storage_backend="memory").create_storage(), MemoryHistoryStorage)

    storage = AppConfig(storage_backend="redis",
                        redis_config=RedisConfig(prefix="p")).create_storage()
    assert isinstance(storage, RedisHistoryStorage)
    assert storage.list_key == "p:history"


def test_history_settings_validates():
    settings = HistorySettings(5)
    settings.history_limit = 9
    assert settings.get_history_limit() == 9
    with pytest.raises(ValueError):
        settings.history_limit = 0
    assert settings.history_limit == 9
