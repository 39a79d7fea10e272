from pathlib import Path

import pytest

from clipvault.config import PipelineConfig, RedisConfig

_ENV_NAMES = (
    "CLIPVAULT_POLL_INTERVAL",
    "CLIPVAULT_THROTTLE",
    "CLIPVAULT_RELAY_CAPACITY",
    "CLIPVAULT_RELAY_POLICY",
    "CLIPVAULT_WRITE_WORKERS",
    "CLIPVAULT_HISTORY_LIMIT",
    "CLIPVAULT_STORAGE",
    "CLIPVAULT_DB_PATH",
    "REDIS_URI",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DB",
    "REDIS_PASSWORD",
    "REDIS_SSL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores the variable as unset afterwards,
    # even when a .env file loads it during the test
    for name in _ENV_NAMES:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


def test_defaults(tmp_path):
    config = PipelineConfig.from_env(env_path=tmp_path / "missing.env")

    assert config.poll_interval == 1.0
    assert config.relay_capacity == 10
    assert config.relay_policy == "block"
    assert config.throttle == 0.2
    assert config.write_workers == 1
    assert config.history_limit == 20
    assert config.storage == "sqlite"
    assert config.db_path == Path.home() / ".clipvault" / "clipboard_history.db"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPVAULT_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("CLIPVAULT_RELAY_CAPACITY", "3")
    monkeypatch.setenv("CLIPVAULT_RELAY_POLICY", "DROP")
    monkeypatch.setenv("CLIPVAULT_WRITE_WORKERS", "2")
    monkeypatch.setenv("CLIPVAULT_DB_PATH", str(tmp_path / "h.db"))

    config = PipelineConfig.from_env(env_path=tmp_path / "missing.env")

    assert config.poll_interval == 0.5
    assert config.relay_capacity == 3
    assert config.relay_policy == "drop"
    assert config.write_workers == 2
    assert config.db_path == tmp_path / "h.db"


def test_dotenv_file_is_loaded(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("CLIPVAULT_THROTTLE=0.75\nCLIPVAULT_HISTORY_LIMIT=5\n", encoding="utf-8")

    config = PipelineConfig.from_env(env_path=env_file)

    assert config.throttle == 0.75
    assert config.history_limit == 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"poll_interval": 0},
        {"relay_capacity": 0},
        {"relay_policy": "overwrite"},
        {"throttle": -1},
        {"write_workers": 0},
        {"storage": "mongo"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        PipelineConfig(**overrides)


def test_with_overrides_ignores_none():
    config = PipelineConfig().with_overrides(throttle=None, relay_capacity=4)
    assert config.throttle == 0.2
    assert config.relay_capacity == 4


def test_redis_from_uri():
    config = RedisConfig.from_uri("redis://:secret@cache.local:6380/2")
    assert config == RedisConfig(host="cache.local", port=6380, db=2, password="secret")
    assert config.ssl is False

    with pytest.raises(ValueError):
        RedisConfig.from_uri("http://cache.local")


def test_redis_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("REDIS_HOST", "redis.internal")
    monkeypatch.setenv("REDIS_PORT", "7000")

    config = RedisConfig.from_env(env_path=tmp_path / "missing.env")

    assert config.host == "redis.internal"
    assert config.port == 7000
    assert config.db == 0


def test_rediss_uri_enables_tls():
    config = RedisConfig.from_uri("rediss://cache.example:6380/0")
    assert config.ssl is True
    assert config.host == "cache.example"


def test_redis_ssl_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("REDIS_SSL", "true")
    assert RedisConfig.from_env(env_path=tmp_path / "missing.env").ssl is True
