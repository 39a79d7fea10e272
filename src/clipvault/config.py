from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

RELAY_POLICIES = ("block", "drop")
STORAGE_BACKENDS = ("sqlite", "redis")


def _load_env_file(env_path: Optional[Path] = None) -> None:
    path = env_path or Path.cwd() / ".env"
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _default_db_path() -> Path:
    return Path.home() / ".clipvault" / "clipboard_history.db"


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    decode_responses: bool = True

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "RedisConfig":
        _load_env_file(env_path)

        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri)

        host = os.getenv("REDIS_HOST", cls.host)
        port_raw = os.getenv("REDIS_PORT")
        db_raw = os.getenv("REDIS_DB")
        password = os.getenv("REDIS_PASSWORD") or None
        ssl = os.getenv("REDIS_SSL", "").strip().lower() in {"1", "true", "yes", "on"}

        port = int(port_raw) if port_raw else cls.port
        db = int(db_raw) if db_raw else cls.db

        return cls(host=host, port=port, db=db, password=password, ssl=ssl)

    @classmethod
    def from_uri(cls, uri: str) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(
                f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        host = parsed.hostname or cls.host
        port = parsed.port or cls.port
        password = parsed.password or None
        db_fragment = parsed.path.lstrip("/")
        db = int(db_fragment) if db_fragment else cls.db

        return cls(host=host, port=port, db=db, password=password, ssl=parsed.scheme == "rediss")


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for the poll -> relay -> persist pipeline.

    Values come from ``CLIPVAULT_*`` environment variables (optionally
    loaded from a ``.env`` file); anything unset keeps the default below.
    """

    poll_interval: float = 1.0
    relay_capacity: int = 10
    relay_policy: str = "block"
    throttle: float = 0.2
    write_workers: int = 1
    history_limit: int = 20
    storage: str = "sqlite"
    db_path: Path = field(default_factory=_default_db_path)
    redis: RedisConfig = field(default_factory=RedisConfig)

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.relay_capacity < 1:
            raise ValueError("relay_capacity must be at least 1")
        if self.relay_policy not in RELAY_POLICIES:
            raise ValueError(
                f"relay_policy must be one of {RELAY_POLICIES}, got {self.relay_policy!r}")
        if self.throttle < 0:
            raise ValueError("throttle must not be negative")
        if self.write_workers < 1:
            raise ValueError("write_workers must be at least 1")
        if self.history_limit < 0:
            raise ValueError("history_limit must not be negative")
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage must be one of {STORAGE_BACKENDS}, got {self.storage!r}")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "PipelineConfig":
        _load_env_file(env_path)

        values: dict[str, Any] = {}
        float_keys = {"poll_interval": "CLIPVAULT_POLL_INTERVAL", "throttle": "CLIPVAULT_THROTTLE"}
        int_keys = {
            "relay_capacity": "CLIPVAULT_RELAY_CAPACITY",
            "write_workers": "CLIPVAULT_WRITE_WORKERS",
            "history_limit": "CLIPVAULT_HISTORY_LIMIT",
        }

        for attr, env_name in float_keys.items():
            raw = os.getenv(env_name)
            if raw:
                values[attr] = float(raw)
        for attr, env_name in int_keys.items():
            raw = os.getenv(env_name)
            if raw:
                values[attr] = int(raw)

        policy = os.getenv("CLIPVAULT_RELAY_POLICY")
        if policy:
            values["relay_policy"] = policy.strip().lower()
        storage = os.getenv("CLIPVAULT_STORAGE")
        if storage:
            values["storage"] = storage.strip().lower()
        db_path = os.getenv("CLIPVAULT_DB_PATH")
        if db_path:
            values["db_path"] = Path(db_path).expanduser()

        values["redis"] = RedisConfig.from_env(env_path=env_path)

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "PipelineConfig":
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
