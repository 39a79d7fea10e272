"""
Storage package for clipvault.

Provides the history store interface and its SQLite and Redis backends.
"""

from clipvault.config import PipelineConfig
from clipvault.database.base import ClipboardStore, StorageError, now_timestamp
from clipvault.database.sqlite_store import SQLiteStore


def create_store(config: PipelineConfig) -> ClipboardStore:
    """Open the history store selected by ``config.storage``."""
    if config.storage == "redis":
        from clipvault.database.redis_store import RedisStore
        return RedisStore.from_config(config.redis)
    return SQLiteStore(config.db_path)


__all__ = [
    'ClipboardStore',
    'SQLiteStore',
    'StorageError',
    'create_store',
    'now_timestamp',
]
