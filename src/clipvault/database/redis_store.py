"""
Redis history store for clipvault.

Data Structure:
- <prefix>:seq -> last issued entry id (string, INCR)
- <prefix>:entry:<id> -> entry fields (hash)
- <prefix>:index -> zero-padded entry ids scored by timestamp in microseconds (sorted set);
  equal scores fall back to member order, i.e. newest id first under ZREVRANGE
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import redis

from clipvault.config import RedisConfig
from clipvault.database.base import (
    DEFAULT_HISTORY_LIMIT,
    ClipboardStore,
    StorageError,
    now_timestamp,
)
from clipvault.models.clipboard_entry import ClipboardEntry, ContentType

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_str(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _index_member(entry_id) -> str:
    return f"{int(entry_id):020d}"


def _index_score(timestamp: str) -> int:
    moment = datetime.fromisoformat(timestamp)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    # Integer microseconds stay exact as a Redis score (below 2**53).
    return (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds


class RedisStore(ClipboardStore):

    def __init__(self, client: "redis.Redis", prefix: str = "clipboard_history") -> None:
        self.client = client
        self.prefix = prefix
        self._test_connection()

    @classmethod
    def from_config(cls, config: RedisConfig, prefix: str = "clipboard_history") -> "RedisStore":
        client = redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            password=config.password,
            ssl=config.ssl,
            decode_responses=config.decode_responses,
        )
        return cls(client, prefix=prefix)

    def _test_connection(self) -> None:
        try:
            self.client.ping()
        except redis.RedisError as exc:
            raise StorageError(f"Failed to connect to Redis: {exc}") from exc
        logger.info("Redis history store connected (prefix=%s)", self.prefix)

    @property
    def _seq_key(self) -> str:
        return f"{self.prefix}:seq"

    @property
    def _index_key(self) -> str:
        return f"{self.prefix}:index"

    def _entry_key(self, entry_id) -> str:
        return f"{self.prefix}:entry:{int(_to_str(entry_id))}"

    def insert_if_not_duplicate(
        self,
        content: str,
        content_type: ContentType,
        timestamp: Optional[str] = None,
    ) -> Optional[int]:
        timestamp = timestamp or now_timestamp()
        score = _index_score(timestamp)

        def _insert(pipe) -> Optional[int]:
            # Runs under WATCH on the index; a concurrent insert forces a retry.
            latest = pipe.zrevrange(self._index_key, 0, 0)
            if latest:
                last_content = pipe.hget(self._entry_key(latest[0]), "content")
                if last_content is not None and _to_str(last_content) == content:
                    logger.debug("Skipping duplicate of latest entry")
                    return None

            entry_id = int(pipe.incr(self._seq_key))
            pipe.multi()
            pipe.hset(self._entry_key(entry_id), mapping={
                "id": entry_id,
                "content": content,
                "timestamp": timestamp,
                "content_type": ContentType(content_type).value,
            })
            pipe.zadd(self._index_key, {_index_member(entry_id): score})
            return entry_id

        try:
            return self.client.transaction(
                _insert, self._index_key, value_from_callable=True)
        except redis.RedisError as exc:
            raise StorageError(str(exc)) from exc

    def most_recent_content(self) -> Optional[str]:
        try:
            latest = self.client.zrevrange(self._index_key, 0, 0)
            if not latest:
                return None
            content = self.client.hget(self._entry_key(latest[0]), "content")
        except redis.RedisError as exc:
            raise StorageError(str(exc)) from exc
        return _to_str(content) if content is not None else None

    def list_recent(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ClipboardEntry]:
        if limit <= 0:
            return []

        try:
            entry_ids = self.client.zrevrange(self._index_key, 0, limit - 1)
            pipe = self.client.pipeline(transaction=False)
            for entry_id in entry_ids:
                pipe.hgetall(self._entry_key(entry_id))
            records = pipe.execute() if entry_ids else []
        except redis.RedisError as exc:
            raise StorageError(str(exc)) from exc

        entries = []
        for record in records:
            if not record:
                continue
            data = {_to_str(key): _to_str(value) for key, value in record.items()}
            entries.append(ClipboardEntry(
                id=int(data["id"]),
                content=data.get("content", ""),
                timestamp=data.get("timestamp") or now_timestamp(),
                content_type=data.get("content_type") or ContentType.TEXT,
            ))
        return entries

    def delete_by_id(self, entry_id: int) -> bool:
        try:
            pipe = self.client.pipeline()
            pipe.delete(self._entry_key(entry_id))
            pipe.zrem(self._index_key, _index_member(entry_id))
            pipe.execute()
        except redis.RedisError as exc:
            raise StorageError(str(exc)) from exc
        return True

    def delete_all(self) -> bool:
        # The id counter is kept so ids stay monotonic across clears.
        try:
            entry_ids = self.client.zrange(self._index_key, 0, -1)
            pipe = self.client.pipeline()
            for entry_id in entry_ids:
                pipe.delete(self._entry_key(entry_id))
            pipe.delete(self._index_key)
            pipe.execute()
        except redis.RedisError as exc:
            raise StorageError(str(exc)) from exc
        return True

    def close(self) -> None:
        self.client.close()
