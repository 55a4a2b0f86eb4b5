"""Redis-backed staging and session stores.

Values are stored as pydantic JSON. Staged changes are also indexed in a sorted
set scored by creation time so a host-run sweep can purge old entries.
"""

from datetime import datetime

import redis

from plan_editor.models.changes import Session, StagedChange


def create_redis_client(url: str) -> redis.Redis:
    """Create a Redis client that returns str responses."""
    return redis.Redis.from_url(url, decode_responses=True)


def _as_str(value: str | bytes) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisStagingStore:
    """Redis implementation of StagingStore using GETDEL for atomic confirm."""

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "plan_editor:staged",
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize staging store.

        Args:
            redis_client: Redis client
            key_prefix: Prefix for change keys and the creation-time index
            ttl_seconds: Optional key expiry; None keeps entries until removed
        """
        self._redis = redis_client
        self._prefix = key_prefix
        self._index_key = f"{key_prefix}:index"
        self._ttl_seconds = ttl_seconds

    def _key(self, change_id: str) -> str:
        return f"{self._prefix}:{change_id}"

    def put(self, change: StagedChange) -> None:
        """Stage a change."""
        self._redis.set(self._key(change.change_id), change.model_dump_json(), ex=self._ttl_seconds)
        self._redis.zadd(self._index_key, {change.change_id: change.created_at.timestamp()})

    def get(self, change_id: str) -> StagedChange | None:
        """Get staged change by ID."""
        raw = self._redis.get(self._key(change_id))
        if raw is None:
            return None
        return StagedChange.model_validate_json(raw)

    def pop(self, change_id: str) -> StagedChange | None:
        """Take a staged change out of the store."""
        raw = self._redis.getdel(self._key(change_id))
        self._redis.zrem(self._index_key, change_id)
        if raw is None:
            return None
        return StagedChange.model_validate_json(raw)

    def delete(self, change_id: str) -> None:
        """Discard a staged change."""
        self._redis.delete(self._key(change_id))
        self._redis.zrem(self._index_key, change_id)

    def purge_older_than(self, cutoff: datetime) -> int:
        """Discard changes created before cutoff."""
        expired = [
            _as_str(change_id)
            for change_id in self._redis.zrangebyscore(self._index_key, "-inf", f"({cutoff.timestamp()}")
        ]
        removed = 0
        for change_id in expired:
            removed += self._redis.delete(self._key(change_id))
            self._redis.zrem(self._index_key, change_id)
        return removed


class RedisSessionStore:
    """Redis implementation of SessionStore."""

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "plan_editor:session",
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis = redis_client
        self._prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    def _key(self, plan_id: str) -> str:
        return f"{self._prefix}:{plan_id}"

    def get(self, plan_id: str) -> Session | None:
        """Get session by plan ID."""
        raw = self._redis.get(self._key(plan_id))
        if raw is None:
            return None
        return Session.model_validate_json(raw)

    def put(self, session: Session) -> None:
        """Store a session."""
        self._redis.set(self._key(session.plan_id), session.model_dump_json(), ex=self._ttl_seconds)

    def delete(self, plan_id: str) -> None:
        """Forget a session."""
        self._redis.delete(self._key(plan_id))
