"""Session-scoped persistence for flow documents.

Documents are JSON text written through the tagged-envelope codec, one per
domain key, namespaced by browsing session. Loading never raises: missing or
corrupt documents resolve to the caller's default.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

import redis
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.core.codec import Codec, get_codec
from app.core.exceptions import CodecError, ExternalServiceError, InvalidFlowUpdate

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)


class KeyValueBackend(ABC):
    """Minimal string key-value medium the session store writes to."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the text stored under ``key``, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; deleting an absent key is not an error."""
        pass


class MemoryBackend(KeyValueBackend):
    """In-process backend with per-entry expiry.

    Used in tests and local development. Entries vanish after ``ttl``
    like a browser session would. One instance is shared by every request
    thread, so all access to ``_entries`` holds ``_lock``.
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._ttl = timedelta(seconds=ttl_seconds or settings.session_ttl_seconds)

    def _cleanup_expired(self) -> None:
        """Remove expired keys. Caller holds ``_lock``."""
        now = datetime.now(UTC)
        expired = [k for k, v in self._entries.items() if v["expires_at"] < now]
        for k in expired:
            del self._entries[k]

    def get(self, key: str) -> str | None:
        with self._lock:
            self._cleanup_expired()
            entry = self._entries.get(key)
            return entry["value"] if entry else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = {
                "value": value,
                "expires_at": datetime.now(UTC) + self._ttl,
            }

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            self._cleanup_expired()
            return list(self._entries)


class RedisBackend(KeyValueBackend):
    """Redis backend; every write refreshes the session TTL."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        redis_url: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._client = client or redis.Redis.from_url(
            redis_url or settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        self._ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.setex(key, self._ttl_seconds, value)

    def remove(self, key: str) -> None:
        self._client.delete(key)


def build_backend() -> KeyValueBackend:
    """Create the backend selected by settings."""
    if settings.session_store_backend == "redis":
        return RedisBackend()
    return MemoryBackend()


class SessionStore:
    """Read-merge-write document store for one browsing session."""

    def __init__(
        self,
        backend: KeyValueBackend,
        session_id: str,
        codec: Codec | None = None,
    ) -> None:
        self._backend = backend
        self._codec = codec or get_codec()
        self.session_id = session_id

    def _key(self, key: str) -> str:
        return f"session:{self.session_id}:{key}"

    def load(self, key: str, default: StateT) -> StateT:
        """Load the document under ``key``, falling back to ``default``.

        The stored document is merged over ``default`` so fields added since
        it was written still resolve. Absent, unreadable or invalid documents
        return ``default`` unchanged.
        """
        try:
            text = self._backend.get(self._key(key))
        except (redis.RedisError, UnicodeDecodeError) as e:
            logger.error(f"Session store read failed for {key}: {e}")
            return default

        if text is None:
            return default

        try:
            document = self._codec.loads(text)
            if not isinstance(document, dict):
                raise TypeError(f"expected an object, got {type(document).__name__}")
            merged = {**default.model_dump(), **document}
            # The key decides the domain, not the document
            if "domain" in merged:
                merged["domain"] = getattr(default, "domain")
            return type(default).model_validate(merged)
        except (
            json.JSONDecodeError,
            CodecError,
            PydanticValidationError,
            ValueError,
            TypeError,
            RecursionError,
        ) as e:
            logger.warning(
                f"Discarding corrupt session document {key} "
                f"(session {self.session_id}): {e}"
            )
            return default

    def save(self, key: str, partial: dict[str, Any], default: StateT) -> StateT:
        """Merge ``partial`` over the stored document and write it back.

        Raises:
            InvalidFlowUpdate: If the merged document fails validation
            ExternalServiceError: If the backend rejects the write
        """
        current = self.load(key, default)
        merged = {**current.model_dump(), **partial, "updated_at": datetime.now(UTC)}

        try:
            state = type(default).model_validate(merged)
        except PydanticValidationError as e:
            raise InvalidFlowUpdate(
                key,
                "; ".join(error["msg"] for error in e.errors()),
                errors=[{"loc": list(error["loc"]), "msg": error["msg"]} for error in e.errors()],
            ) from e

        text = self._codec.dumps(state.model_dump())
        try:
            self._backend.set(self._key(key), text)
        except redis.RedisError as e:
            raise ExternalServiceError("session-store", str(e)) from e
        return state

    def clear(self, *keys: str) -> None:
        """Remove documents; absent keys are ignored.

        Raises:
            ExternalServiceError: If the backend rejects the delete
        """
        for key in keys:
            try:
                self._backend.remove(self._key(key))
            except redis.RedisError as e:
                raise ExternalServiceError("session-store", str(e)) from e
