"""Key-value storage scopes backing the ring-buffer sink.

Each store maps a namespace key to a serialized string value. Faults are
raised as ``StorageError``; callers at the sink boundary turn them into
``SinkResult`` failures.
"""

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import redis

from privlog.core.exceptions import StorageError

from .diagnostics import get_logger

if TYPE_CHECKING:
    from .config import LogConfig

logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@runtime_checkable
class KeyValueStore(Protocol):
    """Persisted string values addressed by key."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store; contents vanish with the process."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileKeyValueStore:
    """One file per key inside a directory; writes replace files atomically."""

    def __init__(self, directory: Path | str):
        """Initialize the file store.

        Args:
            directory: Directory holding the key files (created on first write)
        """
        self.directory = Path(directory).expanduser()

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(
                f"Failed to read log store: {e}",
                details={"path": str(path)},
            ) from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(
                f"Failed to write log store: {e}",
                details={"path": str(path)},
            ) from e

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to delete log store: {e}",
                details={"path": str(path)},
            ) from e


class RedisKeyValueStore:
    """Redis-backed scope shared by every process using the same key."""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", client: redis.Redis | None = None):
        self.redis_url = redis_url
        self._client = client

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance, connecting lazily."""
        if self._client is None:
            self._client = redis.Redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    def get(self, key: str) -> str | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise StorageError(f"Redis read failed: {e}", details={"key": key}) from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            raise StorageError(f"Redis write failed: {e}", details={"key": key}) from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            raise StorageError(f"Redis delete failed: {e}", details={"key": key}) from e


def create_store(config: "LogConfig") -> KeyValueStore:
    """Create the store selected by ``config.storage_backend``."""
    from .config import StorageBackend

    if config.storage_backend == StorageBackend.MEMORY:
        return MemoryKeyValueStore()
    if config.storage_backend == StorageBackend.REDIS:
        logger.debug("Using redis log store", key=config.storage_key)
        return RedisKeyValueStore(config.redis_url)
    return FileKeyValueStore(config.storage_path)


__all__ = [
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
]
