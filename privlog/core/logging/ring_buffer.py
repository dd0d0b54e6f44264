"""Bounded, persisted ring buffer of log records awaiting remote delivery."""

import copy
import json
import threading
from collections import deque

from privlog.core.exceptions import PrivlogErrorCode, SinkWriteError, StorageError

from .diagnostics import get_logger
from .records import LogRecord
from .sinks import RemoteTransport, SinkResult
from .storage import KeyValueStore, MemoryKeyValueStore

logger = get_logger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_STORAGE_KEY = "privlog_logs"


class RingBufferSink:
    """Append-only store holding the newest ``capacity`` records.

    Appending to a full buffer evicts the single oldest entry first. The
    whole window is serialized to the key-value store after every append,
    oldest first, so it survives restarts within the same storage scope.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        key: str = DEFAULT_STORAGE_KEY,
        capacity: int = DEFAULT_CAPACITY,
        transport: RemoteTransport | None = None,
    ):
        """Initialize the sink and load any persisted window.

        Args:
            store: Key-value scope; defaults to a process-local store
            key: Namespace key under which the window is stored
            capacity: Maximum number of retained records
            transport: Optional remote delivery hook called after persisting
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.store = store if store is not None else MemoryKeyValueStore()
        self.key = key
        self.capacity = capacity
        self.transport = transport
        self._lock = threading.Lock()
        self._entries: deque[dict] = deque(self._load(), maxlen=capacity)

    def _load(self) -> list[dict]:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning("Log store unreadable, starting empty", key=self.key, error=e.message)
            return []
        if raw is None:
            return []

        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("stored value is not a list")
            for entry in entries:
                LogRecord.from_dict(entry)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "Discarding corrupt log store",
                key=self.key,
                error_code=PrivlogErrorCode.STORAGE_CORRUPT.value,
                error=str(e),
            )
            return []

        # Keep only the newest entries if capacity shrank
        return entries[-self.capacity:]

    def append(self, record: LogRecord) -> SinkResult:
        """Persist ``record``, evicting the oldest entry when full."""
        try:
            # Round-trip so the buffer never shares objects with the caller
            entry = json.loads(json.dumps(record.to_dict(), ensure_ascii=False, default=str))
        except (TypeError, ValueError) as e:
            return SinkResult.failure(
                SinkWriteError(
                    f"Record is not serializable: {e}",
                    error_code=PrivlogErrorCode.SERIALIZATION_FAILED,
                )
            )

        with self._lock:
            previous = list(self._entries)
            self._entries.append(entry)
            try:
                self.store.set(self.key, json.dumps(list(self._entries), ensure_ascii=False))
            except StorageError as e:
                self._entries = deque(previous, maxlen=self.capacity)
                return SinkResult.failure(e)

        if self.transport is not None:
            return self.transport.send(record)
        return SinkResult.success()

    def emit(self, record: LogRecord) -> SinkResult:
        return self.append(record)

    def list_all(self) -> list[LogRecord]:
        """Return the retained records, oldest first."""
        with self._lock:
            entries = copy.deepcopy(list(self._entries))
        return [LogRecord.from_dict(entry) for entry in entries]

    def clear(self) -> SinkResult:
        """Empty the buffer and remove the persisted value."""
        with self._lock:
            try:
                self.store.delete(self.key)
            except StorageError as e:
                return SinkResult.failure(e)
            self._entries.clear()
        return SinkResult.success()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
