"""Privacy-preserving structured logging.

This module gates, redacts and routes log records to sinks chosen by the
detected runtime environment.
"""

from .config import LogConfig, LogFormat, StorageBackend, configure_logging
from .console import ConsoleSink
from .diagnostics import get_logger
from .dispatcher import (
    SecureLogger,
    build_secure_logger,
    get_secure_logger,
    reset_secure_logger,
)
from .environment import (
    Classification,
    EnvironmentPolicy,
    EnvironmentResolver,
    classify_host,
    policy_for,
)
from .filters import (
    DEFAULT_PATTERNS,
    MASK_TOKEN,
    SENSITIVE_FIELDS,
    RedactionPattern,
    Redactor,
    create_redactor,
    sanitize,
)
from .levels import Severity, should_emit
from .records import LogRecord
from .ring_buffer import RingBufferSink
from .sinks import LogSink, NullTransport, RemoteTransport, SinkResult
from .storage import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    create_store,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "LogConfig",
    "LogFormat",
    "StorageBackend",
    "ConsoleSink",
    "SecureLogger",
    "build_secure_logger",
    "get_secure_logger",
    "reset_secure_logger",
    "Classification",
    "EnvironmentPolicy",
    "EnvironmentResolver",
    "classify_host",
    "policy_for",
    "DEFAULT_PATTERNS",
    "MASK_TOKEN",
    "SENSITIVE_FIELDS",
    "RedactionPattern",
    "Redactor",
    "create_redactor",
    "sanitize",
    "Severity",
    "should_emit",
    "LogRecord",
    "RingBufferSink",
    "LogSink",
    "NullTransport",
    "RemoteTransport",
    "SinkResult",
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
]
