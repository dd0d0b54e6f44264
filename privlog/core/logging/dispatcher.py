"""Secure log dispatcher.

The dispatcher gates each call on the resolved policy, redacts the message
and data, builds an immutable ``LogRecord`` and fans it out to the enabled
sinks. It never raises into the caller: sink failures come back as
``SinkResult`` values which are reported once to the console sink (when
enabled) and otherwise dropped.
"""

import json
import threading
from datetime import UTC, datetime

from privlog.core.exceptions import PrivlogErrorCode, SinkWriteError

from .config import LogConfig
from .console import ConsoleSink
from .diagnostics import get_logger
from .environment import EnvironmentPolicy, EnvironmentResolver
from .filters import DataTree, Redactor
from .levels import Severity, should_emit
from .records import LogRecord
from .ring_buffer import RingBufferSink
from .sinks import LogSink, SinkResult
from .storage import create_store

logger = get_logger(__name__)


class SecureLogger:
    """Privacy-preserving logger with one entry point per severity."""

    def __init__(
        self,
        policy: EnvironmentPolicy,
        redactor: Redactor | None = None,
        console_sink: ConsoleSink | None = None,
        remote_sink: LogSink | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            policy: Resolved environment policy (owned by this instance)
            redactor: Redaction engine; defaults to the standard rule set
            console_sink: Operator-visible sink used when the policy enables it
            remote_sink: Sink for records bound for remote delivery; defaults
                to an in-memory ring buffer
        """
        self.policy = policy
        self.redactor = redactor or Redactor()
        self.console_sink = console_sink or ConsoleSink()
        self.remote_sink = remote_sink if remote_sink is not None else RingBufferSink()
        self._stats_lock = threading.Lock()
        self._stats = {"emitted": 0, "sink_failures": 0, "payload_failures": 0}

        if policy.is_development and policy.console_sink_enabled:
            self.console_sink.print_environment_summary(policy)
            self.console_sink.console.print(
                f"🔐 Secure logger initialized: min level {policy.minimum_severity.name}, "
                f"console {'ON' if policy.console_sink_enabled else 'OFF'}, "
                f"remote {'ON' if policy.remote_sink_enabled else 'OFF'}"
            )

    @property
    def stats(self) -> dict[str, int]:
        with self._stats_lock:
            return dict(self._stats)

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def log(self, level: Severity, message: str, data: DataTree = None) -> None:
        """Gate, redact and dispatch one record."""
        if not should_emit(level, self.policy):
            return

        if not isinstance(message, str):
            message = str(message)

        if self.policy.sanitize_enabled:
            message = self.redactor.redact_string(message)

        if data is not None:
            try:
                data = self._prepare_data(data)
            except Exception as e:
                # The record still goes out, without its payload
                data = None
                self._count("payload_failures")
                if self.policy.console_sink_enabled:
                    self.console_sink.diagnostic(
                        "Dropped log payload",
                        SinkWriteError(
                            f"Payload could not be prepared: {type(e).__name__}",
                            error_code=PrivlogErrorCode.SERIALIZATION_FAILED,
                        ),
                    )

        record = LogRecord(
            timestamp=datetime.now(UTC),
            level=level,
            message=message,
            data=data,
            environment=self.policy.classification.value,
        )
        self._count("emitted")

        if self.policy.console_sink_enabled:
            result = self._deliver(self.console_sink, record)
            if not result.ok:
                self._count("sink_failures")

        if self.policy.remote_sink_enabled:
            result = self._deliver(self.remote_sink, record)
            if not result.ok:
                self._count("sink_failures")
                if self.policy.console_sink_enabled:
                    self.console_sink.diagnostic("Failed to save log", result.error)

    def _prepare_data(self, data: DataTree) -> DataTree:
        """Return a record-owned copy of ``data``, redacted when the policy asks."""
        if self.policy.sanitize_enabled:
            return self.redactor.sanitize(data)
        # JSON round-trip; values JSON cannot hold are stringified
        return json.loads(json.dumps(data, ensure_ascii=False, default=str))

    @staticmethod
    def _deliver(sink: LogSink, record: LogRecord) -> SinkResult:
        try:
            return sink.emit(record)
        except Exception as e:
            # Sinks should report by value; contain the ones that don't
            return SinkResult.failure(
                SinkWriteError(f"Sink raised {type(e).__name__}: {e}", details={"sink": type(sink).__name__})
            )

    def debug(self, message: str, data: DataTree = None) -> None:
        """Detailed technical information for development."""
        self.log(Severity.DEBUG, message, data)

    def info(self, message: str, data: DataTree = None) -> None:
        """Normal application events and completed user actions."""
        self.log(Severity.INFO, message, data)

    def warn(self, message: str, data: DataTree = None) -> None:
        """Abnormal but non-blocking situations."""
        self.log(Severity.WARN, message, data)

    def error(self, message: str, data: DataTree = None) -> None:
        """Failures that prevent a feature from working."""
        self.log(Severity.ERROR, message, data)

    def security(self, message: str, data: DataTree = None) -> None:
        """Suspicious input and policy violations."""
        self.log(Severity.SECURITY, message, data)


# Singleton instance
_secure_logger: SecureLogger | None = None
_secure_logger_lock = threading.Lock()


def build_secure_logger(config: LogConfig | None = None) -> SecureLogger:
    """Construct a dispatcher from settings, resolving the policy."""
    if config is None:
        config = LogConfig()

    policy = EnvironmentResolver(config).resolve()
    remote_sink = RingBufferSink(
        store=create_store(config),
        key=config.storage_key,
        capacity=config.ring_buffer_capacity,
    )
    logger.debug("Secure logger created", **policy.describe())
    return SecureLogger(policy, remote_sink=remote_sink)


def get_secure_logger() -> SecureLogger:
    """Get the process-wide secure logger, creating it on first use."""
    global _secure_logger
    instance = _secure_logger
    if instance is not None:
        return instance
    with _secure_logger_lock:
        if _secure_logger is None:
            _secure_logger = build_secure_logger()
        return _secure_logger


def reset_secure_logger() -> None:
    """Forget the process-wide instance. Intended for test isolation only."""
    global _secure_logger
    with _secure_logger_lock:
        _secure_logger = None


def debug(message: str, data: DataTree = None) -> None:
    get_secure_logger().debug(message, data)


def info(message: str, data: DataTree = None) -> None:
    get_secure_logger().info(message, data)


def warn(message: str, data: DataTree = None) -> None:
    get_secure_logger().warn(message, data)


def error(message: str, data: DataTree = None) -> None:
    get_secure_logger().error(message, data)


def security(message: str, data: DataTree = None) -> None:
    get_secure_logger().security(message, data)
