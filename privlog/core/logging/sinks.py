"""Sink contract shared by every log destination.

Sinks report failures by value: ``emit`` returns a ``SinkResult`` instead
of raising, so a broken destination can never disturb the code that logged.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from privlog.core.exceptions import PrivlogError

from .records import LogRecord


@dataclass(frozen=True)
class SinkResult:
    """Outcome of handing one record to a sink."""

    ok: bool
    error: PrivlogError | None = None

    @classmethod
    def success(cls) -> "SinkResult":
        return _SUCCESS

    @classmethod
    def failure(cls, error: PrivlogError) -> "SinkResult":
        return cls(ok=False, error=error)


_SUCCESS = SinkResult(ok=True)


@runtime_checkable
class LogSink(Protocol):
    """A destination for finalized, redacted records."""

    def emit(self, record: LogRecord) -> SinkResult:
        ...


@runtime_checkable
class RemoteTransport(Protocol):
    """Delivery of persisted records to a remote collector."""

    def send(self, record: LogRecord) -> SinkResult:
        ...


class NullTransport:
    """Transport used until remote delivery exists; accepts and drops."""

    def send(self, record: LogRecord) -> SinkResult:
        return SinkResult.success()
