"""Immutable log records and their persisted JSON shape."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from .filters import DataTree
from .levels import Severity


def format_timestamp(moment: datetime) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by ``format_timestamp``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


@dataclass(frozen=True, slots=True)
class LogRecord:
    """A finalized, already-redacted log record handed to sinks."""

    timestamp: datetime
    level: Severity
    message: str
    data: DataTree = None
    environment: str = ""

    @property
    def iso_timestamp(self) -> str:
        return format_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-compatible persisted form."""
        entry: dict[str, Any] = {
            "timestamp": self.iso_timestamp,
            "level": self.level.name,
            "message": self.message,
        }
        if self.data is not None:
            entry["data"] = self.data
        entry["environment"] = self.environment
        return entry

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> "LogRecord":
        """Rebuild a record from its persisted form.

        Raises:
            KeyError, ValueError, TypeError: if the entry is malformed
        """
        return cls(
            timestamp=parse_timestamp(entry["timestamp"]),
            level=Severity[entry["level"]],
            message=str(entry["message"]),
            data=entry.get("data"),
            environment=str(entry.get("environment", "")),
        )
