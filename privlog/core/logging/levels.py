"""Severity levels and the level gate."""

from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .environment import EnvironmentPolicy


class Severity(IntEnum):
    """Ordered log severities. Comparison is purely by numeric rank."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    SECURITY = 4

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Convert a name, alias or rank into a Severity."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "SECURITY",
}

# Icons used by the console sink
LEVEL_ICONS: dict[Severity, str] = {
    Severity.DEBUG: "🔍",
    Severity.INFO: "ℹ️ ",
    Severity.WARN: "⚠️ ",
    Severity.ERROR: "❌",
    Severity.SECURITY: "🛡️ ",
}


def should_emit(level: Severity, policy: "EnvironmentPolicy") -> bool:
    """Return True when ``level`` reaches the policy's minimum severity."""
    return level >= policy.minimum_severity
