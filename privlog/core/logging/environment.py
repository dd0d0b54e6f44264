"""Runtime environment detection and logging policy resolution.

The host identifier is the only input to classification. Local hosts and
private networks are development; everything else, including anything
unrecognised, is production (the stricter, quieter policy).
"""

import socket
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from .diagnostics import get_logger
from .levels import Severity

if TYPE_CHECKING:
    from .config import LogConfig

logger = get_logger(__name__)

LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})
PRIVATE_PREFIXES = ("192.168.", "10.")
LOCAL_SUFFIXES = (".local",)


class Classification(str, Enum):
    """Environment classes."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


@dataclass(frozen=True)
class EnvironmentPolicy:
    """Logging policy derived once from the environment classification."""

    classification: Classification
    minimum_severity: Severity
    console_sink_enabled: bool
    remote_sink_enabled: bool
    sanitize_enabled: bool
    cache_lifetime_ms: int
    analytics_enabled: bool = False
    hostname: str = ""
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_development(self) -> bool:
        return self.classification == Classification.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.classification == Classification.PRODUCTION

    def describe(self) -> dict[str, Any]:
        """Plain dict view for display and diagnostics."""
        return {
            "environment": self.classification.value,
            "hostname": self.hostname,
            "minimum_severity": self.minimum_severity.name,
            "console_sink": self.console_sink_enabled,
            "remote_sink": self.remote_sink_enabled,
            "analytics": self.analytics_enabled,
            "sanitize": self.sanitize_enabled,
            "cache_lifetime_s": self.cache_lifetime_ms / 1000,
            "detected_at": self.detected_at.isoformat(),
        }


def classify_host(host: str | None) -> Classification:
    """Classify a host identifier. Purely syntactic, no network access."""
    if not host:
        return Classification.PRODUCTION

    # "myhost.local." is the same name as "myhost.local"
    if len(host) > 1 and host.endswith("."):
        host = host[:-1]

    if host in LOCAL_HOSTS:
        return Classification.DEVELOPMENT
    if host.startswith(PRIVATE_PREFIXES) or host.endswith(LOCAL_SUFFIXES):
        return Classification.DEVELOPMENT
    return Classification.PRODUCTION


def policy_for(classification: Classification, hostname: str = "") -> EnvironmentPolicy:
    """Build the default policy for a classification."""
    if classification == Classification.DEVELOPMENT:
        return EnvironmentPolicy(
            classification=classification,
            minimum_severity=Severity.DEBUG,
            console_sink_enabled=True,
            remote_sink_enabled=False,
            sanitize_enabled=True,
            cache_lifetime_ms=60_000,
            analytics_enabled=False,
            hostname=hostname,
        )
    return EnvironmentPolicy(
        classification=Classification.PRODUCTION,
        minimum_severity=Severity.ERROR,
        console_sink_enabled=False,
        remote_sink_enabled=True,
        sanitize_enabled=True,
        cache_lifetime_ms=300_000,
        analytics_enabled=True,
        hostname=hostname,
    )


def _apply_overrides(policy: EnvironmentPolicy, config: "LogConfig") -> EnvironmentPolicy:
    overrides: dict[str, Any] = {}
    if config.min_level is not None:
        overrides["minimum_severity"] = config.min_level
    if config.console_enabled is not None:
        overrides["console_sink_enabled"] = config.console_enabled
    if config.remote_enabled is not None:
        overrides["remote_sink_enabled"] = config.remote_enabled
    if config.sanitize_enabled is not None:
        overrides["sanitize_enabled"] = config.sanitize_enabled

    if not overrides:
        return policy

    logger.info(
        "Environment policy overridden",
        classification=policy.classification.value,
        overrides=sorted(overrides),
    )
    if overrides.get("sanitize_enabled") is False:
        logger.warning("PII redaction DISABLED by configuration")
    return replace(policy, **overrides)


class EnvironmentResolver:
    """Resolves the environment policy once and caches it.

    ``resolve`` is memoised: the first call inspects the host, later calls
    return the same policy object until ``reset`` is called.
    """

    def __init__(
        self,
        config: "LogConfig | None" = None,
        host_provider: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Settings supplying the host and policy overrides
            host_provider: Callable returning the host identifier; defaults
                to the configured host, then the machine host name
        """
        self.config = config
        self.host_provider = host_provider
        self._policy: EnvironmentPolicy | None = None
        self._lock = threading.Lock()

    def _detect_host(self) -> str:
        if self.host_provider is not None:
            return self.host_provider()
        if self.config is not None and self.config.host:
            return self.config.host
        return socket.gethostname()

    def _build(self) -> EnvironmentPolicy:
        host = self._detect_host()
        forced = self.config.environment if self.config is not None else None
        classification = forced or classify_host(host)
        policy = policy_for(classification, hostname=host)
        if self.config is not None:
            policy = _apply_overrides(policy, self.config)

        logger.debug(
            "Environment detected",
            hostname=host,
            environment=classification.value,
            forced=forced is not None,
            remote_sink=policy.remote_sink_enabled,
            console_sink=policy.console_sink_enabled,
        )
        return policy

    def resolve(self) -> EnvironmentPolicy:
        """Return the cached policy, resolving it on first use."""
        policy = self._policy
        if policy is not None:
            return policy
        with self._lock:
            if self._policy is None:
                self._policy = self._build()
            return self._policy

    @property
    def resolved(self) -> bool:
        return self._policy is not None

    def reset(self) -> None:
        """Drop the cached policy. Intended for test isolation only."""
        with self._lock:
            self._policy = None
