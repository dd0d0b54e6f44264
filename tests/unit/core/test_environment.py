"""Tests for environment classification and policy resolution."""
import threading
import time
from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock, patch

import pytest

from privlog.core.logging.config import LogConfig
from privlog.core.logging.environment import (
    Classification,
    EnvironmentResolver,
    classify_host,
    policy_for,
)
from privlog.core.logging.levels import Severity


class TestClassifyHost:
    """Syntactic host classification."""

    @pytest.mark.parametrize(
        "host",
        [
            "localhost",
            "127.0.0.1",
            "::1",
            "192.168.1.5",
            "10.0.0.3",
            "myhost.local",
            "myhost.local.",
        ],
    )
    def test_development_hosts(self, host):
        assert classify_host(host) == Classification.DEVELOPMENT

    @pytest.mark.parametrize(
        "host",
        [
            "app.example.com",
            "icuboost.web.app",
            "172.16.0.1",
            "LOCALHOST",
            "10",
            "local",
            "",
            None,
        ],
    )
    def test_production_hosts(self, host):
        """Anything not recognised falls back to production."""
        assert classify_host(host) == Classification.PRODUCTION


class TestPolicyTable:
    """Policy derived from the classification."""

    def test_development_policy(self):
        policy = policy_for(Classification.DEVELOPMENT, hostname="localhost")

        assert policy.minimum_severity == Severity.DEBUG
        assert policy.console_sink_enabled is True
        assert policy.remote_sink_enabled is False
        assert policy.sanitize_enabled is True
        assert policy.cache_lifetime_ms == 60_000
        assert policy.analytics_enabled is False
        assert policy.is_development and not policy.is_production

    def test_production_policy(self):
        policy = policy_for(Classification.PRODUCTION)

        assert policy.minimum_severity >= Severity.ERROR
        assert policy.console_sink_enabled is False
        assert policy.remote_sink_enabled is True
        assert policy.sanitize_enabled is True
        assert policy.cache_lifetime_ms == 300_000
        assert policy.analytics_enabled is True
        assert policy.is_production

    def test_policy_is_immutable(self, dev_policy):
        with pytest.raises(FrozenInstanceError):
            dev_policy.minimum_severity = Severity.ERROR

    def test_describe(self, dev_policy):
        description = dev_policy.describe()

        assert description["environment"] == "development"
        assert description["hostname"] == "localhost"
        assert description["minimum_severity"] == "DEBUG"
        assert description["cache_lifetime_s"] == 60


class TestEnvironmentResolver:
    """Memoised policy resolution."""

    def test_resolves_once(self):
        provider = MagicMock(return_value="localhost")
        resolver = EnvironmentResolver(host_provider=provider)

        first = resolver.resolve()
        second = resolver.resolve()

        assert first is second
        assert first.classification == Classification.DEVELOPMENT
        assert first.hostname == "localhost"
        provider.assert_called_once()

    def test_reset_forces_redetection(self):
        provider = MagicMock(side_effect=["localhost", "app.example.com"])
        resolver = EnvironmentResolver(host_provider=provider)

        assert resolver.resolve().is_development
        resolver.reset()
        assert not resolver.resolved
        assert resolver.resolve().is_production
        assert provider.call_count == 2

    def test_configured_host(self):
        resolver = EnvironmentResolver(LogConfig(host="192.168.0.20"))

        assert resolver.resolve().classification == Classification.DEVELOPMENT

    def test_machine_hostname_fallback(self):
        with patch("privlog.core.logging.environment.socket.gethostname", return_value="build-box"):
            policy = EnvironmentResolver(LogConfig()).resolve()

        assert policy.hostname == "build-box"
        assert policy.is_production

    def test_forced_environment(self):
        resolver = EnvironmentResolver(LogConfig(host="localhost", environment="production"))

        policy = resolver.resolve()

        assert policy.is_production
        assert policy.minimum_severity == Severity.ERROR

    def test_explicit_overrides(self):
        config = LogConfig(
            host="app.example.com", min_level="warn", console_enabled=True
        )

        policy = EnvironmentResolver(config).resolve()

        assert policy.is_production
        assert policy.minimum_severity == Severity.WARN
        assert policy.console_sink_enabled is True
        assert policy.remote_sink_enabled is True

    def test_concurrent_resolution_detects_once(self):
        calls = []

        def slow_provider():
            calls.append(1)
            time.sleep(0.05)
            return "localhost"

        resolver = EnvironmentResolver(host_provider=slow_provider)
        results = []

        def worker():
            results.append(resolver.resolve())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert all(result is results[0] for result in results)
