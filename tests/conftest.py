"""Global pytest configuration and fixtures."""
import io
import os
from dataclasses import replace

import pytest
from rich.console import Console

from privlog.core.logging.console import ConsoleSink
from privlog.core.logging.dispatcher import reset_secure_logger
from privlog.core.logging.environment import Classification, policy_for
from privlog.core.logging.records import LogRecord
from privlog.core.logging.sinks import SinkResult
from privlog.core.logging.storage import MemoryKeyValueStore


class RecordingConsoleSink(ConsoleSink):
    """Console sink that keeps every record it renders."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.records: list[LogRecord] = []

    def emit(self, record: LogRecord) -> SinkResult:
        self.records.append(record)
        return super().emit(record)

    @property
    def output(self) -> str:
        return self.console.file.getvalue()


class RecordingSink:
    """Remote-style sink collecting records, optionally failing."""

    def __init__(self, result: SinkResult | None = None):
        self.records: list[LogRecord] = []
        self.result = result or SinkResult.success()

    def emit(self, record: LogRecord) -> SinkResult:
        self.records.append(record)
        return self.result


def make_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep PRIVLOG_* settings from the host out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("PRIVLOG_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PRIVLOG_STORAGE_BACKEND", "memory")
    yield
    reset_secure_logger()


@pytest.fixture
def dev_policy():
    """Default development policy."""
    return policy_for(Classification.DEVELOPMENT, hostname="localhost")


@pytest.fixture
def prod_policy():
    """Default production policy."""
    return policy_for(Classification.PRODUCTION, hostname="app.example.com")


@pytest.fixture
def dev_remote_policy(dev_policy):
    """Development policy with the remote sink switched on."""
    return replace(dev_policy, remote_sink_enabled=True)


@pytest.fixture
def console_sink():
    """Console sink rendering into a string buffer."""
    return RecordingConsoleSink(console=make_console())


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def memory_store():
    return MemoryKeyValueStore()
