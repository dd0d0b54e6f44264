"""Rich console sink for operator-visible log output.

Renders finalized records as an icon-tagged, coloured line followed by the
redacted data tree, and doubles as the fallback channel for sink failures.
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from privlog.core.exceptions import PrivlogError, SinkWriteError

from .environment import EnvironmentPolicy
from .levels import LEVEL_ICONS, Severity
from .records import LogRecord
from .sinks import SinkResult


class ConsoleSink:
    """Console-like sink using Rich for output."""

    def __init__(
        self,
        console: Console | None = None,
        show_timestamp: bool = True,
        show_environment: bool = False,
    ) -> None:
        """Initialize the console sink.

        Args:
        ----
            console: Rich console to print to (stderr by default)
            show_timestamp: Whether to show the record timestamp
            show_environment: Whether to show the environment tag

        """
        self.console = console or Console(stderr=True)
        self.show_timestamp = show_timestamp
        self.show_environment = show_environment

        # Log level colors
        self.level_styles = {
            Severity.DEBUG: "blue",
            Severity.INFO: "blue",
            Severity.WARN: "orange1",
            Severity.ERROR: "red bold",
            Severity.SECURITY: "magenta bold",
        }

    def emit(self, record: LogRecord) -> SinkResult:
        """Render one record. Never raises."""
        try:
            self._render(record)
        except Exception as e:
            return SinkResult.failure(
                SinkWriteError(f"Console write failed: {e}", details={"sink": "console"})
            )
        return SinkResult.success()

    def _render(self, record: LogRecord) -> None:
        style = self.level_styles.get(record.level, "white")
        icon = LEVEL_ICONS.get(record.level, "•")

        label = escape(f"[{record.level.name}]")
        output_parts = [f"[{style}]{icon} {label}[/{style}]"]
        if self.show_timestamp:
            output_parts.append(f"[dim]{record.iso_timestamp}[/dim]")
        if self.show_environment and record.environment:
            output_parts.append(f"[cyan]{escape(record.environment)}[/cyan]")

        self.console.print(" ".join(output_parts), end=" ")
        self.console.print(f"[bold]{escape(record.message)}[/bold]")

        if isinstance(record.data, dict):
            self._render_fields(record.data, indent=2)
        elif record.data is not None:
            self.console.print(f"  {escape(repr(record.data))}")

    def _render_fields(self, fields: dict[str, Any], indent: int = 0) -> None:
        """Render data fields as indented key/value lines."""
        indent_str = " " * indent
        for key, value in fields.items():
            label = escape(str(key))
            if isinstance(value, dict):
                self.console.print(f"{indent_str}[dim cyan]{label}:[/dim cyan]")
                self._render_fields(value, indent + 2)
            else:
                self.console.print(f"{indent_str}[dim cyan]{label}:[/dim cyan] {escape(str(value))}")

    def diagnostic(self, message: str, error: PrivlogError | None = None) -> None:
        """Report a swallowed pipeline failure. Never raises."""
        try:
            text = f"[red]❌ {escape(message)}[/red]"
            if error is not None:
                text += f" [dim]({error.error_code.value}: {escape(error.message)})[/dim]"
            self.console.print(text)
        except Exception:
            # Nowhere left to report to
            pass

    def print_environment_summary(self, policy: EnvironmentPolicy) -> None:
        """Render the resolved environment policy as a table."""
        table = Table(title="🧠 Environment Configuration", show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        table.add_row("Environment", policy.classification.value)
        table.add_row("Hostname", escape(policy.hostname or "-"))
        table.add_row("Minimum level", policy.minimum_severity.name)
        table.add_row("Console", "ON" if policy.console_sink_enabled else "OFF")
        table.add_row("Remote logging", "ON" if policy.remote_sink_enabled else "OFF")
        table.add_row("Analytics", "ON" if policy.analytics_enabled else "OFF")
        table.add_row("Redaction", "ON" if policy.sanitize_enabled else "[red]OFF[/red]")
        table.add_row("Cache lifetime", f"{policy.cache_lifetime_ms / 1000:g}s")

        self.console.print(table)
