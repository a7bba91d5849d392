"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock
from typing import Iterable

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_fetch_log

console = Console()


class FetchInfo:
    """Info about a single relayed fetch."""

    def __init__(self, url: str, status: int, timestamp: datetime):
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.status = status
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent fetches and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._fetches: list[FetchInfo] = []
        self._max_fetches = 10
        self._counts = {"fetched": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_fetch(
        self,
        url: str,
        status: int,
        headers: Iterable[tuple[str, str]] = (),
    ) -> None:
        """Log a relayed upstream response."""
        with self._lock:
            self._counts["fetched"] += 1
            self._fetches.insert(0, FetchInfo(url, status, datetime.now()))
            self._fetches = self._fetches[: self._max_fetches]
            self._refresh()

            write_cli_log("FETCH", url, status=status)
            if self.config.server.debug:
                write_fetch_log(url, status, headers)

    def log_error(self, operation: str, detail: str) -> None:
        """Log a failure on any relay path."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = detail[:60] + "..." if len(detail) > 60 else detail
            self._errors.insert(0, f"{operation}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", detail[:200], operation=operation)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_fetches_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Page Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Fetched: {self._counts['fetched']}", style="green")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"{self.config.server.addr}:{self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_fetches_panel(self) -> Panel:
        """Build recent fetches panel."""
        if self._fetches:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Status", width=6)
            table.add_column("URL", ratio=1)

            for fetch in self._fetches:
                style = "green" if fetch.status < 400 else "yellow"
                table.add_row(
                    fetch.timestamp.strftime("%H:%M:%S"),
                    Text(str(fetch.status), style=style),
                    fetch.url,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Fetches[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Open http://{self.config.server.addr}:{self.config.server.port}/ "
                "or request /pages/<url>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
