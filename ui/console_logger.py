"""Plain console logger used when the dashboard is disabled."""

from typing import Iterable

from rich.console import Console
from rich.markup import escape

from core.config import Config
from ui.log_utils import write_cli_log, write_fetch_log


class CliLogger:
    """Print relay events line by line and mirror them to the CLI log."""

    def __init__(self, config: Config, console: Console | None = None):
        self.config = config
        self._console = console or Console()

    def log_fetch(
        self,
        url: str,
        status: int,
        headers: Iterable[tuple[str, str]] = (),
    ) -> None:
        style = "green" if status < 400 else "yellow"
        self._console.print(f"[{style}]{status}[/{style}] {escape(url)}", highlight=False)
        write_cli_log("FETCH", url, status=status)
        if self.config.server.debug:
            write_fetch_log(url, status, headers)

    def log_error(self, operation: str, detail: str) -> None:
        self._console.print(f"[red][ERROR][/red] {escape(operation)}: {escape(detail)}", highlight=False)
        write_cli_log("ERROR", detail[:200], operation=operation)
