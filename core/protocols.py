"""Shared protocol definitions."""

from typing import Iterable, Protocol


class RelayLogger(Protocol):
    """Protocol for the diagnostic side channel (Dashboard, CliLogger)."""

    def log_fetch(
        self,
        url: str,
        status: int,
        headers: Iterable[tuple[str, str]] = (),
    ) -> None: ...
    def log_error(self, operation: str, detail: str) -> None: ...
