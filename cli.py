"""CLI entry point for page-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from ui.console_logger import CliLogger
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def parse_args(argv: list[str], config: Config) -> dict[str, bool]:
    """Apply --addr/--port overrides to ``config`` and return the mode flags."""
    flags = {"help": False, "config": False, "dashboard": True}
    args = iter(argv)
    for arg in args:
        if arg in ("--help", "-h"):
            flags["help"] = True
        elif arg == "--config":
            flags["config"] = True
        elif arg == "--no-dashboard":
            flags["dashboard"] = False
        elif arg == "--addr":
            config.server.addr = _next_value(args, arg)
        elif arg == "--port":
            value = _next_value(args, arg)
            try:
                config.server.port = int(value)
            except ValueError:
                raise ConfigurationError(f"Invalid port number: {value}") from None
        else:
            raise ConfigurationError(f"Unknown argument: {arg}")

    if config.server.port <= 0:
        raise ConfigurationError(f"Invalid port number: {config.server.port}")
    return flags


def _next_value(args, flag: str) -> str:
    value = next(args, None)
    if value is None:
        raise ConfigurationError(f"{flag} requires a value")
    return value


def main():
    """Main CLI entry point."""
    config = load_config()

    try:
        flags = parse_args(sys.argv[1:], config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    if flags["help"]:
        _print_help()
        return

    if flags["config"]:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
        console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
        return

    clear_logs()
    dashboard = Dashboard(config) if flags["dashboard"] else None
    logger = dashboard or CliLogger(config, console)

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.addr,
        port=config.server.port,
        log_level="warning",
        timeout_keep_alive=config.server.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", addr=config.server.addr, port=config.server.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Page Relay[/bold cyan]

Fetches pages on your behalf as the Googlebot crawler and relays them back.

[bold]Usage:[/bold]
    page-relay                       Start with live dashboard
    page-relay --addr 0.0.0.0        Address to listen on (default 127.0.0.1)
    page-relay --port 9982           Port to listen on (default 9982)
    page-relay --no-dashboard        Print one line per request instead
    page-relay --config              Show config and log locations
    page-relay --help                Show this help

[bold]Relaying:[/bold]
    GET /pages/<url>   where <url> is percent-encoded; the scheme defaults to https.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
