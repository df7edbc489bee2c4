"""CLI commands for advisorbridge.

`serve` runs the HTTP front-end; `call`, `ping` and `health` talk to a
private advisor process for the duration of one command.
"""

import errno
import json
import math
import socket
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from advisorbridge import __logo__, __version__
from advisorbridge.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file

app = typer.Typer(
    name="advisorbridge",
    help=f"{__logo__} advisorbridge - JSON-RPC bridge to the advisor REPL",
    no_args_is_help=True,
)

console = Console()
_state: dict[str, Any] = {"config_path": None}


def _config():
    from advisorbridge.config.access import get_config

    return get_config(config_path=_state["config_path"])


def _port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise
    return False


def _parse_request_id(raw: str) -> int | float | str:
    """Numeric ids go on the wire as numbers, anything else as a string."""
    for convert in (int, float):
        try:
            value = convert(raw)
        except ValueError:
            continue
        if isinstance(value, int) or math.isfinite(value):
            return value
    return raw


def _print_response(response) -> None:
    from advisorbridge.bridge import response_to_payload

    console.print_json(json.dumps(response_to_payload(response), ensure_ascii=False))


@app.callback()
def main(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    log_level: str = typer.Option(None, "--log-level", "-l", help="Console log level (default from config)"),
):
    """advisorbridge command line."""
    _state["config_path"] = config_path
    try:
        config = _config()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    configure_console_logging(log_level or config.logging.level)


@app.command()
def version():
    """Show the advisorbridge version."""
    console.print(f"{__logo__} advisorbridge v{__version__}")


@app.command()
def serve(
    host: str = typer.Option(None, "--host", "-h", help="Bind host (default from config)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
):
    """Run the HTTP API (POST /rpc, GET /health, GET /ping, POST /restart)."""
    from advisorbridge.api.server import run_server

    config = _config()
    host = host or config.server.host
    port = port or config.server.port
    if _port_in_use(host, port):
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] to choose another port (current: {host}:{port})."
        )
        raise typer.Exit(1)
    log_path = ensure_rotating_log_file("serve", level=config.logging.file_level)
    console.print(f"{__logo__} Serving advisor bridge on http://{host}:{port} [dim](logs: {log_path})[/dim]")
    run_server(host=host, port=port)


@app.command()
def call(
    method: str = typer.Argument(..., help="JSON-RPC method name"),
    params: str = typer.Option("{}", "--params", "-P", help="JSON-encoded params"),
    request_id: str = typer.Option(None, "--id", help="Request id (default: current time in ms)"),
):
    """Send one JSON-RPC request to a fresh advisor and print the response."""
    from advisorbridge.bridge import AdvisorBridge, BridgeError, RpcRequest
    from advisorbridge.utils.helpers import now_ms

    try:
        parsed_params = json.loads(params)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--params is not valid JSON: {e}")
    req_id: int | float | str = now_ms() if request_id is None else _parse_request_id(request_id)

    with AdvisorBridge.from_config(_config()) as bridge:
        try:
            response = bridge.send_request(RpcRequest(method=method, params=parsed_params, id=req_id))
        except BridgeError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    _print_response(response)
    if not response.ok:
        raise typer.Exit(1)


@app.command()
def ping():
    """Start the advisor and send it a ping."""
    from advisorbridge.bridge import AdvisorBridge, BridgeError

    with AdvisorBridge.from_config(_config()) as bridge:
        try:
            response = bridge.ping()
        except BridgeError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    _print_response(response)


@app.command()
def health(
    start: bool = typer.Option(False, "--start", help="Try to start the advisor before reporting"),
):
    """Report the advisor binary path and bridge state."""
    from advisorbridge.bridge import AdvisorBridge, BridgeError

    config = _config()
    with AdvisorBridge.from_config(config) as bridge:
        if start:
            try:
                bridge.start()
            except BridgeError as e:
                console.print(f"[yellow]{e}[/yellow]")
        report = bridge.health_check()
    state_color = "green" if report["bridgeState"] == "running" else "dim"
    console.print(f"Advisor: {config.resolve_advisor_path()}")
    console.print(f"Bridge: [{state_color}]{report['bridgeState']}[/{state_color}]")


if __name__ == "__main__":
    app()
