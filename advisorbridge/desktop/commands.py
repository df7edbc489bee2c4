"""Desktop-shell command bindings over the shared advisor bridge.

The shell invokes commands by name with a JSON argument object and expects
either a result or an error string back, so every handler returns an
envelope: ``{"ok": True, "result": ...}`` or ``{"ok": False, "error": "..."}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from advisorbridge.bridge import AdvisorBridge, BridgeError, request_from_payload, response_to_payload
from advisorbridge.storage import DEFAULT_DATA_FILE, JsonFileStore
from advisorbridge.utils.exceptions import StorageError

CommandResult = dict[str, Any]


@dataclass
class CommandContext:
    bridge: AdvisorBridge
    store: JsonFileStore
    data_file: str = DEFAULT_DATA_FILE


def build_command_context(config: Any, bridge: AdvisorBridge | None = None) -> CommandContext:
    """Context for the shell: the process-global bridge and the configured data dir."""
    from advisorbridge.bridge import get_bridge

    return CommandContext(
        bridge=bridge or get_bridge(config),
        store=JsonFileStore(config.data_dir_path),
        data_file=config.storage.data_file,
    )


def _ok(result: Any = None) -> CommandResult:
    return {"ok": True, "result": result}


def _error(message: str) -> CommandResult:
    return {"ok": False, "error": message}


def send_rpc(bridge: AdvisorBridge, request: Any) -> CommandResult:
    try:
        rpc_request = request_from_payload(request)
    except ValueError as exc:
        return _error(f"Invalid request: {exc}")
    try:
        response = bridge.send_request(rpc_request)
    except BridgeError as exc:
        logger.warning("send_rpc failed for {}: {}", rpc_request.method, exc)
        return _error(str(exc))
    return _ok(response_to_payload(response))


def health_check(bridge: AdvisorBridge) -> CommandResult:
    return _ok(bridge.health_check())


def restart_repl(bridge: AdvisorBridge) -> CommandResult:
    try:
        bridge.restart()
    except BridgeError as exc:
        logger.warning("restart_repl failed: {}", exc)
        return _error(str(exc))
    return _ok()


def save_data(store: JsonFileStore, data: Any, filename: str = DEFAULT_DATA_FILE) -> CommandResult:
    try:
        store.save(filename, data)
    except StorageError as exc:
        return _error(str(exc))
    return _ok()


def load_data(store: JsonFileStore, filename: str = DEFAULT_DATA_FILE) -> CommandResult:
    try:
        return _ok(store.load(filename))
    except StorageError as exc:
        return _error(str(exc))


COMMANDS: dict[str, Callable[[CommandContext, dict[str, Any]], CommandResult]] = {
    "send_rpc": lambda ctx, args: send_rpc(ctx.bridge, args.get("request")),
    "health_check": lambda ctx, args: health_check(ctx.bridge),
    "restart_repl": lambda ctx, args: restart_repl(ctx.bridge),
    "save_data": lambda ctx, args: save_data(ctx.store, args.get("data"), ctx.data_file),
    "load_data": lambda ctx, args: load_data(ctx.store, ctx.data_file),
}


def invoke(context: CommandContext, name: str, args: dict[str, Any] | None = None) -> CommandResult:
    """Dispatch a shell command by name."""
    handler = COMMANDS.get(name)
    if handler is None:
        return _error(f"unknown command: {name}")
    return handler(context, args or {})
