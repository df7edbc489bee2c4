"""Process-wide shared access to one advisor bridge."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any

from loguru import logger

from advisorbridge.utils.helpers import now_ms

from .correlator import DEFAULT_RESPONSE_TIMEOUT, RequestCorrelator
from .protocol import RpcRequest, RpcResponse
from .supervisor import ProcessSupervisor

_MAX_TRACE_CHARS = 2000


class AdvisorBridge:
    """One supervisor/correlator pair behind a lock.

    Every operation holds the lock for its whole duration, so at most one
    request is ever in flight and lifecycle changes never overlap a call.
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        *,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        trace_methods: Iterable[str] = (),
    ):
        self.supervisor = supervisor
        self.correlator = RequestCorrelator(supervisor, response_timeout=response_timeout)
        self.trace_methods = frozenset(trace_methods)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Any) -> "AdvisorBridge":
        bridge_cfg = config.bridge
        supervisor = ProcessSupervisor(
            config.resolve_advisor_path(),
            args=(bridge_cfg.repl_flag,),
        )
        return cls(supervisor, trace_methods=bridge_cfg.trace_methods)

    def send_request(self, request: RpcRequest) -> RpcResponse:
        with self._lock:
            if request.method in self.trace_methods:
                self._trace(request)
            return self.correlator.send_request(request)

    def ping(self) -> RpcResponse:
        return self.send_request(RpcRequest(method="ping", params={}, id=now_ms()))

    def health_check(self) -> dict[str, str]:
        with self._lock:
            running = self.supervisor.is_running()
        return {"status": "ok", "bridgeState": "running" if running else "stopped"}

    def is_running(self) -> bool:
        with self._lock:
            return self.supervisor.is_running()

    def start(self) -> None:
        with self._lock:
            self.supervisor.start()

    def restart(self) -> None:
        with self._lock:
            self.supervisor.restart()

    def stop(self) -> None:
        with self._lock:
            self.supervisor.stop()

    def close(self) -> None:
        self.stop()

    def __enter__(self) -> "AdvisorBridge":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _trace(self, request: RpcRequest) -> None:
        logger.info("=== {} request ===", request.method)
        params = request.params if isinstance(request.params, dict) else {"params": request.params}
        for key, value in params.items():
            text = repr(value)
            if len(text) > _MAX_TRACE_CHARS:
                text = text[:_MAX_TRACE_CHARS] + "..."
            logger.info("{}: {}", key, text)


_singleton: AdvisorBridge | None = None
_singleton_lock = threading.Lock()


def get_bridge(config: Any = None) -> AdvisorBridge:
    """Get or create the process-global bridge (config is required on first call)."""
    global _singleton
    with _singleton_lock:
        if _singleton is None:
            if config is None:
                from advisorbridge.config.access import get_config

                config = get_config()
            _singleton = AdvisorBridge.from_config(config)
    return _singleton


def set_bridge(bridge: AdvisorBridge | None) -> None:
    """Install a bridge as the process-global instance (embedding apps and tests)."""
    global _singleton
    with _singleton_lock:
        _singleton = bridge


def reset_bridge() -> None:
    """Stop and forget the process-global bridge."""
    global _singleton
    with _singleton_lock:
        bridge = _singleton
        _singleton = None
    if bridge is not None:
        bridge.stop()
