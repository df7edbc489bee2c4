"""FastAPI server exposing the advisor bridge over HTTP.

Routes share one AdvisorBridge held in app_state; an embedding application
may inject its own bridge before startup, in which case the lifespan leaves
its lifecycle alone.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr
import uvicorn

from advisorbridge import __version__
from advisorbridge.api.http.rpc_methods import health_response, ping_response, restart_response, rpc_response
from advisorbridge.bridge import JSONRPC_VERSION, AdvisorBridge, BridgeError, RpcRequest
from advisorbridge.config.access import get_config as get_cached_config
from advisorbridge.utils.exceptions import AdvisorBridgeError, classify_exception, sanitize_error_message

app_state: dict[str, Any] = {
    "bridge": None,
    "config": None,
    "_injected": False,
}


def inject_bridge(bridge: AdvisorBridge) -> None:
    """Serve an externally owned bridge; the server will neither start nor stop it."""
    app_state["bridge"] = bridge
    app_state["_injected"] = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the bridge, try an eager start, and always stop it on shutdown."""
    if app_state.get("_injected"):
        logger.info("advisorbridge API: using injected bridge")
        yield
        return

    config = get_cached_config(force_reload=True)
    app_state["config"] = config
    bridge = AdvisorBridge.from_config(config)
    app_state["bridge"] = bridge
    logger.info("Advisor binary path: {}", config.resolve_advisor_path())
    try:
        await asyncio.to_thread(bridge.start)
        logger.info("Advisor started successfully")
    except BridgeError as exc:
        logger.warning("Could not start advisor immediately: {}", exc)
        logger.info("Will attempt to start on first request")
    try:
        yield
    finally:
        logger.info("Shutting down...")
        await asyncio.to_thread(bridge.stop)
        app_state["bridge"] = None


app = FastAPI(
    title="advisorbridge API",
    description="HTTP front-end for the advisor JSON-RPC REPL",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(AdvisorBridgeError)
async def advisorbridge_exception_handler(request: Request, exc: AdvisorBridgeError):
    return JSONResponse(status_code=500, content=exc.to_dict())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    code, _ = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc))
    logger.exception("Unhandled exception [{}]: {}", code, sanitized)
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred", "code": code},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class RpcRequestBody(BaseModel):
    """JSON-RPC request accepted by POST /rpc."""
    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: Any = Field(default_factory=dict)
    id: Union[StrictInt, StrictFloat, StrictStr]

    def to_request(self) -> RpcRequest:
        params = {} if self.params is None else self.params
        return RpcRequest(method=self.method, params=params, id=self.id, jsonrpc=self.jsonrpc)


def _bridge() -> AdvisorBridge:
    bridge = app_state.get("bridge")
    if bridge is None:
        from advisorbridge.bridge import get_bridge

        bridge = get_bridge(app_state.get("config") or get_cached_config())
        app_state["bridge"] = bridge
    return bridge


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "advisorbridge-api",
        "version": __version__,
        "status": "running",
    }


@app.post("/rpc")
async def rpc(body: RpcRequestBody):
    """Forward one JSON-RPC request to the advisor."""
    status_code, payload = await asyncio.to_thread(rpc_response, _bridge(), body.to_request())
    return JSONResponse(status_code=status_code, content=payload)


@app.get("/health")
async def health():
    """Bridge liveness; never fails."""
    return await asyncio.to_thread(health_response, app_state.get("bridge"))


@app.get("/ping")
async def ping():
    """Round-trip a ping through the advisor."""
    status_code, payload = await asyncio.to_thread(ping_response, _bridge())
    return JSONResponse(status_code=status_code, content=payload)


@app.post("/restart")
async def restart():
    """Restart the advisor process."""
    status_code, payload = await asyncio.to_thread(restart_response, _bridge())
    return JSONResponse(status_code=status_code, content=payload)


def create_app() -> FastAPI:
    """Create and return the FastAPI application."""
    return app


def run_server(host: str = "0.0.0.0", port: int = 3001, log_level: str = "warning"):
    """Run the API server."""
    logger.info("API Server running on http://{}:{}", host, port)
    logger.info("  - POST /rpc - JSON-RPC endpoint")
    logger.info("  - GET /health - Health check")
    logger.info("  - GET /ping - Test advisor connection")
    logger.info("  - POST /restart - Restart advisor")
    uvicorn.run(
        app,
        host=host,
        port=port,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=10,
        log_level=log_level,
    )
