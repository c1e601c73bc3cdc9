"""
Keep-alive web server for hosted deployments.
Exposes health endpoints so the host can see the bot is alive.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from bot.config import config
from bot.storage import is_connected
from utils.logger import get_logger

logger = get_logger("KeepAlive")

APP_NAME = "Guild Assistant Bot"
APP_VERSION = "1.0.0"
SHUTDOWN_TIMEOUT_SECONDS = 5

# Track bot status
_bot_status = {
    "status": "starting",
    "discord_connected": False,
}
_started_at = time.time()
_server: Optional[uvicorn.Server] = None
_server_task: Optional[asyncio.Task] = None


def update_bot_status(**kwargs):
    """Update bot status for health endpoint."""
    _bot_status.update(kwargs)


def get_bot_status() -> dict:
    return dict(_bot_status)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    logger.info("Keep-alive server starting...")
    _bot_status["status"] = "running"
    yield
    logger.info("Keep-alive server shutting down...")


app = FastAPI(
    title=APP_NAME,
    description="Discord guild assistant keep-alive server",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": _bot_status.get("status", "unknown"),
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    storage_ok = is_connected()
    discord_ok = bool(_bot_status.get("discord_connected"))

    status = "healthy" if discord_ok and storage_ok else "degraded"

    return JSONResponse(
        status_code=200 if status == "healthy" else 503,
        content={
            "status": status,
            "discord": "connected" if discord_ok else "disconnected",
            "storage": "loaded" if storage_ok else "unavailable",
            "uptime": int(time.time() - _started_at),
        },
    )


@app.get("/ping")
async def ping():
    """Simple ping endpoint."""
    return {"pong": True}


async def start_server():
    """Start the keep-alive server."""
    global _server

    config_uvicorn = uvicorn.Config(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="warning",
        access_log=False,
    )
    _server = uvicorn.Server(config_uvicorn)

    logger.info(f"Keep-alive server listening on {config.HOST}:{config.PORT}")
    await _server.serve()


async def run_server() -> asyncio.Task:
    """Run server in background task."""
    global _server_task
    _server_task = asyncio.create_task(start_server())
    return _server_task


async def stop_server() -> None:
    """Ask uvicorn to exit and wait for the server task."""
    global _server, _server_task
    if _server is not None:
        _server.should_exit = True
    if _server_task and not _server_task.done():
        try:
            await asyncio.wait_for(_server_task, SHUTDOWN_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Keep-alive server did not stop in time")
    _server = None
    _server_task = None
