"""
Keep-alive HTTP server.
"""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from bot import keep_alive, storage
from bot.keep_alive import APP_NAME, app, update_bot_status


@pytest.fixture
def http():
    update_bot_status(status="starting", discord_connected=False)
    yield TestClient(app)
    update_bot_status(status="starting", discord_connected=False)


def test_ping(http):
    response = http.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"pong": True}


def test_root(http):
    body = http.get("/").json()
    assert body["name"] == APP_NAME
    assert body["status"] == "starting"


def test_health_unavailable_before_connect(http):
    response = http.get("/health")
    assert response.status_code == 503
    body = response.json()
    assert body["discord"] == "disconnected"
    assert body["status"] == "degraded"


def test_health_ok_when_connected(http, store, monkeypatch):
    monkeypatch.setattr(storage, "_store", store)
    update_bot_status(discord_connected=True)

    response = http.get("/health")

    assert response.status_code == 200
    assert response.json()["storage"] == "loaded"


async def test_stop_server_asks_uvicorn_to_exit(monkeypatch):
    server = SimpleNamespace(should_exit=False)

    async def serve():
        while not server.should_exit:
            await asyncio.sleep(0.01)

    task = asyncio.create_task(serve())
    monkeypatch.setattr(keep_alive, "_server", server)
    monkeypatch.setattr(keep_alive, "_server_task", task)

    await keep_alive.stop_server()

    assert server.should_exit is True
    assert task.done() and not task.cancelled()
    assert keep_alive._server is None
    assert keep_alive._server_task is None


async def test_stop_server_without_server():
    await keep_alive.stop_server()
    assert keep_alive._server_task is None
