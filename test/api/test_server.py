import pytest
from fastapi.testclient import TestClient

from whale_registry.api import server
from whale_registry.registry.ledger import InMemoryLedger
from whale_registry.registry.registry import TokenRegistry, allow_list, open_minting
from whale_registry.watcher.transfers import QueueTransferSource
from whale_registry.watcher.watcher import TransferWatcher

SENDER = "0x1234567890abcdef1234567890abcdef12345678"
RECEIVER = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"


@pytest.fixture
def registry():
    return TokenRegistry(InMemoryLedger(), open_minting())


@pytest.fixture
def source():
    return QueueTransferSource()


@pytest.fixture
def watcher(registry, source):
    return TransferWatcher(registry, source, poll_interval=3600)


@pytest.fixture
def client(registry, source, watcher):
    server.app.dependency_overrides[server.get_registry] = lambda: registry
    server.app.dependency_overrides[server.get_transfer_source] = lambda: source
    server.app.dependency_overrides[server.get_watcher] = lambda: watcher
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()
    if watcher.is_polling:
        watcher.stop()


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "next_token_id": 0}


def test_mint_and_lookup(client):
    response = client.post("/api/v1/whales", json={"owner": "0xABCD"})
    assert response.status_code == 201
    assert response.json() == {
        "token_id": 0,
        "owner": "0xabcd",
        "asset_name": b"WHALE#0".hex(),
    }
    assert client.post("/api/v1/whales", json={"owner": "0xEF01"}).json()["token_id"] == 1

    response = client.get("/api/v1/whales/1")
    assert response.status_code == 200
    assert response.json()["owner"] == "0xef01"
    assert "max-age" in response.headers["Cache-Control"]

    stats = client.get("/api/v1/whales/stats").json()
    assert stats == {"total_minted": 2, "next_token_id": 2}


def test_invalid_recipient(client, registry):
    client.post("/api/v1/whales", json={"owner": "0xABCD"})
    response = client.post("/api/v1/whales", json={"owner": "0x0"})
    assert response.status_code == 400
    assert registry.next_token_id == 1
    assert client.post("/api/v1/whales", json={"owner": "0xEF01"}).json()["token_id"] == 1


def test_unknown_whale(client):
    assert client.get("/api/v1/whales/0").status_code == 404
    assert client.get("/api/v1/whales/-1").status_code == 422


def test_unauthorized(client):
    restricted = TokenRegistry(InMemoryLedger(), allow_list(["0xbeef"]))
    server.app.dependency_overrides[server.get_registry] = lambda: restricted
    response = client.post("/api/v1/whales", json={"owner": "0x1", "minter": "0xdead"})
    assert response.status_code == 403
    response = client.post("/api/v1/whales", json={"owner": "0x1", "minter": "0xbeef"})
    assert response.status_code == 201


def test_watcher_lifecycle(client, watcher, registry):
    status = client.get("/api/v1/watcher").json()
    assert status == {"is_polling": False, "poll_count": 0, "logs": []}

    assert client.post("/api/v1/watcher/stop").status_code == 409
    response = client.post("/api/v1/watcher/start")
    assert response.status_code == 200
    assert response.json() == {"message": "Watching for logs, polling 3 times."}
    assert client.post("/api/v1/watcher/start").status_code == 409

    response = client.post(
        "/api/v1/watcher/transfers",
        json=[
            {"from_address": SENDER, "to_address": RECEIVER, "value": 2_000_000},
            {"from_address": RECEIVER, "to_address": SENDER, "value": 10},
        ],
    )
    assert response.status_code == 202
    assert response.json() == {"queued": 2}
    assert watcher.poll_once() == [0]
    assert registry.owner_of(0) == SENDER

    status = client.get("/api/v1/watcher").json()
    assert status["is_polling"] is True
    assert status["poll_count"] == 1
    assert status["logs"] == ["0x123...678 -> 0x833...913, value: 2000000"]

    response = client.post("/api/v1/watcher/stop")
    assert response.json() == {"message": "Watching for logs stopped."}
