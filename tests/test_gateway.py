"""Smoke tests for the fogstore gateway.

Uses the in-memory blob storage — tests the HTTP layer without SQLite.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from fogstore.app import create_app, install_services, register_exception_handlers
from fogstore.auth import make_api_key_checker
from fogstore.backends import InMemoryBlobStorage
from fogstore.config import FogConfig
from fogstore.routes import disclosure, meta, records
from fogstore.wallet import LocalWallet

OWNER = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
STRANGER = "0x2222222222222222222222222222222222222222"


def _make_test_app(api_key: str = "") -> FastAPI:
    """Create a test app with in-memory storage and exception handlers."""
    app = FastAPI()
    install_services(app, InMemoryBlobStorage(), FogConfig(contract_address="0xC0ffee", chain_id=31337))
    register_exception_handlers(app)

    check_key = make_api_key_checker(api_key)
    app.include_router(meta.router, dependencies=[Depends(check_key)])
    app.include_router(records.router, dependencies=[Depends(check_key)])
    app.include_router(disclosure.router, dependencies=[Depends(check_key)])
    return app


def _as(identity: str) -> dict:
    return {"X-Identity": identity}


@pytest.fixture
def app():
    return _make_test_app()


@pytest.fixture
def client(app):
    return TestClient(app)


def _create(client, identity=OWNER, game_id="skirmish-7", x=3, y=4) -> str:
    r = client.post("/api/v1/records", json={"gameId": game_id, "x": x, "y": y}, headers=_as(identity))
    assert r.status_code == 201
    return r.json()["id"]


class TestMeta:
    def test_health(self, client):
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "service": "fogstore", "storage": "ok"}

    def test_health_reports_unavailable_storage(self, app, client):
        app.state.storage.available = False
        assert client.get("/api/v1/health").json()["storage"] == "unavailable"

    def test_version(self, client):
        assert client.get("/api/v1/version").json()["gateway"] == "0.1.0"

    def test_stats(self, client):
        a = _create(client)
        _create(client)
        client.post(f"/api/v1/records/{a}/reveal", headers=_as(OWNER))
        assert client.get("/api/v1/stats").json() == {"total": 2, "hidden": 1, "revealed": 1}


class TestRecords:
    def test_create_and_get(self, client):
        rid = _create(client)
        r = client.get(f"/api/v1/records/{rid}")
        assert r.status_code == 200
        body = r.json()
        assert body["id"] == rid
        assert body["gameId"] == "skirmish-7"
        assert body["owner"] == OWNER
        assert body["status"] == "hidden"
        assert body["position"].startswith("FHE-")

    def test_list(self, client):
        ids = {_create(client, game_id=f"g{i}") for i in range(3)}
        r = client.get("/api/v1/records")
        assert r.status_code == 200
        assert {rec["id"] for rec in r.json()} == ids

    def test_list_empty(self, client):
        assert client.get("/api/v1/records").json() == []

    def test_list_empty_when_storage_down(self, app, client):
        _create(client)
        app.state.storage.available = False
        assert client.get("/api/v1/records").json() == []

    def test_create_requires_identity(self, client):
        r = client.post("/api/v1/records", json={"gameId": "g", "x": 1, "y": 1})
        assert r.status_code == 401

    @pytest.mark.parametrize(
        "payload",
        [{"gameId": "", "x": 1, "y": 1}, {"gameId": "g", "x": "left", "y": 1}, {"x": 1, "y": 1}],
    )
    def test_create_validation(self, client, payload):
        r = client.post("/api/v1/records", json=payload, headers=_as(OWNER))
        assert r.status_code == 422

    def test_create_when_storage_down(self, app, client):
        app.state.storage.available = False
        r = client.post("/api/v1/records", json={"gameId": "g", "x": 1, "y": 1}, headers=_as(OWNER))
        assert r.status_code == 503

    def test_not_found(self, client):
        assert client.get("/api/v1/records/nope").status_code == 404


class TestRecordViews:
    def test_can_reveal_only_for_owner_of_hidden_record(self, client):
        rid = _create(client)
        url = f"/api/v1/records/{rid}"
        assert client.get(url, headers=_as(OWNER.lower())).json()["canReveal"] is True
        assert client.get(url, headers=_as(STRANGER)).json()["canReveal"] is False
        assert client.get(url).json()["canReveal"] is False

        client.post(f"{url}/reveal", headers=_as(OWNER))
        assert client.get(url, headers=_as(OWNER)).json()["canReveal"] is False

    def test_list_flags(self, client):
        mine = _create(client)
        theirs = _create(client, identity=STRANGER)
        flags = {r["id"]: r["canReveal"] for r in client.get("/api/v1/records", headers=_as(OWNER)).json()}
        assert flags == {mine: True, theirs: False}

    def test_status(self, app, client):
        rid = _create(client)
        assert client.get(f"/api/v1/records/{rid}/status").json() == {"id": rid, "status": "hidden"}
        client.post(f"/api/v1/records/{rid}/reveal", headers=_as(OWNER))
        assert client.get(f"/api/v1/records/{rid}/status").json()["status"] == "revealed"

        app.state.storage.set_data(f"fog_{rid}", b"{broken")
        assert client.get(f"/api/v1/records/{rid}/status").json()["status"] == "invalid"
        assert client.get("/api/v1/records/nope/status").json()["status"] == "invalid"


class TestReveal:
    def test_owner_reveals(self, client):
        rid = _create(client)
        before = client.get(f"/api/v1/records/{rid}").json()
        r = client.post(f"/api/v1/records/{rid}/reveal", headers=_as(OWNER.lower()))
        assert r.status_code == 200
        assert r.json() == {**before, "status": "revealed"}

    def test_non_owner_forbidden(self, client):
        rid = _create(client)
        r = client.post(f"/api/v1/records/{rid}/reveal", headers=_as(STRANGER))
        assert r.status_code == 403
        assert client.get(f"/api/v1/records/{rid}").json()["status"] == "hidden"

    def test_reveal_twice(self, client):
        rid = _create(client)
        assert client.post(f"/api/v1/records/{rid}/reveal", headers=_as(OWNER)).status_code == 200
        r = client.post(f"/api/v1/records/{rid}/reveal", headers=_as(OWNER))
        assert r.status_code == 200
        assert r.json()["status"] == "revealed"

    def test_reveal_missing(self, client):
        r = client.post("/api/v1/records/nope/reveal", headers=_as(OWNER))
        assert r.status_code == 404
        assert r.json()["detail"] == "Data not found"


class TestDisclosure:
    def test_challenge(self, app, client):
        r = client.get("/api/v1/disclosure/challenge")
        assert r.status_code == 200
        body = r.json()
        assert body["message"] == app.state.disclosure.session.challenge()
        assert "contractAddresses:0xC0ffee\ncontractsChainId:31337" in body["message"]
        assert body["expiresAt"] == body["startTimestamp"] + 30 * 86400

    def test_signed_disclosure(self, client):
        wallet = LocalWallet()
        identity = wallet.current_identity()
        rid = _create(client, identity=identity, x=-2, y=9)
        message = client.get("/api/v1/disclosure/challenge").json()["message"]
        signature = asyncio.run(wallet.sign(message))

        r = client.post(
            f"/api/v1/records/{rid}/disclose",
            json={"signature": signature},
            headers=_as(identity),
        )
        assert r.status_code == 200
        assert r.json() == {"id": rid, "x": -2, "y": 9}

    def test_missing_signature_refused(self, client):
        rid = _create(client)
        r = client.post(f"/api/v1/records/{rid}/disclose", json={}, headers=_as(OWNER))
        assert r.status_code == 403
        assert "x" not in r.json()

    def test_disclose_requires_identity(self, client):
        rid = _create(client)
        r = client.post(f"/api/v1/records/{rid}/disclose", json={"signature": "0xsig"})
        assert r.status_code == 401

    def test_record_fetch_runs_off_the_event_loop(self, app, client):
        store = app.state.store
        rid = _create(client)
        seen = []
        real_get = store.get

        def spy_get(record_id):
            try:
                asyncio.get_running_loop()
                seen.append("loop")
            except RuntimeError:
                seen.append("worker")
            return real_get(record_id)

        store.get = spy_get
        client.post(f"/api/v1/records/{rid}/disclose", json={"signature": "0xsig"}, headers=_as(OWNER))
        assert seen == ["worker"]

    def test_disclose_missing_record(self, client):
        r = client.post("/api/v1/records/nope/disclose", json={"signature": "0xsig"}, headers=_as(OWNER))
        assert r.status_code == 404


class TestAuth:
    def test_no_key_required_in_dev_mode(self, client):
        assert client.get("/api/v1/health").status_code == 200

    def test_key_required_when_configured(self):
        c = TestClient(_make_test_app(api_key="fog-key-2025"))

        assert c.get("/api/v1/health").status_code == 401
        assert c.get("/api/v1/health", headers={"X-API-Key": "wrong"}).status_code == 401
        assert c.get("/api/v1/health", headers={"X-API-Key": "fog-key-2025"}).status_code == 200


class TestAppFactory:
    def test_lifespan_wires_sqlite_storage(self, tmp_path):
        config = FogConfig(db_path=str(tmp_path / "fog.db"), chain_id=1)
        with TestClient(create_app(config)) as c:
            rid = _create(c)
            assert c.get(f"/api/v1/records/{rid}").status_code == 200
            assert c.get("/api/v1/health").json()["storage"] == "ok"

        with TestClient(create_app(config)) as c:
            assert [r["id"] for r in c.get("/api/v1/records").json()] == [rid]

    def test_concurrent_creates_all_listed(self, tmp_path):
        config = FogConfig(db_path=str(tmp_path / "fog.db"))
        with TestClient(create_app(config)) as c:
            with ThreadPoolExecutor(max_workers=16) as pool:
                ids = list(pool.map(lambda i: _create(c, game_id=f"g{i}"), range(200)))

            listed = [r["id"] for r in c.get("/api/v1/records").json()]
            assert sorted(listed) == sorted(ids)
            assert c.get("/api/v1/stats").json()["total"] == 200
