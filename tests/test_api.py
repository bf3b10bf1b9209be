from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from conftest import FakeRateProvider
from ledgerbot.core.config import DatabaseSettings, Settings
from ledgerbot.core.container import build_container
from ledgerbot.interfaces.http.routers.flows import _to_response
from ledgerbot.main import create_app
from ledgerbot.modules.flows import DeferredArtifactCleaner


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"),
    )
    container = build_container(settings, rate_provider=FakeRateProvider({("EUR", "USD"): Decimal("1.1")}))
    with TestClient(create_app(settings, container)) as test_client:
        yield test_client


def _event(**overrides):
    payload = {"chat_id": "42", "actor_id": "7", "actor_name": "Olena", "text": "", "artifact_ids": []}
    payload.update(overrides)
    return payload


def test_account_admin_endpoints(client):
    created = client.post(
        "/api/accounts/",
        json={"name": "Cash", "slug": "cash", "currency": "eur", "opening_balance": 1000},
    )
    assert created.status_code == 201
    assert created.json()["currency"] == "EUR"
    assert created.json()["balance"] == 1000

    duplicate = client.post("/api/accounts/", json={"name": "Cash", "slug": "cash", "currency": "EUR"})
    assert duplicate.status_code == 409
    bad_slug = client.post("/api/accounts/", json={"name": "Bad", "slug": "bad slug", "currency": "EUR"})
    assert bad_slug.status_code == 422

    listing = client.get("/api/accounts/").json()
    assert listing["total"] == 1
    assert client.get("/api/accounts/ghost").status_code == 404

    integrity = client.get("/api/accounts/cash/integrity").json()
    assert integrity["ok"] is True
    assert integrity["transactions_checked"] == 1


def test_add_flow_over_http(client):
    client.post("/api/accounts/", json={"name": "Cash", "slug": "cash", "currency": "EUR"})

    started = client.post("/api/flows/add/start", json=_event(artifact_ids=["prompt-1"])).json()
    assert started["status"] == "advance"
    assert started["step"] == "select_account"

    reprompt = client.post("/api/flows/input", json=_event(text="wallet")).json()
    assert reprompt["status"] == "reprompt"
    assert reprompt["error"] == "account_not_found"

    assert client.post("/api/flows/input", json=_event(text="cash")).json()["step"] == "amount"
    assert client.post("/api/flows/input", json=_event(text="12,5")).json()["step"] == "description"
    done = client.post("/api/flows/input", json=_event(text="lunch", artifact_ids=["reply-9"])).json()
    assert done["status"] == "completed"
    assert len(done["transaction_ids"]) == 1
    assert done["released_artifacts"] == ["prompt-1", "reply-9"]

    detail = client.get("/api/accounts/cash").json()
    assert detail["balance"] == 1250
    assert detail["recent_transactions"][0]["description"] == "Lunch"
    assert detail["recent_transactions"][0]["created_by"] == {"id": "7", "name": "Olena"}

    history = client.get("/api/transactions/", params={"account": "cash"}).json()
    assert len(history["transactions"]) == 1
    transaction_id = done["transaction_ids"][0]
    assert client.get(f"/api/transactions/{transaction_id}").json()["source"] == "manual"
    assert client.get("/api/transactions/999").status_code == 404
    assert client.get("/api/transactions/99999999999999999999999").status_code == 422


def test_flow_input_without_session_is_idle(client):
    idle = client.post("/api/flows/input", json=_event(text="hello")).json()
    assert idle["status"] == "idle"
    abandoned = client.post("/api/flows/abandon", json=_event()).json()
    assert abandoned["status"] == "idle"
    tracked = client.post("/api/flows/artifacts", json=_event(artifact_ids=["x"])).json()
    assert tracked == {"tracked": False}


def test_unknown_flow_kind_rejected(client):
    assert client.post("/api/flows/teleport/start", json=_event()).status_code == 422


def test_transfer_rate_offer_over_http(client):
    client.post("/api/accounts/", json={"name": "Cash", "slug": "cash", "currency": "EUR", "opening_balance": 5000})
    client.post("/api/accounts/", json={"name": "Card", "slug": "card", "currency": "USD"})

    client.post("/api/flows/transfer/start", json=_event())
    client.post("/api/flows/input", json=_event(text="cash"))
    client.post("/api/flows/input", json=_event(text="card"))
    offer = client.post("/api/flows/input", json=_event(text="20")).json()
    assert offer["step"] == "rate"
    assert offer["payload"]["received_amount"] == 2200
    assert offer["payload"]["rate_display"] == "1 EUR = 1.1 USD"

    abandoned = client.post("/api/flows/abandon", json=_event()).json()
    assert abandoned == {
        "status": "aborted",
        "kind": "transfer",
        "step": None,
        "error": "abandoned",
        "noop": False,
        "transaction_ids": [],
        "payload": {},
        "released_artifacts": [],
    }
    assert client.get("/api/accounts/card").json()["balance"] == 0


def test_unknown_step_result_is_rejected():
    with pytest.raises(TypeError):
        _to_response(object(), DeferredArtifactCleaner())
