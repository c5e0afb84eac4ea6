"""API tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from betcaddies.api import server

HEADERS = {"X-API-Key": "secret"}


def _payload(**extra) -> dict:
    offers = []
    for i in range(12):
        offers.append({"selectionName": f"Player {i}", "bookmaker": "BookA", "oddsDecimal": 3.0})
        offers.append({"selectionName": f"Player {i}", "bookmaker": "BookB", "oddsDecimal": 3.2})
        offers.append({"selectionName": f"Dark Horse {i}", "bookmaker": "BookA", "oddsDecimal": 26.0})
        offers.append({"selectionName": f"Dark Horse {i}", "bookmaker": "BookB", "oddsDecimal": 21.0})
    return {
        "events": [
            {"id": "evt_1", "tour": "PGA", "eventName": "Arnold Palmer Invitational"},
            {"id": "evt_2", "tour": "LIV", "eventName": "LIV Adelaide"},
        ],
        "odds": [{"tourEventId": "evt_1", "markets": [{"marketKey": "win", "offers": offers}]}],
        **extra,
    }


@pytest.fixture
def client(monkeypatch, sqlite_engine, session_factory) -> Iterator[TestClient]:
    monkeypatch.setenv("BETCADDIES_API_KEY", "secret")
    maker = sessionmaker(bind=sqlite_engine, class_=Session, expire_on_commit=False)

    def _get_db() -> Iterator[Session]:
        db = maker()
        try:
            yield db
        finally:
            db.close()

    server.app.dependency_overrides[server.get_db] = _get_db
    server.app.dependency_overrides[server.get_session_factory] = lambda: session_factory
    with TestClient(server.app) as test_client:
        yield test_client
    server.app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_version_reports_tier_policy(client: TestClient) -> None:
    body = client.get("/version").json()
    assert body["name"] == "betcaddies"
    assert body["tier_policy"] in {"odds_band", "edge_threshold"}


def test_recommendations_require_api_key(client: TestClient) -> None:
    response = client.post("/recommendations", json=_payload())
    assert response.status_code == 401


def test_recommendations_returns_tiers(client: TestClient) -> None:
    response = client.post("/recommendations", json=_payload(run_key="api_run"), headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["run_key"] == "api_run"
    assert body["selection_run_id"] is None
    picks = [rec for tier in body["tiers"].values() for rec in tier]
    assert picks
    for tier, recs in body["tiers"].items():
        for rec in recs:
            assert rec["tier"] == tier
            assert rec["tour_event_id"] == "evt_1"
            assert 1 <= rec["confidence"] <= 5
            assert rec["analysis_paragraph"]


def test_best_offer_and_alternates_in_response(client: TestClient) -> None:
    response = client.post("/recommendations", json=_payload(), headers=HEADERS)
    eagle = response.json()["tiers"]["EAGLE"]
    assert eagle
    for rec in eagle:
        assert rec["best_bookmaker"] == "BookA"
        assert rec["best_odds"] == 26.0
        assert rec["alt_offers"] == [{"bookmaker": "BookB", "odds_decimal": 21.0}]


def test_persisted_run_can_be_fetched(client: TestClient) -> None:
    created = client.post(
        "/recommendations",
        json=_payload(run_key="persisted", persist=True),
        headers=HEADERS,
    ).json()
    assert created["selection_run_id"] is not None

    response = client.get("/runs/persisted", headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["input_hash"] == created["input_hash"]
    assert body["tours_processed"] == ["LIV", "PGA"]
    assert len(body["results"]) == sum(len(recs) for recs in created["tiers"].values())


def test_unknown_run_is_404(client: TestClient) -> None:
    assert client.get("/runs/nope", headers=HEADERS).status_code == 404


def test_invalid_tour_is_422(client: TestClient) -> None:
    payload = _payload()
    payload["events"][0]["tour"] = "MINI"
    response = client.post("/recommendations", json=payload, headers=HEADERS)
    assert response.status_code == 422


def test_repeated_persisted_post_is_idempotent(client: TestClient) -> None:
    payload = _payload(run_key="dup", persist=True)
    first = client.post("/recommendations", json=payload, headers=HEADERS)
    second = client.post("/recommendations", json=payload, headers=HEADERS)
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["selection_run_id"] == first.json()["selection_run_id"]


def test_persisted_run_key_with_different_inputs_is_409(client: TestClient) -> None:
    client.post("/recommendations", json=_payload(run_key="clash", persist=True), headers=HEADERS)
    payload = _payload(run_key="clash", persist=True)
    payload["odds"][0]["markets"][0]["offers"][0]["oddsDecimal"] = 3.5
    response = client.post("/recommendations", json=payload, headers=HEADERS)
    assert response.status_code == 409
    assert "differs from the persisted run" in response.json()["detail"]


def test_empty_odds_snapshot_is_409(client: TestClient) -> None:
    payload = _payload()
    payload["odds"] = []
    response = client.post("/recommendations", json=payload, headers=HEADERS)
    assert response.status_code == 409
    assert "empty odds snapshot" in response.json()["detail"]


def test_non_object_offer_is_skipped(client: TestClient) -> None:
    payload = _payload()
    payload["odds"][0]["markets"][0]["offers"][:0] = [None, "junk"]
    response = client.post("/recommendations", json=payload, headers=HEADERS)
    assert response.status_code == 200
    assert any(response.json()["tiers"].values())
