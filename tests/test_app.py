from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gradeyour401k import db
from gradeyour401k.app import create_app
from gradeyour401k.config import Settings
from gradeyour401k.models import Line, Profile, Provider, Role, Snapshot
from gradeyour401k.runner import seed_reference_data

from .conftest import ASOF


@pytest.fixture
def client(engine) -> TestClient:
    settings = Settings(database_url="sqlite://", cron_secret="s3cret", scheduler_enabled=False)
    return TestClient(create_app(settings, engine))


def test_health(client) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "database": True}


def test_latest_model_rejects_unknown_provider(client) -> None:
    response = client.get("/api/models/latest", params={"provider": "Acme", "profile": "Growth"})

    assert response.status_code == 400


def test_latest_model_not_found(client) -> None:
    response = client.get("/api/models/latest", params={"provider": "Fidelity", "profile": "Growth"})

    assert response.status_code == 404


def test_latest_model_returns_ranked_lines(client, engine) -> None:
    db.save_snapshot(
        engine,
        Snapshot(
            "abc",
            ASOF,
            Provider.FIDELITY,
            Profile.GROWTH,
            "two lines",
            (Line("FSKAX", 0.6, Role.CORE, 1), Line("FXNAX", 0.4, Role.CORE, 2)),
        ),
    )

    response = client.get("/api/models/latest", params={"provider": "Fidelity", "profile": "Growth"})

    assert response.status_code == 200
    body = response.json()
    assert body["snapshot_id"] == "abc"
    assert body["asof"] == "2026-10-19"
    assert body["lines"][0] == {"rank": 1, "symbol": "FSKAX", "weight": 0.6, "role": "Core"}


def test_grade_endpoint(client) -> None:
    response = client.post(
        "/api/grade",
        json={
            "profile": "Growth",
            "provider": "Fidelity Investments",
            "holdings": [{"symbol": "fskax", "weight": 60}, {"symbol": "FXNAX", "weight": 40}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["grade"] == 4.0
    assert body["grade_label"] == "4.0"
    assert body["provider"] == "fidelity"
    assert body["provider_name"] == "Fidelity"
    assert body["holdings"][0]["label"] == "FSKAX — Fidelity® Total Market Index"
    assert [h["status"] for h in body["holdings"]] == ["inList", "inList"]


def test_grade_rejects_unknown_profile(client) -> None:
    response = client.post("/api/grade", json={"profile": "Moonshot", "holdings": []})

    assert response.status_code == 400


def test_grade_rejects_out_of_range_weight(client) -> None:
    response = client.post(
        "/api/grade",
        json={"profile": "Growth", "holdings": [{"symbol": "VTI", "weight": 150}]},
    )

    assert response.status_code == 422


def test_rebuild_requires_cron_secret(client) -> None:
    assert client.post("/api/rebuild-models").status_code == 401
    assert client.post("/api/rebuild-models", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_rebuild_builds_every_model(client, engine) -> None:
    seed_reference_data(engine)

    response = client.post("/api/rebuild-models", headers={"Authorization": "Bearer s3cret"})

    assert response.status_code == 200
    assert response.json()["built"] == len(Provider) * len(Profile)
    latest = client.get("/api/models/latest", params={"provider": "Vanguard", "profile": "Balanced"})
    assert latest.status_code == 200


def test_schedule_round_trip(client) -> None:
    assert client.get("/api/schedule").json() == {"time": "06:00", "timezone": "UTC"}

    response = client.post("/api/schedule", json={"time": "21:30", "timezone": "America/New_York"})

    assert response.status_code == 200
    assert response.json()["updated"] is True
    assert client.get("/api/schedule").json() == {"time": "21:30", "timezone": "America/New_York"}


@pytest.mark.parametrize(
    "payload",
    [{"time": "25:00"}, {"time": "noon"}, {"time": "07:15", "timezone": "Mars/Olympus"}],
)
def test_schedule_rejects_bad_input(client, payload) -> None:
    assert client.post("/api/schedule", json=payload).status_code == 400


def test_grade_without_provider_reports_other(client) -> None:
    response = client.post(
        "/api/grade", json={"profile": "Balanced", "holdings": [{"symbol": "VTI", "weight": 100}]}
    )

    body = response.json()
    assert body["provider"] == "other"
    assert body["provider_name"] == "Other provider"
    assert body["holdings"][0]["status"] == "custom"
