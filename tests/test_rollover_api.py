"""Manual rollover endpoint tests (debug-only router)."""

import uuid
from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kaizen.api import auth, rollover
from kaizen.db.session import get_db
from kaizen.services.rollover_service import RolloverReport
from tests.conftest import override_get_db, register_and_login


@pytest.fixture
def debug_client(setup_db, monkeypatch):
    calls = []

    def fake_run_daily_rollover(today=None):
        calls.append(today)
        return RolloverReport(today=today, users=3, processed=2, skipped=0, failed=1, days_closed=2, failed_user_ids=[7])

    monkeypatch.setattr(rollover, "run_daily_rollover", fake_run_daily_rollover)
    app = FastAPI()
    app.include_router(auth.router)
    app.include_router(rollover.router)
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        c.calls = calls
        yield c


def test_manual_rollover_requires_auth(debug_client):
    assert debug_client.post("/api/rollover/run").status_code == 401


def test_manual_rollover_returns_report(debug_client):
    token = register_and_login(debug_client, f"ops_{uuid.uuid4().hex[:8]}@test.com")

    r = debug_client.post(
        "/api/rollover/run",
        headers={"Authorization": f"Bearer {token}"},
        params={"today": "2026-03-10"},
    )

    assert r.status_code == 200
    assert r.json() == {
        "today": "2026-03-10",
        "users": 3,
        "processed": 2,
        "skipped": 0,
        "failed": 1,
        "days_closed": 2,
        "failed_user_ids": [7],
    }
    assert debug_client.calls == [date(2026, 3, 10)]
