"""Task endpoint tests: CRUD, completion rewards and failure penalties."""

import uuid

from kaizen.core.deps import get_game_rules
from kaizen.core.game_rules import GameRules
from tests.conftest import register_and_login


def _auth(client):
    token = register_and_login(client, f"tasks_{uuid.uuid4().hex[:8]}@test.com")
    return {"Authorization": f"Bearer {token}"}


def _create(client, headers, **overrides):
    body = {"title": "Read 10 pages", "type": "todo", "assigned_date": "2026-03-10", **overrides}
    r = client.post("/api/tasks", headers=headers, json=body)
    assert r.status_code == 201, r.json()
    return r.json()


def test_create_task_uses_configured_rewards(client):
    headers = _auth(client)
    task = _create(client, headers, title="  Meditate  ", repeat_config={"enabled": True, "days_of_week": [4, 0, 4]})

    assert task["title"] == "Meditate"
    assert task["status"] == "pending"
    assert task["status_flags"] == {"completed": False, "failed": False, "pending": True}
    assert task["repeat_config"] == {"enabled": True, "days_of_week": [0, 4]}
    assert (task["exp_reward"], task["coin_reward"]) == (10, 5)
    assert (task["heart_loss"], task["coin_loss"]) == (1, 2)
    assert task["delay_count"] == 0


def test_create_task_validates_input(client):
    headers = _auth(client)
    r = client.post(
        "/api/tasks",
        headers=headers,
        json={"title": "x", "type": "todo", "assigned_date": "2026-03-10", "repeat_config": {"days_of_week": [7]}},
    )
    assert r.status_code == 422
    r = client.post("/api/tasks", headers=headers, json={"title": "   ", "type": "todo", "assigned_date": "2026-03-10"})
    assert r.status_code == 422
    r = client.post("/api/tasks", headers=headers, json={"title": "x", "type": "chore", "assigned_date": "2026-03-10"})
    assert r.status_code == 422


def test_tasks_require_auth(client):
    assert client.get("/api/tasks").status_code == 401


def test_complete_task_grants_rewards(client):
    headers = _auth(client)
    task = _create(client, headers)

    r = client.post(f"/api/tasks/{task['id']}/complete", headers=headers)

    assert r.status_code == 200
    data = r.json()
    assert data["task"]["status"] == "completed"
    assert data["task"]["completed_at"] is not None
    assert data["levels_gained"] == 0
    assert data["message"] is None
    assert (data["stats"]["current_exp"], data["stats"]["coins"]) == (10, 5)


def test_complete_task_twice_pays_once(client):
    headers = _auth(client)
    task = _create(client, headers)
    client.post(f"/api/tasks/{task['id']}/complete", headers=headers)

    r = client.post(f"/api/tasks/{task['id']}/complete", headers=headers)

    assert r.status_code == 200
    assert r.json()["message"] == "Task already completed"
    assert (r.json()["stats"]["current_exp"], r.json()["stats"]["coins"]) == (10, 5)


def test_big_reward_levels_up(client):
    headers = _auth(client)
    task = _create(client, headers, exp_reward=215)

    data = client.post(f"/api/tasks/{task['id']}/complete", headers=headers).json()

    # 215 - 100 - 110 = 5 exp into level 3
    assert data["levels_gained"] == 2
    stats = data["stats"]
    assert (stats["level"], stats["current_exp"], stats["max_exp"]) == (3, 5, 120)
    assert stats["max_hearts"] == 12
    assert stats["coins"] == 5 + 2 * 10


def test_fail_task_applies_penalty(client):
    headers = _auth(client)
    task = _create(client, headers)

    r = client.post(f"/api/tasks/{task['id']}/fail", headers=headers)

    assert r.status_code == 200
    data = r.json()
    assert data["task"]["status"] == "failed"
    assert data["heart_zero_penalty"] is False
    assert (data["stats"]["hearts"], data["stats"]["coins"]) == (9, 0)


def test_cannot_complete_failed_task(client):
    headers = _auth(client)
    task = _create(client, headers)
    client.post(f"/api/tasks/{task['id']}/fail", headers=headers)

    r = client.post(f"/api/tasks/{task['id']}/complete", headers=headers)

    assert r.status_code == 400


def test_cannot_fail_completed_task(client):
    headers = _auth(client)
    task = _create(client, headers)
    client.post(f"/api/tasks/{task['id']}/complete", headers=headers)

    r = client.post(f"/api/tasks/{task['id']}/fail", headers=headers)

    assert r.status_code == 400
    stats = client.get("/api/stats", headers=headers).json()
    assert stats["hearts"] == 10


def test_failing_to_zero_hearts_fires_penalty(client):
    headers = _auth(client)
    tasks = [_create(client, headers, title=f"t{i}") for i in range(10)]

    results = [client.post(f"/api/tasks/{t['id']}/fail", headers=headers).json() for t in tasks]

    assert [r["heart_zero_penalty"] for r in results] == [False] * 9 + [True]
    stats = results[-1]["stats"]
    assert stats["hearts"] == 5
    assert stats["level"] == 1
    assert stats["coins"] == 0


def test_other_users_task_not_found(client):
    owner = _auth(client)
    intruder = _auth(client)
    task = _create(client, owner)

    assert client.get(f"/api/tasks/{task['id']}", headers=intruder).status_code == 404
    assert client.post(f"/api/tasks/{task['id']}/complete", headers=intruder).status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}", headers=intruder).status_code == 404
    assert client.get(f"/api/tasks/{task['id']}", headers=owner).status_code == 200


def test_update_task_fields(client):
    headers = _auth(client)
    task = _create(client, headers)

    r = client.put(
        f"/api/tasks/{task['id']}",
        headers=headers,
        json={"title": "Read 20 pages", "assigned_date": "2026-03-11", "coin_reward": 8},
    )

    assert r.status_code == 200
    data = r.json()
    assert data["title"] == "Read 20 pages"
    assert data["assigned_date"] == "2026-03-11"
    assert data["coin_reward"] == 8


def test_conflicting_status_flags_rejected(client):
    headers = _auth(client)
    task = _create(client, headers)

    r = client.put(
        f"/api/tasks/{task['id']}",
        headers=headers,
        json={"status_flags": {"completed": True, "pending": True}},
    )

    assert r.status_code == 422
    assert client.get(f"/api/tasks/{task['id']}", headers=headers).json()["status"] == "pending"


def test_status_flags_cannot_bypass_rewards(client):
    headers = _auth(client)
    task = _create(client, headers)

    r = client.put(f"/api/tasks/{task['id']}", headers=headers, json={"status_flags": {"completed": True}})

    assert r.status_code == 400
    assert client.get("/api/stats", headers=headers).json()["current_exp"] == 0


def test_failed_task_can_be_reopened(client):
    headers = _auth(client)
    task = _create(client, headers)
    client.post(f"/api/tasks/{task['id']}/fail", headers=headers)

    r = client.put(f"/api/tasks/{task['id']}", headers=headers, json={"status_flags": {"pending": True}})

    assert r.status_code == 200
    assert r.json()["status"] == "pending"
    # Reopening does not refund the penalty.
    assert client.get("/api/stats", headers=headers).json()["hearts"] == 9


def test_list_filters(client):
    headers = _auth(client)
    habit = _create(client, headers, type="habit", assigned_date="2026-03-09")
    todo = _create(client, headers, type="todo", assigned_date="2026-03-10")
    done = _create(client, headers, type="todo", assigned_date="2026-03-10")
    client.post(f"/api/tasks/{done['id']}/complete", headers=headers)

    all_ids = [t["id"] for t in client.get("/api/tasks", headers=headers).json()]
    assert all_ids == [habit["id"], todo["id"], done["id"]]

    habits = client.get("/api/tasks", headers=headers, params={"type": "habit"}).json()
    assert [t["id"] for t in habits] == [habit["id"]]

    on_day = client.get("/api/tasks", headers=headers, params={"date": "2026-03-10"}).json()
    assert {t["id"] for t in on_day} == {todo["id"], done["id"]}

    pending = client.get("/api/tasks", headers=headers, params={"date": "2026-03-10", "status": "pending"}).json()
    assert [t["id"] for t in pending] == [todo["id"]]


def test_delete_task(client):
    headers = _auth(client)
    task = _create(client, headers)

    assert client.delete(f"/api/tasks/{task['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/tasks/{task['id']}", headers=headers).status_code == 404


def test_fail_charges_current_penalty_rules(client):
    headers = _auth(client)
    task = _create(client, headers)
    assert (task["heart_loss"], task["coin_loss"]) == (1, 2)

    client.app.dependency_overrides[get_game_rules] = lambda: GameRules(
        task_failure_heart_loss=3, task_failure_coin_loss=0
    )
    try:
        data = client.post(f"/api/tasks/{task['id']}/fail", headers=headers).json()
    finally:
        client.app.dependency_overrides.pop(get_game_rules)

    assert data["stats"]["hearts"] == 7
    assert (data["task"]["heart_loss"], data["task"]["coin_loss"]) == (3, 0)
