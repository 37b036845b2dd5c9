"""Tests for ui/app.py — HTTP surface over the workspace."""

import pytest
from fastapi.testclient import TestClient

from ui.app import app

MONDAY = "2025-01-13"
WEDNESDAY = "2025-01-15"


@pytest.fixture
def client(seeded_workspace):
    with TestClient(app) as c:
        yield c


def _set(client, task_id, count, day):
    resp = client.post(f"/api/completions/{task_id}/set", json={"date": day, "count": count})
    assert resp.status_code == 200
    return resp.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_startup_does_not_reseed(client):
    tasks = client.get("/api/tasks").json()["tasks"]
    assert [t["id"] for t in tasks] == ["shower", "teeth", "kitchen"]


def test_startup_seeds_empty_workspace(workspace):
    with TestClient(app) as c:
        tasks = c.get("/api/tasks").json()["tasks"]
    assert len(tasks) == 10


# ── Today & progress ──────────────────────────────────────────


def test_today_lists_scheduled_tasks(client):
    body = client.get("/api/today", params={"date": MONDAY}).json()
    assert body["date"] == MONDAY
    assert [i["task"]["id"] for i in body["items"]] == ["shower", "teeth", "kitchen"]
    assert body["items"][1]["subtitle"] == "Every day · 2x daily"
    assert body["stats"]["percentage"] == 0
    assert body["stats"]["totalTarget"] == 4
    # Shower and the chore both need one more; the chore wins the tie.
    assert body["nextAction"]["id"] == "kitchen"
    assert "gradeMessage" not in body
    assert "freshStart" not in body

    wed = client.get("/api/today", params={"date": WEDNESDAY}).json()
    assert [i["task"]["id"] for i in wed["items"]] == ["shower", "teeth"]


def test_today_without_date_reports_fresh_start(client):
    body = client.get("/api/today").json()
    assert "freshStart" in body


def test_today_rejects_bad_date(client):
    resp = client.get("/api/today", params={"date": "15/01/2025"})
    assert resp.status_code == 400


def test_all_done_has_no_next_action(client):
    _set(client, "shower", 1, WEDNESDAY)
    _set(client, "teeth", 2, WEDNESDAY)
    body = client.get("/api/today", params={"date": WEDNESDAY}).json()
    assert body["stats"]["percentage"] == 100
    assert body["nextAction"] is None
    assert body["stats"]["wins"] == ["Shower", "Brush teeth"]


def test_days_and_weeks(client):
    _set(client, "shower", 1, WEDNESDAY)
    days = client.get("/api/days", params={"n": 3, "date": WEDNESDAY}).json()["days"]
    assert [d["date"] for d in days] == ["2025-01-13", "2025-01-14", "2025-01-15"]
    assert days[-1]["percentage"] == 33

    weeks = client.get("/api/weeks", params={"n": 2, "date": WEDNESDAY}).json()["weeks"]
    assert [w["weekStartDate"] for w in weeks] == ["2025-01-05", "2025-01-12"]
    assert weeks[0]["percentage"] == 0
    assert len(weeks[1]["dailyStats"]) == 7

    assert client.get("/api/days", params={"n": 0}).status_code == 400


# ── Completions ───────────────────────────────────────────────


def test_increment_and_decrement(client):
    url = "/api/completions/teeth"
    body = client.post(f"{url}/increment", json={"date": WEDNESDAY}).json()
    assert body["countCompleted"] == 1
    assert body["stats"]["percentage"] == 33

    client.post(f"{url}/increment", json={"date": WEDNESDAY})
    body = client.post(f"{url}/increment", json={"date": WEDNESDAY}).json()
    assert body["countCompleted"] == 2

    body = client.post(f"{url}/decrement", json={"date": WEDNESDAY}).json()
    assert body["countCompleted"] == 1


def test_set_completion_clamps_to_target(client):
    assert _set(client, "shower", 9, WEDNESDAY)["countCompleted"] == 1
    assert _set(client, "shower", 0, WEDNESDAY)["countCompleted"] == 0


def test_completion_errors(client):
    assert client.post("/api/completions/nope/increment", json={}).status_code == 404
    assert client.post("/api/completions/shower/explode", json={}).status_code == 400
    resp = client.post("/api/completions/shower/set", json={"count": "lots"})
    assert resp.status_code == 400


# ── Tasks ─────────────────────────────────────────────────────


def test_task_crud(client):
    resp = client.post("/api/tasks", json={
        "name": "Stretch",
        "kind": "custom",
        "schedule": {"type": "every_n_days", "everyNDays": 2},
    })
    assert resp.status_code == 200
    task = resp.json()["task"]
    assert task["id"]
    assert task["schedule"] == {"type": "every_n_days", "everyNDays": 2}

    resp = client.put(f"/api/tasks/{task['id']}", json={"targetPerDay": 3})
    assert resp.json()["task"]["targetPerDay"] == 3

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 200
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_task_validation_errors(client):
    assert client.post("/api/tasks", json={"name": ""}).status_code == 400
    assert client.put("/api/tasks/shower", json={"targetPerDay": 0}).status_code == 400
    assert client.put("/api/tasks/nope", json={"name": "X"}).status_code == 404


def test_delete_task_drops_its_completions(client):
    _set(client, "shower", 1, WEDNESDAY)
    client.delete("/api/tasks/shower")
    exported = client.get("/api/export").json()
    assert exported["completions"] == []


def test_archive_hides_task(client):
    client.post("/api/tasks/kitchen/archive", json={"archived": True})
    ids = [t["id"] for t in client.get("/api/tasks").json()["tasks"]]
    assert "kitchen" not in ids
    ids = [t["id"] for t in client.get("/api/tasks", params={"include_archived": True}).json()["tasks"]]
    assert "kitchen" in ids

    body = client.get("/api/today", params={"date": MONDAY}).json()
    assert [i["task"]["id"] for i in body["items"]] == ["shower", "teeth"]

    client.post("/api/tasks/kitchen/archive", json={"archived": False})
    body = client.get("/api/today", params={"date": MONDAY}).json()
    assert len(body["items"]) == 3


def test_focus_limit(client):
    extra = client.post("/api/tasks", json={"name": "Read"}).json()["task"]["id"]
    for task_id in ("shower", "teeth", "kitchen"):
        assert client.post(f"/api/tasks/{task_id}/focus", json={"focus": True}).status_code == 200
    assert client.post(f"/api/tasks/{extra}/focus", json={"focus": True}).status_code == 409

    body = client.get("/api/today", params={"date": WEDNESDAY}).json()
    assert body["stats"]["focusTasksTotal"] == 2


# ── Streaks ───────────────────────────────────────────────────


def test_streak_evaluation_and_grace_day(client):
    _set(client, "shower", 1, MONDAY)
    _set(client, "teeth", 2, MONDAY)
    _set(client, "kitchen", 1, MONDAY)
    body = client.post("/api/streaks/evaluate", json={"date": MONDAY}).json()
    assert body["streaks"]["consistencyStreak"] == 1
    assert body["streaks"]["perfectStreak"] == 1
    assert body["graceOffers"] == []

    _set(client, "shower", 1, WEDNESDAY)
    body = client.post("/api/streaks/evaluate", json={"date": WEDNESDAY}).json()
    assert body["graceOffers"] == ["consistency", "perfect"]
    assert body["streaks"]["consistencyStreak"] == 1

    resp = client.post("/api/streaks/grace", json={"streakType": "consistency", "date": "2025-01-14"})
    assert resp.status_code == 200
    assert resp.json()["streaks"]["graceDaysUsedThisWeek"] == 1

    resp = client.post("/api/streaks/grace", json={"streakType": "perfect", "date": "2025-01-14"})
    assert resp.status_code == 409

    body = client.post("/api/streaks/evaluate", json={"date": WEDNESDAY}).json()
    assert body["streaks"]["consistencyStreak"] == 2

    streaks = client.get("/api/streaks", params={"date": MONDAY}).json()
    assert streaks["streaks"]["consistencyStreak"] == 2
    assert streaks["history"] == {"consistency": 1, "perfect": 1}


def test_grace_rejects_unknown_streak_type(client):
    resp = client.post("/api/streaks/grace", json={"streakType": "legendary"})
    assert resp.status_code == 400


# ── Settings & backup ─────────────────────────────────────────


def test_settings_update_enables_grades(client):
    body = client.put("/api/settings", json={"showLetterGrades": True}).json()
    assert body["showLetterGrades"] is True
    assert body["tone"] == "gentle"

    today = client.get("/api/today", params={"date": WEDNESDAY}).json()
    assert today["gradeMessage"] == "Tomorrow is a fresh start."


def test_export_import_round_trip(client):
    _set(client, "teeth", 1, WEDNESDAY)
    backup = client.get("/api/export").json()
    client.delete("/api/tasks/teeth")

    assert client.post("/api/import", json=backup).json() == {"ok": True}
    ids = [t["id"] for t in client.get("/api/tasks").json()["tasks"]]
    assert "teeth" in ids
    body = client.get("/api/today", params={"date": WEDNESDAY}).json()
    assert body["stats"]["totalCompleted"] == 1


# ── Auth ──────────────────────────────────────────────────────


def test_basic_auth_when_configured(client, monkeypatch):
    monkeypatch.setenv("MOMENTUM_USERNAME", "me")
    monkeypatch.setenv("MOMENTUM_PASSWORD", "secret")
    assert client.get("/api/tasks").status_code == 401
    assert client.get("/api/tasks", auth=("me", "wrong")).status_code == 401
    assert client.get("/api/tasks", auth=("me", "secret")).status_code == 200
