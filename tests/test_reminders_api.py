from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from core.timeutil import utcnow


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


@pytest.fixture
def plant_path(client, alice):
    resp = client.post("/plants", json={"id": 42}, headers=alice)
    return f"/plants/{resp.json()['data']['id']}"


def _add(client, headers, plant_path, type="water", frequency=3):
    resp = client.post(f"{plant_path}/reminders", json={"type": type, "frequency": frequency}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_reminder_lifecycle(client, alice, plant_path):
    before = utcnow()
    reminder = _add(client, alice, plant_path)
    after = utcnow()

    assert reminder["type"] == "water"
    assert reminder["history"] == []
    assert reminder["lastCompleted"] is None
    assert before + timedelta(days=3) <= _ts(reminder["nextDue"]) <= after + timedelta(days=3)

    # complete
    resp = client.post(f"{plant_path}/reminders/{reminder['id']}/complete", headers=alice)
    assert resp.status_code == 200
    done = resp.json()["data"]
    t1 = _ts(done["lastCompleted"])
    assert [_ts(h) for h in done["history"]] == [t1]
    assert _ts(done["nextDue"]) == t1 + timedelta(days=3)

    # update frequency
    before = utcnow()
    resp = client.put(f"{plant_path}/reminders/{reminder['id']}", json={"frequency": 5}, headers=alice)
    after = utcnow()
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["frequency"] == 5
    assert updated["history"] == done["history"]
    assert updated["lastCompleted"] == done["lastCompleted"]
    assert before + timedelta(days=5) <= _ts(updated["nextDue"]) <= after + timedelta(days=5)

    # remove
    resp = client.delete(f"{plant_path}/reminders/{reminder['id']}", headers=alice)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Reminder deleted"}

    plant = client.get(plant_path, headers=alice).json()["data"]
    assert plant["reminders"] == []


def test_completing_twice_grows_history(client, alice, plant_path):
    reminder = _add(client, alice, plant_path, type="fertilize", frequency=14)
    path = f"{plant_path}/reminders/{reminder['id']}/complete"

    first = client.post(path, headers=alice).json()["data"]
    second = client.post(path, headers=alice).json()["data"]

    assert len(second["history"]) == len(first["history"]) + 1
    assert second["history"][:1] == first["history"]
    assert second["lastCompleted"] == second["history"][-1]


def test_reminders_keep_creation_order(client, alice, plant_path):
    ids = [_add(client, alice, plant_path, type=t)["id"] for t in ("water", "prune", "repot")]

    plant = client.get(plant_path, headers=alice).json()["data"]

    assert [r["id"] for r in plant["reminders"]] == ids


@pytest.mark.parametrize(
    "body",
    [
        {"type": "water"},
        {"frequency": 3},
        {"type": "water", "frequency": 0},
        {"type": "water", "frequency": -2},
        {"type": "sing", "frequency": 3},
        {"type": "water", "frequency": True},
        {"type": "water", "frequency": "3"},
    ],
)
def test_add_reminder_validation(client, alice, plant_path, body):
    resp = client.post(f"{plant_path}/reminders", json=body, headers=alice)

    assert resp.status_code == 400
    assert client.get(plant_path, headers=alice).json()["data"]["reminders"] == []


def test_add_reminder_to_unknown_plant(client, alice):
    resp = client.post(f"/plants/{uuid4()}/reminders", json={"type": "water", "frequency": 3}, headers=alice)

    assert resp.status_code == 404
    assert resp.json() == {"message": "Plant not found"}


def test_update_reminder_requires_a_field(client, alice, plant_path):
    reminder = _add(client, alice, plant_path)

    resp = client.put(f"{plant_path}/reminders/{reminder['id']}", json={}, headers=alice)

    assert resp.status_code == 400


@pytest.mark.parametrize(
    "method, suffix, body",
    [
        ("put", "", {"frequency": 2}),
        ("delete", "", None),
        ("post", "/complete", None),
    ],
)
def test_unknown_reminder_is_distinguished_from_unknown_plant(client, alice, plant_path, method, suffix, body):
    kwargs = {"headers": alice}
    if body is not None:
        kwargs["json"] = body

    missing_reminder = getattr(client, method)(f"{plant_path}/reminders/{uuid4()}{suffix}", **kwargs)
    missing_plant = getattr(client, method)(f"/plants/{uuid4()}/reminders/{uuid4()}{suffix}", **kwargs)

    assert missing_reminder.status_code == 404
    assert missing_reminder.json() == {"message": "Reminder not found"}
    assert missing_plant.status_code == 404
    assert missing_plant.json() == {"message": "Plant not found"}


def test_other_user_cannot_complete_reminder(client, alice, bob, plant_path):
    reminder = _add(client, alice, plant_path)

    resp = client.post(f"{plant_path}/reminders/{reminder['id']}/complete", headers=bob)

    assert resp.status_code == 404
    plant = client.get(plant_path, headers=alice).json()["data"]
    assert plant["reminders"][0]["history"] == []


@pytest.mark.parametrize("frequency", [True, "5", 2.5])
def test_update_reminder_rejects_non_integer_frequency(client, alice, plant_path, frequency):
    reminder = _add(client, alice, plant_path)

    resp = client.put(f"{plant_path}/reminders/{reminder['id']}", json={"frequency": frequency}, headers=alice)

    assert resp.status_code == 400
    plant = client.get(plant_path, headers=alice).json()["data"]
    assert plant["reminders"][0]["frequency"] == 3


@pytest.mark.parametrize(
    "method, suffix, body",
    [
        ("put", "", {"frequency": 2}),
        ("delete", "", None),
        ("post", "/complete", None),
    ],
)
def test_malformed_plant_id_is_reported_before_reminder_id(client, alice, method, suffix, body):
    kwargs = {"headers": alice}
    if body is not None:
        kwargs["json"] = body

    resp = getattr(client, method)(f"/plants/not-a-uuid/reminders/not-a-uuid{suffix}", **kwargs)

    assert resp.status_code == 404
    assert resp.json() == {"message": "Plant not found"}
