"""
Tests de registros de salud
"""
import pytest
from datetime import date

from app.exceptions import NotFoundError, ValidationError
from app.services.health import HealthService
from conftest import add_dog, http

TODAY = date(2024, 3, 10)


@pytest.fixture
def health(dogs_repo, litters_repo, puppies_repo, events_repo):
    return HealthService(dogs_repo, litters_repo, puppies_repo, events_repo)

@pytest.mark.asyncio
async def test_vaccine_sets_reminder(health, dogs_repo):
    rex = add_dog(dogs_repo, "Rex", "male")

    event = await health.record("vaccine", "dog", rex, "2024-03-01", {
        "name": "Polivalente", "batch": "L-77", "next_dose_date": "2025-03-01", "ignored": "x",
    }, notes="Sin reacción")

    assert event["event_type"] == "vaccine"
    assert event["payload"] == {"name": "Polivalente", "batch": "L-77", "next_dose_date": "2025-03-01"}
    assert event["reminder_date"] == "2025-03-01"
    assert event["reminder_completed"] is False
    assert event["notes"] == "Sin reacción"

@pytest.mark.asyncio
async def test_record_validation(health, dogs_repo, puppies_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    puppy = puppies_repo.add(litter_id="l1", identifier="M-1", sex="male", status="available")

    with pytest.raises(ValidationError) as exc:
        await health.record("deworming", "dog", rex, None, {"dosage": "1 comp."})
    assert "product" in exc.value.errors

    with pytest.raises(ValidationError):
        await health.record("massage", "dog", rex, None, {})
    with pytest.raises(ValidationError):
        await health.record("exam", "cat", rex, None, {"type": "sangre"})
    with pytest.raises(NotFoundError):
        await health.record("exam", "litter", rex, None, {"type": "sangre"})

    # vet_visit no tiene campo obligatorio; sin fecha usa hoy
    visit = await health.record("vet_visit", "puppy", puppy, None, {})
    assert visit["event_date"] == date.today().isoformat()
    assert visit["reminder_date"] is None

@pytest.mark.asyncio
async def test_history_only_health_events(health, dogs_repo, events_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    await health.record("exam", "dog", rex, "2024-01-10", {"type": "displasia", "result": "A"})
    await health.record("surgery", "dog", rex, "2024-02-10", {"type": "castración"})
    events_repo.add(entity_type="dog", entity_id=rex, event_type="show", event_date="2024-02-20", payload={})

    history = await health.history("dog", rex)
    assert [e["event_type"] for e in history] == ["surgery", "exam"]

@pytest.mark.asyncio
async def test_upcoming_and_overdue(health, dogs_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    await health.record("vaccine", "dog", rex, "2023-03-01", {"name": "Rabia", "next_dose_date": "2024-03-01"})
    await health.record("vaccine", "dog", rex, "2024-02-01", {"name": "Tos", "next_dose_date": "2024-03-20"})
    await health.record("deworming", "dog", rex, "2024-01-01", {"product": "Milbemax", "next_dose_date": "2024-04-01"})
    await health.record("vet_visit", "dog", rex, "2024-01-01", {"reason": "control", "next_visit_date": "2024-02-01"})

    upcoming = await health.upcoming("vaccine", days=30, today=TODAY)
    assert [e["payload"]["name"] for e in upcoming] == ["Tos"]
    dewormings = await health.upcoming("deworming", days=30, today=TODAY)
    assert [e["payload"]["product"] for e in dewormings] == ["Milbemax"]

    overdue = await health.overdue(today=TODAY)
    assert [e["payload"]["name"] for e in overdue] == ["Rabia"]


@pytest.mark.asyncio
async def test_health_api(auth_app, dogs_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    async with http(auth_app) as ac:
        resp = await ac.post("/health-events/vaccine", json={
            "entity_id": rex, "event_date": "2024-03-01", "name": "Polivalente", "next_dose_date": "2000-01-01",
        })
        assert resp.status_code == 201
        assert resp.json()["reminder_date"] == "2000-01-01"
        assert resp.json()["created_by"] == "user-1"

        resp = await ac.post("/health-events/deworming", json={"entity_id": rex})
        assert resp.status_code == 422

        resp = await ac.post("/health-events/vet-visit", json={"entity_id": rex, "reason": "cojera"})
        assert resp.status_code == 201
        assert resp.json()["event_type"] == "vet_visit"

        resp = await ac.post("/health-events/exam", json={
            "entity_type": "puppy", "entity_id": "507f1f77bcf86cd799439011", "type": "sangre",
        })
        assert resp.status_code == 404

        resp = await ac.get(f"/health-events/history/dog/{rex}")
        assert sorted(e["event_type"] for e in resp.json()) == ["vaccine", "vet_visit"]

        resp = await ac.get("/health-events/overdue")
        assert [e["payload"]["name"] for e in resp.json()] == ["Polivalente"]

        resp = await ac.get("/health-events/upcoming-vaccines", params={"days": 7})
        assert resp.json() == []

        # /health sigue siendo el healthcheck
        resp = await ac.get("/health")
        assert resp.json()["status"] == "ok"

@pytest.mark.asyncio
async def test_health_records_require_manage_kennel(anon_app, dogs_repo):
    from app.security import create_access_token
    rex = add_dog(dogs_repo, "Rex", "male")
    headers = {"Authorization": f"Bearer {create_access_token('user-2', ['manage_dogs'])}"}

    async with http(anon_app) as ac:
        resp = await ac.post("/health-events/exam", headers=headers, json={"entity_id": rex, "type": "sangre"})
        assert resp.status_code == 403

        resp = await ac.get(f"/health-events/history/dog/{rex}", headers=headers)
        assert resp.status_code == 200
