"""API tests for appointment, schedule, notification and justification endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

API = "/api/v1"


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health check endpoint."""
    response = await client.get(f"{API}/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient):
    response = await client.get(f"{API}/health/detailed")
    assert response.status_code == 200
    data = response.json()
    assert data["redis"] == "disabled"
    assert data["notifications"] == "disabled"
    assert data["messenger"] == "log"


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    response = await client.get(f"{API}/ping")
    assert response.status_code == 200
    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get(f"{API}/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_ping_is_not_request_logged(client: AsyncClient):
    response = await client.get(f"{API}/ping", headers={"X-Request-ID": "abc123"})
    assert response.status_code == 200
    assert "X-Request-ID" not in response.headers


@pytest.mark.asyncio
async def test_create_appointment(
    client: AsyncClient, sample_appointment_data, people, service_types
):
    """Test creating an appointment."""
    response = await client.post(f"{API}/appointments/", json=sample_appointment_data)

    assert response.status_code == 201
    data = response.json()
    appointment = data["appointment"]
    assert appointment["time"] == "09:00"
    assert appointment["status"] == "pending"
    assert appointment["primary_patient_id"] == str(people["ana"].id)
    assert appointment["primary_doctor_id"] == str(people["carla"].id)
    assert data["kind"] == "create"
    assert data["notification_records"] == 1
    assert data["messages_sent"] == 0


@pytest.mark.asyncio
async def test_create_with_legacy_fields(client: AsyncClient, people, service_types):
    response = await client.post(
        f"{API}/appointments/",
        json={
            "patient_id": str(people["bruno"].id),
            "doctor_id": str(people["diego"].id),
            "date": "2030-01-07",
            "time": "10:00:00",
            "service_type": "Follow-up",
        },
    )

    assert response.status_code == 201
    assert response.json()["appointment"]["doctor_ids"] == [str(people["diego"].id)]


@pytest.mark.asyncio
async def test_double_booking_returns_conflict(
    client: AsyncClient, sample_appointment_data, people, service_types
):
    first = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    again = {**sample_appointment_data, "patient_ids": [str(people["bruno"].id)]}

    response = await client.post(f"{API}/appointments/", json=again)

    assert response.status_code == 409
    data = response.json()
    assert data["error"] == "ConflictException"
    assert data["conflicting_appointment_id"] == first.json()["appointment"]["id"]


@pytest.mark.asyncio
async def test_illegal_slot_names_field(
    client: AsyncClient, sample_appointment_data, service_types
):
    response = await client.post(
        f"{API}/appointments/", json={**sample_appointment_data, "time": "12:30"}
    )

    assert response.status_code == 422
    assert response.json()["field"] == "time"


@pytest.mark.asyncio
async def test_missing_patient_names_field(client: AsyncClient, sample_appointment_data):
    response = await client.post(
        f"{API}/appointments/", json={**sample_appointment_data, "patient_ids": []}
    )

    assert response.status_code == 422
    assert response.json()["field"] == "patient_ids"


@pytest.mark.asyncio
async def test_list_and_get_appointment(
    client: AsyncClient, sample_appointment_data, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]

    response = await client.get(
        f"{API}/appointments/", params={"from_date": "2030-01-01", "to_date": "2030-01-31"}
    )
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await client.get(f"{API}/appointments/{appointment_id}")
    assert response.status_code == 200
    assert response.json()["notes"] == "First visit"


@pytest.mark.asyncio
async def test_list_rejects_inverted_range(client: AsyncClient):
    response = await client.get(
        f"{API}/appointments/", params={"from_date": "2030-01-31", "to_date": "2030-01-01"}
    )

    assert response.status_code == 422
    assert response.json()["field"] == "to_date"


@pytest.mark.asyncio
async def test_reschedule_through_api(
    client: AsyncClient, sample_appointment_data, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]

    response = await client.put(f"{API}/appointments/{appointment_id}", json={"time": "15:00"})

    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "reschedule"
    assert data["appointment"]["time"] == "15:00"


@pytest.mark.asyncio
async def test_invalid_transition(
    client: AsyncClient, sample_appointment_data, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]

    response = await client.put(
        f"{API}/appointments/{appointment_id}", json={"status": "completed"}
    )

    assert response.status_code == 409
    assert response.json()["current_status"] == "pending"


@pytest.mark.asyncio
async def test_weekly_occurrence_cannot_be_updated(client: AsyncClient):
    response = await client.put(
        f"{API}/appointments/{uuid4()}::2030-01-14", json={"notes": "moved"}
    )

    assert response.status_code == 422
    assert response.json()["field"] == "id"


@pytest.mark.asyncio
async def test_cancel_appointment(
    client: AsyncClient, sample_appointment_data, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]

    response = await client.post(
        f"{API}/appointments/{appointment_id}/cancel", json={"notes": "Travelling"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "cancel"
    assert data["appointment"]["status"] == "cancelled"


@pytest.mark.asyncio
async def test_delete_appointment(
    client: AsyncClient, sample_appointment_data, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]

    response = await client.delete(f"{API}/appointments/{appointment_id}")
    assert response.status_code == 200
    assert response.json()["deleted"] is True

    response = await client.get(f"{API}/appointments/{appointment_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_nonexistent_appointment(client: AsyncClient):
    response = await client.get(f"{API}/appointments/{uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_slots(client: AsyncClient):
    saturday = await client.get(f"{API}/schedule/slots", params={"date": "2030-01-05"})
    sunday = await client.get(f"{API}/schedule/slots", params={"date": "2030-01-06"})
    garbage = await client.get(f"{API}/schedule/slots", params={"date": "soon"})

    assert saturday.json()["slots"] == ["08:00", "09:00", "10:00", "11:00", "12:00"]
    assert sunday.json()["slots"] == []
    assert garbage.status_code == 200
    assert garbage.json()["slots"] == []


@pytest.mark.asyncio
async def test_service_types(client: AsyncClient, service_types):
    response = await client.get(f"{API}/service-types")

    assert response.status_code == 200
    data = response.json()
    assert [item["name"] for item in data] == ["Consultation", "Follow-up"]
    assert data[1]["duration_minutes"] == 30


@pytest.mark.asyncio
async def test_notification_inbox(
    client: AsyncClient, sample_appointment_data, people, service_types
):
    await client.post(f"{API}/appointments/", json=sample_appointment_data)
    carla = people["carla"].id

    response = await client.get(f"{API}/notifications/{carla}")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["kind"] == "create"

    notification_id = data["items"][0]["id"]
    response = await client.delete(f"{API}/notifications/{notification_id}")
    assert response.status_code == 204

    response = await client.delete(f"{API}/notifications/{notification_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_justification_endpoints(
    client: AsyncClient, sample_appointment_data, people, service_types
):
    created = await client.post(f"{API}/appointments/", json=sample_appointment_data)
    appointment_id = created.json()["appointment"]["id"]
    carla, diego = str(people["carla"].id), str(people["diego"].id)
    payload = {
        "appointment_id": appointment_id,
        "doctor_id": carla,
        "reason": "Conference",
        "description": "Presenting at a medical congress",
        "date": "2030-01-07",
    }

    response = await client.post(f"{API}/justifications/", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["cancellation"]["appointment"]["status"] == "cancelled"
    assert data["reschedule_records"] == 1
    justification_id = data["justification"]["id"]

    response = await client.get(f"{API}/justifications/", params={"doctor_id": carla})
    assert response.json()["total"] == 1

    response = await client.delete(
        f"{API}/justifications/{justification_id}", params={"doctor_id": diego}
    )
    assert response.status_code == 403

    response = await client.delete(
        f"{API}/justifications/{justification_id}", params={"doctor_id": carla}
    )
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_justification_requires_description(client: AsyncClient):
    response = await client.post(
        f"{API}/justifications/",
        json={
            "appointment_id": str(uuid4()),
            "doctor_id": str(uuid4()),
            "reason": "Illness",
            "description": "short",
            "date": "2030-01-07",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"
