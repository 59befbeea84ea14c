# This project was developed with assistance from AI tools.
"""HTTP-level tests: routing, RBAC gates, response shape and error mapping."""

from datetime import UTC, datetime, timedelta

import pytest

from personas import ALICE_USER_ID, admin, reviewer, sponsor_contact, student_alice, student_bruno

pytestmark = pytest.mark.integration


def _window(days_from_now_start=-1, days_from_now_end=30):
    now = datetime.now(UTC)
    return (
        (now + timedelta(days=days_from_now_start)).isoformat(),
        (now + timedelta(days=days_from_now_end)).isoformat(),
    )


async def _create_cycle(client, sponsor_id, **overrides):
    start, end = _window()
    body = {
        "sponsor_id": sponsor_id,
        "name": "STEM Excellence",
        "description": "Tuition support",
        "amount": "2500.00",
        "max_recipients": 2,
        "application_start_date": start,
        "application_deadline": end,
        "eligibility_criteria": ["GPA >= 3.0"],
    }
    body.update(overrides)
    return await client.post("/api/cycles/", json=body)


# ---------------------------------------------------------------------------
# Health and sponsors
# ---------------------------------------------------------------------------


async def test_health(client_factory):
    client = await client_factory(admin())
    resp = await client.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["database"] == "ok"
    await client.aclose()


async def test_sponsor_crud(client_factory):
    client = await client_factory(admin())
    resp = await client.post(
        "/api/sponsors/", json={"name": "Acme Foundation", "type": "ORGANIZATION"}
    )
    assert resp.status_code == 201
    sponsor_id = resp.json()["id"]

    resp = await client.get(f"/api/sponsors/{sponsor_id}")
    assert resp.json()["name"] == "Acme Foundation"

    resp = await client.get("/api/sponsors/")
    assert resp.json()["pagination"]["total"] == 1

    resp = await client.get("/api/sponsors/999")
    assert resp.status_code == 404
    assert resp.json()["title"] == "Not Found"
    await client.aclose()


async def test_sponsors_are_admin_only(client_factory):
    client = await client_factory(sponsor_contact())
    resp = await client.get("/api/sponsors/")
    assert resp.status_code == 403
    await client.aclose()


async def test_sponsor_update_and_delete(client_factory, sponsor):
    client = await client_factory(admin())
    resp = await client.patch(
        f"/api/sponsors/{sponsor.id}", json={"email": "grants@lumiere.org", "is_active": False}
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "grants@lumiere.org"
    assert resp.json()["is_active"] is False
    assert resp.json()["name"] == "Fondation Lumière"

    assert (await _create_cycle(client, sponsor.id)).status_code == 201
    resp = await client.delete(f"/api/sponsors/{sponsor.id}")
    assert resp.status_code == 409
    assert "program" in resp.json()["detail"]

    created = await client.post("/api/sponsors/", json={"name": "Unused Fund"})
    resp = await client.delete(f"/api/sponsors/{created.json()['id']}")
    assert resp.status_code == 204
    assert (await client.patch("/api/sponsors/999", json={"name": "x"})).status_code == 404
    await client.aclose()


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------


async def test_create_and_get_cycle(client_factory, sponsor):
    client = await client_factory(admin())
    resp = await _create_cycle(client, sponsor.id, type="MERIT_BASED")
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "OPEN"
    assert data["type"] == "MERIT_BASED"
    assert data["sponsor"] == "Fondation Lumière"
    assert data["eligibility_criteria"] == ["GPA >= 3.0"]
    assert data["max_recipients"] == 2
    assert data["remaining_slots"] == 2
    assert data["current_applications"] == 0

    resp = await client.get(f"/api/cycles/{data['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == data["id"]
    await client.aclose()


async def test_cycle_type_defaults_to_full(client_factory, sponsor):
    client = await client_factory(admin())
    resp = await _create_cycle(client, sponsor.id)
    assert resp.json()["type"] == "FULL"
    await client.aclose()


async def test_future_window_reads_as_draft(client_factory, sponsor):
    client = await client_factory(admin())
    start, end = _window(10, 40)
    resp = await _create_cycle(
        client, sponsor.id, application_start_date=start, application_deadline=end
    )
    assert resp.json()["status"] == "DRAFT"
    await client.aclose()


async def test_create_cycle_without_sponsor_or_program(client_factory):
    client = await client_factory(admin())
    resp = await _create_cycle(client, None)
    assert resp.status_code == 422
    assert "sponsor_id" in resp.json()["detail"]
    await client.aclose()


async def test_create_cycle_unknown_sponsor_conflicts(client_factory):
    client = await client_factory(admin())
    resp = await _create_cycle(client, 777)
    assert resp.status_code == 409
    await client.aclose()


async def test_create_cycle_inverted_window_rejected(client_factory, sponsor):
    client = await client_factory(admin())
    start, end = _window()
    resp = await _create_cycle(
        client, sponsor.id, application_start_date=end, application_deadline=start
    )
    assert resp.status_code == 422
    await client.aclose()


async def test_students_cannot_create_cycles(client_factory, sponsor):
    client = await client_factory(student_alice())
    resp = await _create_cycle(client, sponsor.id)
    assert resp.status_code == 403
    await client.aclose()


async def test_update_cycle(client_factory, sponsor):
    client = await client_factory(admin())
    cycle_id = (await _create_cycle(client, sponsor.id)).json()["id"]

    resp = await client.put(
        f"/api/cycles/{cycle_id}",
        json={"max_recipients": 9, "status": "SUSPENDED", "type": "PARTIAL", "name": "Renamed"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["max_recipients"] == 9
    assert data["available_slots"] == 9
    assert data["status"] == "SUSPENDED"
    assert data["type"] == "PARTIAL"
    assert data["name"] == "Renamed"
    assert data["eligibility_criteria"] == ["GPA >= 3.0"]
    await client.aclose()


async def test_update_unknown_cycle_is_404(client_factory):
    client = await client_factory(admin())
    resp = await client.put("/api/cycles/5150", json={"amount": "10"})
    assert resp.status_code == 404
    await client.aclose()


async def test_list_cycles_with_status_filter(client_factory, sponsor):
    client = await client_factory(admin())
    await _create_cycle(client, sponsor.id, academic_year="2026-2027")
    await _create_cycle(client, sponsor.id, academic_year="2027-2028", status="CLOSED")

    resp = await client.get("/api/cycles/")
    body = resp.json()
    assert body["pagination"]["total"] == 2
    assert [c["academic_year"] for c in body["data"]] == ["2027-2028", "2026-2027"]

    resp = await client.get("/api/cycles/", params={"status": "CLOSED"})
    assert [c["academic_year"] for c in resp.json()["data"]] == ["2027-2028"]
    await client.aclose()


async def test_program_cycles(client_factory, sponsor):
    client = await client_factory(admin())
    program_id = (await _create_cycle(client, sponsor.id)).json()["program_id"]

    student = await client_factory(student_alice())
    resp = await student.get(f"/api/programs/{program_id}/cycles")
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    resp = await student.get("/api/programs/31337/cycles")
    assert resp.status_code == 404
    await client.aclose()
    await student.aclose()


async def test_program_list_and_detail(client_factory, sponsor):
    client = await client_factory(admin())
    merit = (await _create_cycle(client, sponsor.id, type="MERIT_BASED")).json()
    await _create_cycle(client, sponsor.id, name="Arts Bursary", status="SUSPENDED")

    resp = await client.get(f"/api/programs/{merit['program_id']}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "STEM Excellence"
    assert body["sponsor"] == "Fondation Lumière"
    assert [c["id"] for c in body["cycles"]] == [merit["id"]]
    assert body["cycles"][0]["type"] == "MERIT_BASED"

    resp = await client.get("/api/programs/")
    assert resp.json()["pagination"]["total"] == 2

    resp = await client.get("/api/programs/", params={"type": "MERIT_BASED"})
    assert [p["id"] for p in resp.json()["data"]] == [merit["program_id"]]

    resp = await client.get("/api/programs/", params={"status": "SUSPENDED"})
    assert [p["name"] for p in resp.json()["data"]] == ["Arts Bursary"]

    resp = await client.get("/api/cycles/", params={"type": "FULL"})
    assert resp.json()["data"][0]["name"].startswith("Arts Bursary")
    assert resp.json()["pagination"]["total"] == 1

    assert (await client.get("/api/programs/31337")).status_code == 404
    assert (await client.get("/api/programs/", params={"type": "BOGUS"})).status_code == 422
    await client.aclose()


async def test_delete_cycle(client_factory, sponsor):
    client = await client_factory(admin())
    cycle_id = (await _create_cycle(client, sponsor.id)).json()["id"]
    await client.post("/api/applications/", json={"cycle_id": cycle_id, "applicant_id": "x"})

    resp = await client.delete(f"/api/cycles/{cycle_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/cycles/{cycle_id}")).status_code == 404
    assert (await client.delete(f"/api/cycles/{cycle_id}")).status_code == 404
    await client.aclose()


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


async def test_application_lifecycle(client_factory, open_cycle):
    student = await client_factory(student_alice())
    resp = await student.post(
        "/api/applications/",
        json={
            "cycle_id": open_cycle.id,
            "motivation_letter": "Because",
            "academic_info": {"institution": "Uni", "gpa": 3.7},
            "document_ids": ["doc-9"],
        },
    )
    assert resp.status_code == 201
    app = resp.json()
    assert app["status"] == "DRAFT"
    assert app["applicant_id"] == ALICE_USER_ID
    assert app["document_ids"] == ["doc-9"]
    assert app["academic_info"]["gpa"] == 3.7

    resp = await student.put(
        f"/api/applications/{app['id']}", json={"financial_info": {"dependents": 3}}
    )
    assert resp.status_code == 200
    assert resp.json()["financial_info"]["dependents"] == 3
    assert resp.json()["academic_info"]["institution"] == "Uni"

    resp = await student.patch(f"/api/applications/{app['id']}/submit")
    assert resp.json()["status"] == "SUBMITTED"

    staff = await client_factory(reviewer())
    resp = await staff.patch(
        f"/api/applications/{app['id']}/review",
        json={"status": "APPROVED", "comments": "Strong file", "score": 95},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "APPROVED"
    assert resp.json()["decision_notes"] == "Strong file"

    resp = await staff.get(f"/api/applications/{app['id']}/history")
    assert [h["action"] for h in resp.json()] == ["CREATED", "UPDATED", "SUBMITTED", "REVIEWED"]

    # Terminal: further changes are conflicts
    student = await client_factory(student_alice())
    resp = await student.patch(f"/api/applications/{app['id']}/withdraw")
    assert resp.status_code == 409
    await staff.aclose()
    await student.aclose()


async def test_capacity_and_duplicates_map_to_409(client_factory, make_cycle):
    cycle = await make_cycle(max_recipients=1)
    client = await client_factory(student_alice())
    assert (await client.post("/api/applications/", json={"cycle_id": cycle.id})).status_code == 201

    resp = await client.post("/api/applications/", json={"cycle_id": cycle.id})
    assert resp.status_code == 409
    assert "already has an active application" in resp.json()["detail"]

    other = await client_factory(student_bruno())
    resp = await other.post("/api/applications/", json={"cycle_id": cycle.id})
    assert resp.status_code == 409
    assert "no remaining slots" in resp.json()["detail"]
    await client.aclose()
    await other.aclose()


async def test_remaining_slots_reflect_active_applications(client_factory, make_cycle):
    cycle = await make_cycle(max_recipients=3)
    student = await client_factory(student_alice())
    app_id = (await student.post("/api/applications/", json={"cycle_id": cycle.id})).json()["id"]

    resp = await student.get(f"/api/cycles/{cycle.id}")
    assert resp.json()["remaining_slots"] == 2

    await student.patch(f"/api/applications/{app_id}/withdraw")
    resp = await student.get(f"/api/cycles/{cycle.id}")
    assert resp.json()["remaining_slots"] == 3
    await student.aclose()


async def test_application_for_unknown_cycle_is_404(client_factory):
    client = await client_factory(student_alice())
    resp = await client.post("/api/applications/", json={"cycle_id": 4040})
    assert resp.status_code == 404
    await client.aclose()


async def test_students_only_see_their_own(client_factory, open_cycle):
    alice = await client_factory(student_alice())
    alice_app = (await alice.post("/api/applications/", json={"cycle_id": open_cycle.id})).json()

    bruno = await client_factory(student_bruno())
    await bruno.post("/api/applications/", json={"cycle_id": open_cycle.id})
    resp = await bruno.get("/api/applications/")
    assert resp.json()["pagination"]["total"] == 1
    assert (await bruno.get(f"/api/applications/{alice_app['id']}")).status_code == 404
    await alice.aclose()
    await bruno.aclose()


async def test_students_cannot_review(client_factory, open_cycle):
    client = await client_factory(student_alice())
    app_id = (await client.post("/api/applications/", json={"cycle_id": open_cycle.id})).json()["id"]
    await client.patch(f"/api/applications/{app_id}/submit")

    resp = await client.patch(
        f"/api/applications/{app_id}/review", json={"status": "APPROVED"}
    )
    assert resp.status_code == 403
    await client.aclose()


async def test_review_score_out_of_range_is_422(client_factory, open_cycle):
    client = await client_factory(admin())
    app_id = (
        await client.post(
            "/api/applications/", json={"cycle_id": open_cycle.id, "applicant_id": "s1"}
        )
    ).json()["id"]
    resp = await client.patch(
        f"/api/applications/{app_id}/review", json={"status": "APPROVED", "score": 101}
    )
    assert resp.status_code == 422
    await client.aclose()


async def test_delete_application_admin_only(client_factory, open_cycle):
    student = await client_factory(student_alice())
    app_id = (await student.post("/api/applications/", json={"cycle_id": open_cycle.id})).json()["id"]
    assert (await student.delete(f"/api/applications/{app_id}")).status_code == 403

    staff = await client_factory(admin())
    assert (await staff.delete(f"/api/applications/{app_id}")).status_code == 204
    assert (await staff.get(f"/api/applications/{app_id}")).status_code == 404
    await student.aclose()
    await staff.aclose()
