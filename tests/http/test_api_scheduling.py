from __future__ import annotations


def _seeded_shift(client) -> dict:
    shifts = client.get("/api/shifts").get_json()["shifts"]
    assert len(shifts) == 1
    return shifts[0]


def test_admin_sees_seeded_shift_with_staffing(client, login):
    login("admin@holitime.local", "admin123")
    view = _seeded_shift(client)

    assert view["live_status"] == "Scheduled"
    assert view["staffing"]["display"] == "2 of 4 Workers Assigned"
    assert view["worker_requirements"][0] == {"roleCode": "CC", "requiredCount": 1}
    assert view["shift"]["job_name"] == "Arena Load-In"


def test_worker_slots_endpoint(client, login):
    login("staff@holitime.local", "staff123")
    shift_id = _seeded_shift(client)["shift"]["shift_id"]

    slots = client.get(f"/api/shifts/{shift_id}/slots").get_json()["slots"]
    assert [(s["roleCode"], s["kind"]) for s in slots] == [
        ("CC", "assigned"),
        ("SH", "assigned"),
        ("SH", "empty"),
        ("FO", "empty"),
    ]


def test_employee_cannot_create_shift_or_read_reports(client, login):
    login("employee@holitime.local", "employee123")
    view = _seeded_shift(client)

    resp = client.post("/api/shifts", json={"job_id": view["shift"]["job_id"], "date": "2030-01-01"})
    assert resp.status_code == 403
    assert client.get(f"/api/jobs/{view['shift']['job_id']}/report").status_code == 403

    upcoming = client.get("/api/shifts/upcoming").get_json()["shifts"]
    assert [v["shift"]["shift_id"] for v in upcoming] == [view["shift"]["shift_id"]]


def test_company_user_dashboard(client, login):
    login("client@holitime.local", "client123")
    data = client.get("/api/dashboard").get_json()["dashboard"]
    assert data["role"] == "CompanyUser"
    assert data["total_jobs"] == 1
    assert data["pending_company_approval"] == []


def test_admin_posts_announcement(client, login):
    login("admin@holitime.local", "admin123")
    resp = client.post("/api/announcements", json={"title": "Load-in moved", "content": "Doors open at 7"})
    assert resp.status_code == 201

    items = client.get("/api/announcements").get_json()["announcements"]
    assert items[0]["title"] == "Load-in moved"
    assert items[0]["author_name"] == "Admin User"
