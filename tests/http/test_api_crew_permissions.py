from __future__ import annotations

from holitime.crew_permissions.model import PermissionType


def _ids(client) -> tuple[int, int, int]:
    users = client.get("/api/users?role=CrewChief").get_json()["users"]
    shift = client.get("/api/shifts").get_json()["shifts"][0]["shift"]
    return users[0]["user_id"], shift["shift_id"], shift["job_id"]


def test_admin_grants_lists_and_revokes(client, login):
    login("admin@holitime.local", "admin123")
    chief_id, _, job_id = _ids(client)

    resp = client.post(
        "/api/crew-chief-permissions",
        json={"userId": chief_id, "permissionType": "job", "targetId": job_id},
    )
    assert resp.status_code == 201

    again = client.post(
        "/api/crew-chief-permissions",
        json={"userId": chief_id, "permissionType": "job", "targetId": job_id},
    )
    assert again.status_code == 409

    listed = client.get(f"/api/crew-chief-permissions?userId={chief_id}").get_json()["permissions"]
    assert [(p["permission_type"], p["target_id"]) for p in listed] == [("job", job_id)]
    assert listed[0]["user_name"]

    resp = client.delete(f"/api/crew-chief-permissions?userId={chief_id}&permissionType=job&targetId={job_id}")
    assert resp.status_code == 200
    assert client.get("/api/crew-chief-permissions").get_json()["permissions"] == []


def test_staff_cannot_grant(client, login):
    login("staff@holitime.local", "staff123")
    resp = client.post("/api/crew-chief-permissions", json={"userId": 1, "permissionType": "shift", "targetId": 1})
    assert resp.status_code == 403


def test_sql_grant_lookup_follows_shift_job_and_client(app, client, login):
    login("admin@holitime.local", "admin123")
    chief_id, shift_id, job_id = _ids(client)
    container = app.extensions["holitime.container"]
    grants = container.crew_permissions_repo

    with app.app_context():
        company_id = container.shifts_repo.get_by_id(shift_id).company_id
        assert grants.has_shift_access(user_id=chief_id, shift_id=shift_id) is False

        grants.create(user_id=chief_id, permission_type=PermissionType.CLIENT, target_id=company_id, granted_by=None)
        assert grants.has_shift_access(user_id=chief_id, shift_id=shift_id) is True
        assert grants.has_shift_access(user_id=chief_id, shift_id=shift_id + 999) is False

        grants.delete(user_id=chief_id, permission_type=PermissionType.CLIENT, target_id=company_id)
        grants.create(user_id=chief_id, permission_type=PermissionType.JOB, target_id=job_id, granted_by=None)
        assert grants.has_shift_access(user_id=chief_id, shift_id=shift_id) is True
