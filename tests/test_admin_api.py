import asyncio

from conftest import apply, auth, post_job


def test_admin_routes_need_admin(client, employer):
    assert client.get("/admin/users", headers=auth(employer)).status_code == 403
    assert client.get("/admin/stats").status_code == 401


def test_list_users_with_filters(client, admin, employer, seeker):
    everyone = client.get("/admin/users", headers=auth(admin)).json()
    assert len(everyone) == 3
    assert all("password" not in user for user in everyone)

    employers = client.get("/admin/users", params={"role": "employer"}, headers=auth(admin)).json()
    assert [u["id"] for u in employers] == [employer["id"]]

    found = client.get("/admin/users", params={"search": "harpreet"}, headers=auth(admin)).json()
    assert [u["id"] for u in found] == [seeker["id"]]


def test_user_detail_counts(client, admin, employer, seeker, job, application):
    detail = client.get(f"/admin/users/{employer['id']}", headers=auth(admin)).json()
    assert detail["total_jobs_posted"] == 1

    detail = client.get(f"/admin/users/{seeker['id']}", headers=auth(admin)).json()
    assert detail["total_applications"] == 1


def test_verify_user_is_logged(client, admin, employer):
    response = client.put(f"/admin/users/{employer['id']}", json={"is_verified": True}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["is_verified"] is True

    logs = client.get("/admin/audit-logs", headers=auth(admin)).json()
    assert logs[0]["action"] == "user_updated"
    assert logs[0]["details"] == {"is_verified": True}


def test_admin_cannot_deactivate_or_delete_self(client, admin):
    deactivate = client.put(f"/admin/users/{admin['id']}", json={"is_active": False}, headers=auth(admin))
    assert deactivate.status_code == 400

    delete = client.delete(f"/admin/users/{admin['id']}", headers=auth(admin))
    assert delete.status_code == 400


def test_deleting_employer_cascades(client, db, admin, employer, seeker, job, application):
    post_job(client, employer, title="Second Opening")

    response = client.delete(f"/admin/users/{employer['id']}", headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["jobs_deleted"] == 2
    assert response.json()["applications_deleted"] == 1

    assert asyncio.run(db.jobs.count_documents({})) == 0
    assert asyncio.run(db.applications.count_documents({})) == 0
    assert client.get(f"/admin/users/{seeker['id']}", headers=auth(admin)).status_code == 200


def test_deleting_jobseeker_removes_their_applications(client, db, admin, seeker, job, application):
    response = client.delete(f"/admin/users/{seeker['id']}", headers=auth(admin))
    assert response.json()["applications_deleted"] == 1
    assert asyncio.run(db.jobs.count_documents({})) == 1


def test_admin_deletes_job(client, db, admin, job, application):
    response = client.delete(f"/admin/jobs/{job['id']}", headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["applications_deleted"] == 1
    assert asyncio.run(db.applications.count_documents({})) == 0


def test_application_rows_show_access_state(client, admin, employer, seeker, job, application):
    client.post(f"/applications/{application['id']}/request-details", headers=auth(employer))

    rows = client.get("/admin/applications", headers=auth(admin)).json()
    assert len(rows) == 1
    assert rows[0]["job_seeker_name"] == "Harpreet Kaur"
    assert rows[0]["job_title"] == job["title"]
    assert rows[0]["details_access"] == "requested"


def test_admin_job_search(client, admin, employer):
    post_job(client, employer, title="Night Watchman")
    post_job(client, employer, title="Cashier", status="draft")

    drafts = client.get("/admin/jobs", params={"status": "draft"}, headers=auth(admin)).json()
    assert [j["title"] for j in drafts] == ["Cashier"]

    found = client.get("/admin/jobs", params={"search": "watch"}, headers=auth(admin)).json()
    assert [j["title"] for j in found] == ["Night Watchman"]


def test_stats(client, admin, employer, seeker, job):
    app_id = apply(client, seeker, job["id"]).json()["id"]
    client.post(f"/applications/{app_id}/request-details", headers=auth(employer))

    stats = client.get("/admin/stats", headers=auth(admin)).json()
    assert stats["users"] == {"total": 3, "job_seekers": 1, "employers": 1, "admins": 1}
    assert stats["jobs"] == {"total": 1, "active": 1}
    assert stats["applications"]["total"] == 1
    assert stats["applications"]["access_requests_pending"] == 1
    assert stats["applications"]["access_granted"] == 0
