from sqlalchemy import select

from app.models.access_log import AccessLog


def test_login_me_logout(client, db, admin, make_staff, auth_headers):
    staff = make_staff("Asha Rao")

    login = client.post("/api/auth/login", json={"email": "Asha.Rao@college.edu", "password": "password123"})
    assert login.status_code == 200
    data = login.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "staff"
    assert data["redirect_url"] == "/staff-dashboard.html"
    headers = {"Authorization": f"Bearer {data['access_token']}"}

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["staff_id"] == staff.id

    admin_headers = auth_headers("admin.user@college.edu")
    stats = client.get("/api/stats/staff", headers=admin_headers)
    assert stats.json() == {"staff_count": 1, "logged_in_staff": 1}

    logout = client.post("/api/auth/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["success"] is True

    stats = client.get("/api/stats/staff", headers=admin_headers)
    assert stats.json()["logged_in_staff"] == 0


def test_failed_login_is_recorded(client, db, admin, auth_headers):
    wrong = client.post("/api/auth/login", json={"email": "admin.user@college.edu", "password": "nope"})
    assert wrong.status_code == 401
    unknown = client.post("/api/auth/login", json={"email": "ghost@college.edu", "password": "nope"})
    assert unknown.status_code == 401

    failures = db.execute(select(AccessLog).where(AccessLog.is_successful.is_(False))).scalars().all()
    assert len(failures) == 2
    assert {item.user_id for item in failures} == {admin.id, None}

    logs = client.get("/api/access-logs", headers=auth_headers("admin.user@college.edu"))
    assert logs.status_code == 200
    assert len(logs.json()) == 3
    assert {item["email"] for item in logs.json()} == {"admin.user@college.edu", None}


def test_protected_routes_require_token_and_role(client, make_staff, auth_headers):
    make_staff("Asha Rao")

    assert client.get("/api/staff").status_code in {401, 403}
    staff_headers = auth_headers("asha.rao@college.edu")
    assert client.get("/api/staff", headers=staff_headers).status_code == 403
    assert client.get("/api/access-logs", headers=staff_headers).status_code == 403


def test_admin_creates_staff_with_login(client, admin, auth_headers):
    headers = auth_headers("admin.user@college.edu")
    payload = {
        "name": "Meera Iyer",
        "email": "meera.iyer@college.edu",
        "password": "strongpass1",
        "department": "ECE",
    }

    created = client.post("/api/staff", json=payload, headers=headers)
    assert created.status_code == 201
    assert created.json()["user_id"] is not None

    duplicate = client.post("/api/staff", json=payload, headers=headers)
    assert duplicate.status_code == 400

    login = client.post("/api/auth/login", json={"email": payload["email"], "password": payload["password"]})
    assert login.status_code == 200

    removed = client.delete(f"/api/staff/{created.json()['id']}", headers=headers)
    assert removed.status_code == 200
    assert client.get("/api/staff", headers=headers).json() == []
    inactive_login = client.post("/api/auth/login", json={"email": payload["email"], "password": payload["password"]})
    assert inactive_login.status_code == 401
