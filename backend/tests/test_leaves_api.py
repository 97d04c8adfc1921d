
def _setup(make_staff, make_slot):
    requester = make_staff("Asha Rao")
    cover = make_staff("Vikram Shah")
    make_slot(requester, "Monday", "09:00", "10:00", course="Compiler Design")
    make_slot(requester, "Tuesday", "14:00", "15:00", course="Compiler Design Lab")
    return requester, cover


def test_leave_request_approval_round_trip(client, admin, make_staff, make_slot, auth_headers):
    requester, cover = _setup(make_staff, make_slot)
    staff_headers = auth_headers("asha.rao@college.edu")
    admin_headers = auth_headers("admin.user@college.edu")

    created = client.post(
        "/api/leaves",
        json={
            "leave_type": "full_day",
            "start_date": "2024-03-10",
            "end_date": "2024-03-12",
            "reason": "Conference",
        },
        headers=staff_headers,
    )
    assert created.status_code == 201
    leave = created.json()
    assert leave["status"] == "pending"
    assert leave["staff_id"] == requester.id

    admin_inbox = client.get("/api/notifications", headers=admin_headers).json()
    assert [item["notification_type"] for item in admin_inbox] == ["leave_requested"]

    candidates = client.get(f"/api/leaves/{leave['id']}/replacements", headers=admin_headers)
    assert candidates.status_code == 200
    assert [item["name"] for item in candidates.json()] == ["Vikram Shah"]

    approved = client.post(
        f"/api/leaves/{leave['id']}/approve",
        json={"replacement_staff_id": cover.id, "admin_comments": "Enjoy"},
        headers=admin_headers,
    )
    assert approved.status_code == 200
    body = approved.json()
    assert body["leave_request"]["status"] == "approved"
    assert body["uncovered_dates"] == []
    assert [(item["scheduled_date"], item["session"]) for item in body["assignments"]] == [
        ("2024-03-10", "morning"),
        ("2024-03-10", "afternoon"),
        ("2024-03-11", "morning"),
        ("2024-03-11", "afternoon"),
        ("2024-03-12", "morning"),
        ("2024-03-12", "afternoon"),
    ]

    again = client.post(f"/api/leaves/{leave['id']}/approve", json={}, headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["details"]["status"] == "approved"

    attendance = client.get("/api/attendance", headers=staff_headers).json()
    assert sorted(item["date"] for item in attendance) == ["2024-03-10", "2024-03-11", "2024-03-12"]
    assert {item["status"] for item in attendance} == {"leave"}

    cover_headers = auth_headers("vikram.shah@college.edu")
    classes = client.get("/api/scheduled-classes", headers=cover_headers).json()
    assert len(classes) == 6
    assert {item["course_name"] for item in classes} == {"Compiler Design", "Compiler Design Lab"}
    assert client.get("/api/scheduled-classes", headers=staff_headers).json() == []

    cover_inbox = client.get("/api/notifications", headers=cover_headers).json()
    assert [item["notification_type"] for item in cover_inbox] == ["replacement_assigned"]


def test_leave_request_validation_and_errors(client, db, admin, make_staff, make_slot, auth_headers):
    requester, _ = _setup(make_staff, make_slot)
    staff_headers = auth_headers("asha.rao@college.edu")
    admin_headers = auth_headers("admin.user@college.edu")

    missing_session = client.post(
        "/api/leaves",
        json={"leave_type": "half_day", "start_date": "2024-03-11", "end_date": "2024-03-11"},
        headers=staff_headers,
    )
    assert missing_session.status_code == 422

    reversed_range = client.post(
        "/api/leaves",
        json={"leave_type": "full_day", "start_date": "2024-03-12", "end_date": "2024-03-11"},
        headers=staff_headers,
    )
    assert reversed_range.status_code == 422

    half_day = client.post(
        "/api/leaves",
        json={"leave_type": "half_day", "session": "AN", "start_date": "2024-03-12", "end_date": "2024-03-12"},
        headers=staff_headers,
    )
    assert half_day.status_code == 201
    assert half_day.json()["session"] == "afternoon"

    overlapping = client.post(
        "/api/leaves",
        json={"leave_type": "full_day", "start_date": "2024-03-11", "end_date": "2024-03-13"},
        headers=staff_headers,
    )
    assert overlapping.status_code == 409

    not_found = client.post("/api/leaves/missing/approve", json={}, headers=admin_headers)
    assert not_found.status_code == 404
    assert not_found.json()["details"]["resource_type"] == "LeaveRequest"

    self_cover = client.post(
        f"/api/leaves/{half_day.json()['id']}/approve",
        json={"replacement_staff_id": requester.id},
        headers=admin_headers,
    )
    assert self_cover.status_code == 400

    forbidden = client.post(f"/api/leaves/{half_day.json()['id']}/reject", json={}, headers=staff_headers)
    assert forbidden.status_code == 403

    rejected = client.post(
        f"/api/leaves/{half_day.json()['id']}/reject",
        json={"admin_comments": "Exam duty"},
        headers=admin_headers,
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"

    own = client.get("/api/leaves", headers=staff_headers).json()
    assert [item["status"] for item in own] == ["rejected"]
    assert client.get("/api/leaves?status=pending", headers=admin_headers).json() == []


def test_admin_without_staff_record_cannot_request_leave(client, admin, auth_headers):
    response = client.post(
        "/api/leaves",
        json={"leave_type": "full_day", "start_date": "2024-03-11", "end_date": "2024-03-11"},
        headers=auth_headers("admin.user@college.edu"),
    )
    assert response.status_code == 403
