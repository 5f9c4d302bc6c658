import pytest

from models import Attendance


@pytest.fixture
def setup(factory):
    admin = factory.user("admin")
    instructor = factory.user("instructor")
    students = [factory.user("student") for _ in range(2)]
    batch = factory.batch(instructor_id=instructor)
    for s in students:
        factory.enroll(batch, s)
    schedule = factory.schedule(batch)
    return {
        "admin": admin,
        "instructor": instructor,
        "students": students,
        "batch": batch,
        "schedule": schedule,
    }


def _statuses(app, schedule_id):
    with app.app_context():
        return {a.user_id: a.status for a in Attendance.query.filter_by(schedule_id=schedule_id)}


def test_instructor_marks_student_and_is_auto_marked_present(app, login, setup):
    student = setup["students"][0]
    resp = login(setup["instructor"]).post("/api/attendance", json={
        "scheduleId": setup["schedule"], "userId": student, "status": "late"
    })
    assert resp.status_code == 200
    assert resp.get_json()["isUpdate"] is False
    assert _statuses(app, setup["schedule"]) == {student: "late", setup["instructor"]: "present"}


def test_marking_again_updates_the_record(app, login, setup):
    client = login(setup["admin"])
    student = setup["students"][0]
    client.post("/api/attendance", json={"scheduleId": setup["schedule"], "userId": student, "status": "absent"})
    resp = client.post("/api/attendance", json={"scheduleId": setup["schedule"], "userId": student, "status": "present"})

    assert resp.get_json()["isUpdate"] is True
    assert _statuses(app, setup["schedule"]) == {student: "present"}


def test_instructor_can_only_be_present(login, setup):
    resp = login(setup["admin"]).post("/api/attendance", json={
        "scheduleId": setup["schedule"], "userId": setup["instructor"], "status": "absent"
    })
    assert resp.status_code == 400


@pytest.mark.parametrize("role,expected", [("student", 403), ("instructor", 403)])
def test_mark_access_control(login, factory, setup, role, expected):
    # an instructor who does not teach the batch is rejected like a student
    caller = factory.user(role)
    resp = login(caller).post("/api/attendance", json={
        "scheduleId": setup["schedule"], "userId": setup["students"][0], "status": "present"
    })
    assert resp.status_code == expected


def test_mark_rejects_non_enrolled_student(login, factory, setup):
    outsider = factory.user("student")
    resp = login(setup["admin"]).post("/api/attendance", json={
        "scheduleId": setup["schedule"], "userId": outsider, "status": "present"
    })
    assert resp.status_code == 400


def test_bulk_reports_per_item_results(app, login, factory, setup):
    outsider = factory.user("student")
    s1, s2 = setup["students"]
    resp = login(setup["instructor"]).post("/api/attendance/bulk", json={
        "scheduleId": setup["schedule"],
        "attendanceRecords": [
            {"userId": s1, "status": "present"},
            {"userId": outsider, "status": "present"},
            {"userId": s2, "status": "sleeping"},
        ],
    })
    assert resp.status_code == 200
    results = resp.get_json()["data"]
    assert [r["success"] for r in results] == [True, False, False]
    assert "not enrolled" in results[1]["error"]
    assert _statuses(app, setup["schedule"]) == {s1: "present", setup["instructor"]: "present"}


def test_bulk_requires_records(login, setup):
    resp = login(setup["admin"]).post("/api/attendance/bulk", json={"scheduleId": setup["schedule"]})
    assert resp.status_code == 400


def test_schedule_attendance_views(login, factory, setup):
    s1, s2 = setup["students"]
    factory.attendance(setup["schedule"], s1, "present", setup["instructor"])

    staff_view = login(setup["instructor"]).get(f"/api/attendance/schedule/{setup['schedule']}").get_json()["data"]
    assert {e["userId"] for e in staff_view} == {s1, s2, setup["instructor"]}
    assert [e for e in staff_view if e.get("isInstructor")][0]["status"] is None

    own_view = login(s2).get(f"/api/attendance/schedule/{setup['schedule']}").get_json()["data"]
    assert len(own_view) == 1
    assert own_view[0]["userId"] == s2
    assert own_view[0]["status"] is None


def test_update_and_delete_record(app, login, factory, setup):
    record = factory.attendance(setup["schedule"], setup["students"][0], "absent")
    client = login(setup["instructor"])

    resp = client.put(f"/api/attendance/{record}", json={"status": "late"})
    assert resp.get_json()["data"]["status"] == "late"

    assert client.delete(f"/api/attendance/{record}").status_code == 200
    assert _statuses(app, setup["schedule"]) == {}


def test_student_analytics_access(login, factory, setup):
    s1, s2 = setup["students"]
    factory.attendance(setup["schedule"], s1, "present")

    own = login(s1).get(f"/api/attendance/analytics/student/{s1}")
    assert own.status_code == 200
    assert own.get_json()["data"]["overall"]["percentage"] == 100

    assert login(s2).get(f"/api/attendance/analytics/student/{s1}").status_code == 403
    assert login(setup["instructor"]).get(f"/api/attendance/analytics/student/{s1}").status_code == 200
    assert login(factory.user("instructor")).get(f"/api/attendance/analytics/student/{s1}").status_code == 403


@pytest.mark.parametrize("role", ["admin", "instructor"])
def test_student_analytics_not_found(login, setup, role):
    resp = login(setup[role]).get("/api/attendance/analytics/student/99999")
    assert resp.status_code == 404


def test_batch_analytics_endpoint(login, factory, setup):
    s1, s2 = setup["students"]
    factory.attendance(setup["schedule"], s1, "present")
    factory.attendance(setup["schedule"], s2, "absent")

    resp = login(setup["instructor"]).get(f"/api/attendance/analytics/batch/{setup['batch']}")
    data = resp.get_json()["data"]
    assert data["batchId"] == setup["batch"]
    assert data["overall"] == {"total": 2, "present": 1, "absent": 1, "late": 0, "percentage": 50}

    assert login(factory.user("instructor")).get(
        f"/api/attendance/analytics/batch/{setup['batch']}"
    ).status_code == 403
    assert login(setup["admin"]).get("/api/attendance/analytics/batch/99999").status_code == 404


def test_batch_analytics_export(login, factory, setup):
    factory.attendance(setup["schedule"], setup["students"][0], "present")
    resp = login(setup["admin"]).get(f"/api/attendance/analytics/batch/{setup['batch']}/export")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    lines = resp.data.decode("utf-8").strip().splitlines()
    assert lines[0] == "Student Name,Email,Total Classes,Present,Absent,Late,Percentage"
    assert len(lines) == 3
