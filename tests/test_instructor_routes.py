from datetime import date, timedelta

import pytest


@pytest.fixture
def teaching(factory):
    instructor = factory.user("instructor")
    course = factory.course("Kubernetes")
    batch = factory.batch(instructor_id=instructor, course_id=course, name="Evening Batch")
    factory.batch(instructor_id=factory.user("instructor"), name="Someone Else")
    return {"instructor": instructor, "course": course, "batch": batch}


def test_instructor_sees_own_batches_and_courses(login, teaching):
    client = login(teaching["instructor"])

    batches = client.get(f"/api/instructors/{teaching['instructor']}/batches").get_json()["data"]
    assert [b["batchName"] for b in batches] == ["Evening Batch"]
    assert batches[0]["courseName"] == "Kubernetes"

    courses = client.get(f"/api/instructors/{teaching['instructor']}/courses").get_json()["data"]
    assert [(c["courseName"], c["batchCount"]) for c in courses] == [("Kubernetes", 1)]


def test_only_upcoming_schedules_are_listed(login, factory, teaching):
    today = date.today()
    factory.schedule(teaching["batch"], on=today - timedelta(days=3))
    later = factory.schedule(teaching["batch"], on=today + timedelta(days=7))
    sooner = factory.schedule(teaching["batch"], on=today + timedelta(days=1))

    data = login(teaching["instructor"]).get(
        f"/api/instructors/{teaching['instructor']}/schedules"
    ).get_json()["data"]
    assert [s["scheduleId"] for s in data] == [sooner, later]
    assert data[0]["batchName"] == "Evening Batch"


def test_resources_newest_first(login, factory, teaching):
    first = factory.resource(teaching["batch"])
    second = factory.resource(teaching["batch"])

    data = login(teaching["instructor"]).get(
        f"/api/instructors/{teaching['instructor']}/resources"
    ).get_json()["data"]
    assert [r["resourceId"] for r in data] == [second, first]


def test_instructor_without_batches_gets_empty_lists(login, factory):
    instructor = factory.user("instructor")
    client = login(instructor)
    for view in ("batches", "courses", "schedules", "resources"):
        resp = client.get(f"/api/instructors/{instructor}/{view}")
        assert resp.status_code == 200
        assert resp.get_json()["data"] == []


def test_instructor_views_access(login, factory, teaching):
    url = f"/api/instructors/{teaching['instructor']}/batches"
    assert login(factory.user("admin")).get(url).status_code == 200
    assert login(factory.user("instructor")).get(url).status_code == 403
    assert login(factory.user("student")).get(url).status_code == 403


def test_unknown_instructor(login, factory):
    admin = factory.user("admin")
    student = factory.user("student")
    client = login(admin)
    assert client.get("/api/instructors/9999/courses").status_code == 404
    assert client.get(f"/api/instructors/{student}/courses").status_code == 404
