import pytest

from models import BatchFeedback


@pytest.fixture
def enrolled(factory):
    instructor = factory.user("instructor")
    student = factory.user("student")
    batch = factory.batch(instructor_id=instructor)
    factory.enroll(batch, student)
    return {"instructor": instructor, "student": student, "batch": batch}


def test_check_with_no_resources(login, enrolled):
    client = login(enrolled["student"])
    resp = client.get(f"/api/feedback/batch/{enrolled['batch']}/check")
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"feedbackRequired": False, "interval": 0}


def test_check_requires_previous_interval(login, factory, enrolled):
    factory.resources(enrolled["batch"], 12)
    client = login(enrolled["student"])

    data = client.get(f"/api/feedback/batch/{enrolled['batch']}/check").get_json()["data"]
    assert data == {"feedbackRequired": True, "interval": 2, "missingInterval": 1}

    factory.feedback(enrolled["batch"], enrolled["student"], 1)
    data = client.get(f"/api/feedback/batch/{enrolled['batch']}/check").get_json()["data"]
    assert data == {"feedbackRequired": True, "interval": 2, "missingInterval": 2}


def test_check_is_student_only(login, enrolled):
    client = login(enrolled["instructor"])
    resp = client.get(f"/api/feedback/batch/{enrolled['batch']}/check")
    assert resp.status_code == 403


def test_check_rejects_students_from_other_batches(login, factory, enrolled):
    outsider = factory.user("student")
    resp = login(outsider).get(f"/api/feedback/batch/{enrolled['batch']}/check")
    assert resp.status_code == 403


def test_submit_creates_then_updates(app, login, factory, enrolled):
    factory.resources(enrolled["batch"], 7)
    client = login(enrolled["student"])
    url = f"/api/feedback/batch/{enrolled['batch']}"

    first = client.post(url, json={"interval": 1, "rating": 3, "feedback": "Too fast"})
    assert first.status_code == 201
    assert first.get_json()["isUpdate"] is False

    second = client.post(url, json={"interval": 1, "rating": 5, "feedback": "Better"})
    assert second.status_code == 200
    body = second.get_json()
    assert body["isUpdate"] is True
    assert body["data"]["rating"] == 5

    with app.app_context():
        rows = BatchFeedback.query.filter_by(batch_id=enrolled["batch"]).all()
        assert len(rows) == 1
        assert rows[0].feedback == "Better"


@pytest.mark.parametrize("payload", [
    {"interval": 1},
    {"rating": 4},
    {"interval": 1, "rating": 0},
    {"interval": 1, "rating": 6},
    {"interval": 3, "rating": 4},
    {"interval": 0, "rating": 4},
])
def test_submit_validation(login, factory, enrolled, payload):
    factory.resources(enrolled["batch"], 7)
    resp = login(enrolled["student"]).post(f"/api/feedback/batch/{enrolled['batch']}", json=payload)
    assert resp.status_code == 400


def test_submit_unlocks_next_interval(login, factory, enrolled):
    factory.resources(enrolled["batch"], 12)
    client = login(enrolled["student"])

    def unlocked():
        items = client.get(f"/api/resources/batch/{enrolled['batch']}").get_json()["data"]
        return [i["sequenceIndex"] for i in items if not i["locked"]]

    assert unlocked() == list(range(0, 5))
    client.post(f"/api/feedback/batch/{enrolled['batch']}", json={"interval": 1, "rating": 4})
    assert unlocked() == list(range(0, 10))
    client.post(f"/api/feedback/batch/{enrolled['batch']}", json={"interval": 2, "rating": 4})
    assert unlocked() == list(range(0, 12))


def test_list_feedback_scoped_by_role(app, login, factory, enrolled):
    other = factory.user("student")
    factory.enroll(enrolled["batch"], other)
    factory.resources(enrolled["batch"], 6)
    factory.feedback(enrolled["batch"], enrolled["student"], 1)
    factory.feedback(enrolled["batch"], other, 1)

    staff_rows = login(enrolled["instructor"]).get(f"/api/feedback/batch/{enrolled['batch']}").get_json()["data"]
    own_rows = login(enrolled["student"]).get(f"/api/feedback/batch/{enrolled['batch']}").get_json()["data"]

    assert len(staff_rows) == 2
    assert [r["studentId"] for r in own_rows] == [enrolled["student"]]


def test_feedback_for_locked_interval_is_rejected(app, login, factory, enrolled):
    factory.resources(enrolled["batch"], 12)
    client = login(enrolled["student"])
    url = f"/api/feedback/batch/{enrolled['batch']}"

    for interval in (2, 3):
        resp = client.post(url, json={"interval": interval, "rating": 1})
        assert resp.status_code == 400
        assert "locked" in resp.get_json()["error"]

    items = client.get(f"/api/resources/batch/{enrolled['batch']}").get_json()["data"]
    assert [i["sequenceIndex"] for i in items if i["locked"]] == list(range(5, 12))

    with app.app_context():
        assert BatchFeedback.query.filter_by(batch_id=enrolled["batch"]).count() == 0


def test_reviewed_interval_can_be_revised_after_moving_on(login, factory, enrolled):
    factory.resources(enrolled["batch"], 12)
    factory.feedback(enrolled["batch"], enrolled["student"], 1)
    factory.feedback(enrolled["batch"], enrolled["student"], 2)

    resp = login(enrolled["student"]).post(
        f"/api/feedback/batch/{enrolled['batch']}", json={"interval": 1, "rating": 2}
    )
    assert resp.status_code == 200
    assert resp.get_json()["isUpdate"] is True
