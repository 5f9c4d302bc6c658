import pytest

from services.attendance_analytics import (
    attendance_percentage,
    batch_analytics,
    batch_analytics_frame,
    build_stats,
    student_analytics,
    tally,
)


@pytest.mark.parametrize("present,total,expected", [
    (0, 0, 0),
    (7, 10, 70),
    (1, 8, 13),   # 12.5 rounds half up
    (1, 3, 33),
    (2, 3, 67),
    (5, 5, 100),
])
def test_attendance_percentage(present, total, expected):
    assert attendance_percentage(present, total) == expected


def test_tally_ignores_unknown_statuses():
    assert tally(["present", "late", "present", "excused"]) == {"present": 2, "absent": 0, "late": 1}
    assert tally([]) == {"present": 0, "absent": 0, "late": 0}


def test_build_stats_on_empty_input():
    assert build_stats(0, tally([])) == {
        "total": 0, "present": 0, "absent": 0, "late": 0, "percentage": 0
    }


def test_student_analytics_aggregates_totals_not_percentages(app, factory):
    student = factory.user("student")
    batch_a = factory.batch(name="A")
    batch_b = factory.batch(name="B")
    factory.enroll(batch_a, student)
    factory.enroll(batch_b, student)

    # batch A: 1 of 1 present, batch B: 1 of 3 present
    factory.attendance(factory.schedule(batch_a), student, "present")
    b_schedules = [factory.schedule(batch_b, d) for d in range(3)]
    factory.attendance(b_schedules[0], student, "present")
    factory.attendance(b_schedules[1], student, "late")

    with app.app_context():
        data, error = student_analytics(student)

    assert error is None
    by_name = {b["batchName"]: b for b in data["byBatch"]}
    assert by_name["A"]["percentage"] == 100
    assert by_name["B"]["percentage"] == 33
    assert by_name["B"]["late"] == 1
    # 2 of 4 overall, not the 67 an average of batch percentages would give
    assert data["overall"] == {"total": 4, "present": 2, "absent": 0, "late": 1, "percentage": 50}


def test_student_analytics_with_no_schedules(app, factory):
    student = factory.user("student")
    factory.enroll(factory.batch(), student)

    with app.app_context():
        data, error = student_analytics(student)

    assert error is None
    assert data["byBatch"][0]["percentage"] == 0
    assert data["overall"]["percentage"] == 0


def test_student_analytics_errors(app, factory):
    instructor = factory.user("instructor")
    with app.app_context():
        assert student_analytics(9999) == (None, "User not found")
        assert student_analytics(instructor) == (None, "User is not a student")


def test_batch_analytics_uses_students_times_schedules(app, factory):
    batch = factory.batch()
    students = [factory.user("student") for _ in range(2)]
    for s in students:
        factory.enroll(batch, s)
    schedules = [factory.schedule(batch, d) for d in range(5)]

    for sid in schedules:
        factory.attendance(sid, students[0], "present")
    for sid in schedules[:2]:
        factory.attendance(sid, students[1], "present")
    factory.attendance(schedules[2], students[1], "absent")

    with app.app_context():
        data, error = batch_analytics(batch)

    assert error is None
    assert data["totalStudents"] == 2
    assert data["totalClasses"] == 5
    assert data["overall"] == {"total": 10, "present": 7, "absent": 1, "late": 0, "percentage": 70}
    per_student = {s["userId"]: s["percentage"] for s in data["students"]}
    assert per_student == {students[0]: 100, students[1]: 40}


def test_batch_analytics_ignores_non_enrolled_attendance(app, factory):
    batch = factory.batch(instructor_id=factory.user("instructor"))
    student = factory.user("student")
    factory.enroll(batch, student)
    schedule = factory.schedule(batch)
    factory.attendance(schedule, student, "present")

    outsider = factory.user("student")
    factory.attendance(schedule, outsider, "present")

    with app.app_context():
        data, _ = batch_analytics(batch)

    assert data["overall"]["present"] == 1
    assert [s["userId"] for s in data["students"]] == [student]


def test_batch_analytics_empty_batch(app, factory):
    batch = factory.batch()
    with app.app_context():
        data, error = batch_analytics(batch)
        assert batch_analytics(424242) == (None, "Batch not found")

    assert error is None
    assert data["overall"]["percentage"] == 0
    assert data["students"] == []


def test_batch_analytics_frame_columns(app, factory):
    batch = factory.batch()
    factory.enroll(batch, factory.user("student", full_name="Sarah Davis"))
    factory.schedule(batch)

    with app.app_context():
        data, _ = batch_analytics(batch)

    df = batch_analytics_frame(data)
    assert list(df.columns) == ["Student Name", "Email", "Total Classes", "Present", "Absent", "Late", "Percentage"]
    assert df.iloc[0]["Student Name"] == "Sarah Davis"
    assert df.iloc[0]["Total Classes"] == 1
