from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import inspect
from werkzeug.security import generate_password_hash

from app import create_app
from config.config import TestingConfig
from extensions import db
from models import (
    Attendance, Batch, BatchFeedback, Course, CourseCategory, CourseReview, Resource, Schedule,
    StudentBatch, User
)

PASSWORD = "Password123"
# Cheap hash so every login in the suite stays fast
PASSWORD_HASH = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


class Factory:
    """Creates rows in their own app context and hands back primary keys."""

    def __init__(self, app):
        self.app = app
        self._emails = 0
        self._clock = datetime(2026, 1, 1, 9, 0, 0)

    def _save(self, obj):
        with self.app.app_context():
            db.session.add(obj)
            db.session.commit()
            return inspect(obj).identity[0]

    def user(self, role="student", full_name=None):
        self._emails += 1
        return self._save(User(
            full_name=full_name or f"{role.title()} {self._emails}",
            email=f"{role}{self._emails}@example.com",
            role=role,
            password_hash=PASSWORD_HASH,
            must_reset_password=False,
            is_active=True
        ))

    def category(self, name="Cloud"):
        return self._save(CourseCategory(category_name=name))

    def course(self, name="Python for Cloud", category_id=None):
        return self._save(Course(course_name=name, course_level="beginner", category_id=category_id))

    def review(self, course_id, user_id, rating=5):
        return self._save(CourseReview(course_id=course_id, user_id=user_id, rating=rating))

    def batch(self, instructor_id=None, course_id=None, name="Weekday Batch", capacity=30):
        return self._save(Batch(
            batch_name=name,
            course_id=course_id or self.course(),
            instructor_id=instructor_id,
            start_date=date(2026, 1, 1),
            end_date=date(2026, 3, 1),
            capacity=capacity
        ))

    def enroll(self, batch_id, student_id):
        return self._save(StudentBatch(batch_id=batch_id, student_id=student_id))

    def schedule(self, batch_id, day_offset=0, on=None):
        return self._save(Schedule(
            batch_id=batch_id,
            topic="Session",
            schedule_date=on or date(2026, 1, 5) + timedelta(days=day_offset)
        ))

    def resource(self, batch_id, title=None):
        self._clock += timedelta(minutes=1)
        return self._save(Resource(
            batch_id=batch_id,
            title=title or f"Resource {self._clock:%H%M}",
            resource_type="assignment",
            file_url="https://files.example.com/r.pdf",
            created_at=self._clock
        ))

    def resources(self, batch_id, count):
        return [self.resource(batch_id) for _ in range(count)]

    def feedback(self, batch_id, student_id, interval, rating=4):
        return self._save(BatchFeedback(
            batch_id=batch_id,
            student_id=student_id,
            interval=interval,
            rating=rating,
            feedback="Good pace"
        ))

    def attendance(self, schedule_id, user_id, status, marked_by=None):
        return self._save(Attendance(
            schedule_id=schedule_id,
            user_id=user_id,
            status=status,
            marked_by=marked_by
        ))


@pytest.fixture
def factory(app):
    return Factory(app)


@pytest.fixture
def login(app):
    def _login(user_id):
        with app.app_context():
            email = db.session.get(User, user_id).email
        client = app.test_client()
        resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return client
    return _login
