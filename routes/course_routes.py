import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, Course, CourseCategory, CourseReview, StudentBatch
from models.course import LEVELS
from services.request_context import current_context
from utils.decorators import role_required
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int

logger = logging.getLogger(__name__)

courses_bp = Blueprint("courses", __name__, url_prefix="/api/courses")


def _category_error(data):
    """Validates an optional ``categoryId``; None means it is usable."""
    if data.get("categoryId") in (None, ""):
        return None
    category_id = to_int(data["categoryId"])
    if category_id is None or not db.session.get(CourseCategory, category_id):
        return api_error("Category not found", 400)
    return None


def _is_enrolled_in_course(student_id, course_id):
    return (
        db.session.query(StudentBatch.id)
        .join(Batch, Batch.batch_id == StudentBatch.batch_id)
        .filter(StudentBatch.student_id == student_id, Batch.course_id == course_id)
        .first()
    ) is not None


@courses_bp.route("", methods=["GET"])
@login_required
def list_courses():
    q = Course.query
    category_id = to_int(request.args.get("categoryId"))
    if category_id is not None:
        q = q.filter_by(category_id=category_id)
    courses = q.order_by(Course.course_name.asc()).all()
    return jsonify({"success": True, "data": [c.to_dict() for c in courses]})


@courses_bp.route("/<int:course_id>", methods=["GET"])
@login_required
def get_course(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return api_error("Course not found", 404)

    data = course.to_dict()
    data["batches"] = [b.to_dict() for b in course.batches]
    data["reviews"] = [r.to_dict() for r in course.reviews]
    return jsonify({"success": True, "data": data})


@courses_bp.route("", methods=["POST"])
@role_required("admin")
def create_course():
    data = request.json or {}
    if not data.get("courseName"):
        return api_error("courseName is required", 400)

    level = data.get("courseLevel", "beginner")
    if level not in LEVELS:
        return api_error(f"Invalid course level: {level}", 400)

    error = _category_error(data)
    if error:
        return error

    try:
        course = Course(
            course_name=data["courseName"],
            description=data.get("description"),
            course_level=level,
            duration=to_int(data.get("duration")),
            is_published=bool(data.get("isPublished", False)),
            category_id=to_int(data.get("categoryId"))
        )
        db.session.add(course)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": course.to_dict()}), 201


@courses_bp.route("/<int:course_id>", methods=["PUT"])
@role_required("admin")
def update_course(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return api_error("Course not found", 404)

    data = request.json or {}
    if "courseLevel" in data and data["courseLevel"] not in LEVELS:
        return api_error(f"Invalid course level: {data['courseLevel']}", 400)

    error = _category_error(data)
    if error:
        return error

    try:
        if "courseName" in data:
            course.course_name = data["courseName"]
        if "description" in data:
            course.description = data["description"]
        if "courseLevel" in data:
            course.course_level = data["courseLevel"]
        if "duration" in data:
            course.duration = to_int(data["duration"])
        if "isPublished" in data:
            course.is_published = bool(data["isPublished"])
        if "categoryId" in data:
            course.category_id = to_int(data["categoryId"])
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": course.to_dict()})


@courses_bp.route("/<int:course_id>", methods=["DELETE"])
@role_required("admin")
def delete_course(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return api_error("Course not found", 404)
    if course.batches:
        return api_error("Course still has batches; delete them first", 400)

    try:
        # reviews go with the course (cascade)
        db.session.delete(course)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True})


# =========================================================
# REVIEWS
# =========================================================

@courses_bp.route("/<int:course_id>/reviews", methods=["GET"])
@login_required
def list_reviews(course_id):
    if not db.session.get(Course, course_id):
        return api_error("Course not found", 404)

    reviews = (
        CourseReview.query
        .filter_by(course_id=course_id)
        .order_by(CourseReview.created_at.desc(), CourseReview.review_id.desc())
        .all()
    )
    return jsonify({"success": True, "data": [r.to_dict() for r in reviews]})


@courses_bp.route("/<int:course_id>/reviews", methods=["POST"])
@role_required("student")
def add_review(course_id):
    ctx = current_context()
    if not db.session.get(Course, course_id):
        return api_error("Course not found", 404)
    if not _is_enrolled_in_course(ctx.user_id, course_id):
        return api_error("Only students enrolled in this course can review it", 403)

    data = request.json or {}
    rating = to_int(data.get("rating"))
    if rating is None or not 1 <= rating <= 5:
        return api_error("rating must be between 1 and 5", 400)

    if CourseReview.query.filter_by(course_id=course_id, user_id=ctx.user_id).first():
        return api_error("User has already reviewed this course", 400)

    try:
        review = CourseReview(
            course_id=course_id,
            user_id=ctx.user_id,
            rating=rating,
            comment=data.get("comment")
        )
        db.session.add(review)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Course %s reviewed by %s (rating %s)", course_id, ctx.user_id, rating)
    return jsonify({"success": True, "data": review.to_dict()}), 201
