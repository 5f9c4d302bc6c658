from datetime import date

from flask import Blueprint, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, Course, Resource, Schedule, User
from services.request_context import current_context, can_view_instructor
from utils.errors import api_error

instructors_bp = Blueprint("instructors", __name__, url_prefix="/api/instructors")


def _instructor_batches(instructor_id):
    """Batches taught by ``instructor_id``, or an error response."""
    if not can_view_instructor(current_context(), instructor_id):
        return None, api_error("You can only view your own teaching data", 403)

    user = db.session.get(User, instructor_id)
    if not user or user.role != "instructor":
        return None, api_error("Instructor not found", 404)

    batches = (
        Batch.query
        .filter_by(instructor_id=instructor_id)
        .order_by(Batch.start_date.asc(), Batch.batch_id.asc())
        .all()
    )
    return batches, None


@instructors_bp.route("/<int:instructor_id>/batches", methods=["GET"])
@login_required
def instructor_batches(instructor_id):
    batches, error = _instructor_batches(instructor_id)
    if error:
        return error

    data = []
    for batch in batches:
        item = batch.to_dict()
        item["courseName"] = batch.course.course_name
        item["scheduleCount"] = len(batch.schedules)
        data.append(item)
    return jsonify({"success": True, "data": data})


@instructors_bp.route("/<int:instructor_id>/courses", methods=["GET"])
@login_required
def instructor_courses(instructor_id):
    batches, error = _instructor_batches(instructor_id)
    if error:
        return error

    course_ids = {b.course_id for b in batches}
    if not course_ids:
        return jsonify({"success": True, "data": []})

    courses = (
        Course.query
        .filter(Course.course_id.in_(list(course_ids)))
        .order_by(Course.course_name.asc())
        .all()
    )
    data = []
    for course in courses:
        item = course.to_dict()
        item["batchCount"] = sum(1 for b in batches if b.course_id == course.course_id)
        data.append(item)
    return jsonify({"success": True, "data": data})


@instructors_bp.route("/<int:instructor_id>/schedules", methods=["GET"])
@login_required
def instructor_schedules(instructor_id):
    batches, error = _instructor_batches(instructor_id)
    if error:
        return error

    names = {b.batch_id: b.batch_name for b in batches}
    if not names:
        return jsonify({"success": True, "data": []})

    # Upcoming sessions only, soonest first
    schedules = (
        Schedule.query
        .filter(Schedule.batch_id.in_(list(names)), Schedule.schedule_date >= date.today())
        .order_by(Schedule.schedule_date.asc(), Schedule.start_time.asc())
        .all()
    )
    data = []
    for schedule in schedules:
        item = schedule.to_dict()
        item["batchName"] = names[schedule.batch_id]
        data.append(item)
    return jsonify({"success": True, "data": data})


@instructors_bp.route("/<int:instructor_id>/resources", methods=["GET"])
@login_required
def instructor_resources(instructor_id):
    batches, error = _instructor_batches(instructor_id)
    if error:
        return error

    names = {b.batch_id: b.batch_name for b in batches}
    if not names:
        return jsonify({"success": True, "data": []})

    resources = (
        Resource.query
        .filter(Resource.batch_id.in_(list(names)))
        .order_by(Resource.created_at.desc(), Resource.resource_id.desc())
        .all()
    )
    data = []
    for resource in resources:
        item = resource.to_dict()
        item["batchName"] = names[resource.batch_id]
        data.append(item)
    return jsonify({"success": True, "data": data})
