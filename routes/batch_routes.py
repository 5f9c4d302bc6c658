import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, BatchFeedback, Course, StudentBatch, User
from services.request_context import current_context, can_view_batch
from utils.decorators import role_required
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int, parse_date

logger = logging.getLogger(__name__)

batches_bp = Blueprint("batches", __name__, url_prefix="/api/batches")


def batch_detail(batch):
    data = batch.to_dict()
    data["course"] = batch.course.to_dict() if batch.course else None
    data["instructor"] = batch.instructor.to_dict() if batch.instructor else None
    data["students"] = [sb.student.to_dict() for sb in batch.students]
    return data


@batches_bp.route("", methods=["GET"])
@login_required
def list_batches():
    ctx = current_context()
    q = Batch.query

    if ctx.role == "instructor":
        q = q.filter_by(instructor_id=ctx.user_id)
    elif ctx.role == "student":
        q = q.join(StudentBatch, StudentBatch.batch_id == Batch.batch_id).filter(
            StudentBatch.student_id == ctx.user_id
        )

    course_id = to_int(request.args.get("courseId"))
    if course_id:
        q = q.filter(Batch.course_id == course_id)

    batches = q.order_by(Batch.start_date.desc()).all()
    return jsonify({"success": True, "data": [b.to_dict() for b in batches]})


@batches_bp.route("/<int:batch_id>", methods=["GET"])
@login_required
def get_batch(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)
    if not can_view_batch(current_context(), batch):
        return api_error("You do not have access to this batch", 403)
    return jsonify({"success": True, "data": batch_detail(batch)})


def _validate_refs(course_id, instructor_id):
    if course_id is not None and not db.session.get(Course, course_id):
        return "Course not found"
    if instructor_id is not None:
        instructor = db.session.get(User, instructor_id)
        if not instructor or instructor.role != "instructor":
            return "Instructor not found"
    return None


@batches_bp.route("", methods=["POST"])
@role_required("admin")
def create_batch():
    data = request.json or {}
    name = data.get("batchName")
    course_id = to_int(data.get("courseId"))
    instructor_id = to_int(data.get("instructorId"))

    if not name or course_id is None:
        return api_error("batchName and courseId are required", 400)

    error = _validate_refs(course_id, instructor_id)
    if error:
        return api_error(error, 400)

    try:
        batch = Batch(
            batch_name=name,
            course_id=course_id,
            instructor_id=instructor_id,
            start_date=parse_date(data.get("startDate")),
            end_date=parse_date(data.get("endDate")),
            capacity=to_int(data.get("capacity"), 30),
            meeting_link=data.get("meetingLink")
        )
        db.session.add(batch)
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return api_error(f"Invalid date: {exc}", 400)
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Batch %s created for course %s", batch.batch_id, course_id)
    return jsonify({"success": True, "data": batch.to_dict()}), 201


@batches_bp.route("/<int:batch_id>", methods=["PUT"])
@role_required("admin")
def update_batch(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)

    data = request.json or {}
    course_id = to_int(data.get("courseId")) if "courseId" in data else None
    instructor_id = to_int(data.get("instructorId")) if "instructorId" in data else None

    error = _validate_refs(course_id, instructor_id)
    if error:
        return api_error(error, 400)

    try:
        if "batchName" in data:
            batch.batch_name = data["batchName"]
        if course_id is not None:
            batch.course_id = course_id
        if "instructorId" in data:
            batch.instructor_id = instructor_id
        if "startDate" in data:
            batch.start_date = parse_date(data["startDate"])
        if "endDate" in data:
            batch.end_date = parse_date(data["endDate"])
        if "capacity" in data:
            batch.capacity = to_int(data["capacity"], batch.capacity)
        if "meetingLink" in data:
            batch.meeting_link = data["meetingLink"]
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return api_error(f"Invalid date: {exc}", 400)
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": batch.to_dict()})


@batches_bp.route("/<int:batch_id>", methods=["DELETE"])
@role_required("admin")
def delete_batch(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)

    # Enrollments, schedules (with attendance), resources and feedback cascade
    try:
        db.session.delete(batch)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Batch %s deleted", batch_id)
    return jsonify({"success": True})


@batches_bp.route("/<int:batch_id>/students", methods=["POST"])
@role_required("admin")
def enroll_student(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)

    student_id = to_int((request.json or {}).get("studentId"))
    student = db.session.get(User, student_id) if student_id else None
    if not student or student.role != "student":
        return api_error("Student not found", 404)

    if student_id in batch.student_ids():
        return api_error("Student is already enrolled in this batch", 400)

    if len(batch.students) >= batch.capacity:
        return api_error("Batch is at full capacity", 400)

    try:
        enrollment = StudentBatch(student_id=student_id, batch_id=batch_id)
        db.session.add(enrollment)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({
        "success": True,
        "data": {"studentId": student_id, "batchId": batch_id}
    }), 201


@batches_bp.route("/<int:batch_id>/students/<int:student_id>", methods=["DELETE"])
@role_required("admin")
def unenroll_student(batch_id, student_id):
    enrollment = StudentBatch.query.filter_by(batch_id=batch_id, student_id=student_id).first()
    if not enrollment:
        return api_error("Enrollment not found", 404)

    try:
        BatchFeedback.query.filter_by(
            batch_id=batch_id, student_id=student_id
        ).delete(synchronize_session=False)
        db.session.delete(enrollment)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True})
