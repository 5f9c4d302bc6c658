import io
import logging

from flask import Blueprint, request, jsonify, send_file
from flask_login import login_required

from extensions import db
from models import Attendance, Batch, Schedule, StudentBatch, User
from models.attendance import STATUSES
from services import attendance_analytics
from services.request_context import (
    current_context, is_staff, can_manage_batch, can_view_batch, can_view_student
)
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int

logger = logging.getLogger(__name__)

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


# =========================================================
# HELPERS
# =========================================================

def _record_entry(user, record, is_instructor=False):
    entry = {
        "attendanceId": record.attendance_id if record else None,
        "userId": user.user_id,
        "user": user.to_dict(),
        "status": record.status if record else None,
        "markedBy": record.marked_by if record else None,
    }
    if is_instructor:
        entry["isInstructor"] = True
    return entry


def _upsert_attendance(schedule_id, user_id, status, marked_by):
    record = Attendance.query.filter_by(schedule_id=schedule_id, user_id=user_id).first()
    if record:
        record.status = status
        return record, False

    record = Attendance(
        schedule_id=schedule_id,
        user_id=user_id,
        status=status,
        marked_by=marked_by
    )
    db.session.add(record)
    return record, True


def _auto_mark_instructor(schedule_id, instructor_id):
    existing = Attendance.query.filter_by(schedule_id=schedule_id, user_id=instructor_id).first()
    if not existing:
        db.session.add(Attendance(
            schedule_id=schedule_id,
            user_id=instructor_id,
            status="present",
            marked_by=instructor_id
        ))


def _validate_subject(batch, user_id, status, enrolled_ids):
    """Error message for an attendance entry, or None when it is valid."""
    if status not in STATUSES:
        return f"Invalid status: {status}"
    if batch.instructor_id is not None and user_id == batch.instructor_id:
        # Instructors are either present or not recorded at all
        if status != "present":
            return "Instructors can only be marked present"
        return None
    if user_id not in enrolled_ids:
        return f"User with ID {user_id} is not enrolled in this batch"
    return None


# =========================================================
# ATTENDANCE RECORDS
# =========================================================

@attendance_bp.route("/schedule/<int:schedule_id>", methods=["GET"])
@login_required
def schedule_attendance(schedule_id):
    ctx = current_context()
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)

    batch = schedule.batch
    enrolled = [sb.student for sb in batch.students]
    if not can_view_batch(ctx, batch, [s.user_id for s in enrolled]):
        return api_error("You do not have access to this batch", 403)

    records = {r.user_id: r for r in schedule.attendance_records}

    if ctx.role == "student":
        student = next(s for s in enrolled if s.user_id == ctx.user_id)
        return jsonify({"success": True, "data": [_record_entry(student, records.get(student.user_id))]})

    data = [_record_entry(s, records.get(s.user_id)) for s in enrolled]
    if batch.instructor:
        data.append(_record_entry(batch.instructor, records.get(batch.instructor_id), is_instructor=True))

    return jsonify({"success": True, "data": data})


@attendance_bp.route("", methods=["POST"])
@login_required
def mark_attendance():
    ctx = current_context()
    if not is_staff(ctx):
        return api_error("Only instructors and admins can mark attendance", 403)

    data = request.json or {}
    schedule_id = to_int(data.get("scheduleId"))
    user_id = to_int(data.get("userId"))
    status = data.get("status")

    if schedule_id is None or user_id is None or not status:
        return api_error("Missing required fields", 400)

    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)

    batch = schedule.batch
    if not can_manage_batch(ctx, batch):
        return api_error("Not authorized to mark attendance for this batch", 403)

    if not db.session.get(User, user_id):
        return api_error("User not found", 404)

    error = _validate_subject(batch, user_id, status, batch.student_ids())
    if error:
        return api_error(error, 400)

    try:
        record, created = _upsert_attendance(schedule_id, user_id, status, ctx.user_id)
        if ctx.role == "instructor" and user_id != ctx.user_id:
            _auto_mark_instructor(schedule_id, ctx.user_id)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": record.to_dict(), "isUpdate": not created})


@attendance_bp.route("/bulk", methods=["POST"])
@login_required
def mark_bulk_attendance():
    ctx = current_context()
    if not is_staff(ctx):
        return api_error("Only instructors and admins can mark attendance", 403)

    data = request.json or {}
    schedule_id = to_int(data.get("scheduleId"))
    records = data.get("attendanceRecords")

    if schedule_id is None or not isinstance(records, list) or not records:
        return api_error("Missing or invalid required fields", 400)

    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)

    batch = schedule.batch
    if not can_manage_batch(ctx, batch):
        return api_error("Not authorized to mark attendance for this batch", 403)

    enrolled_ids = batch.student_ids()
    results = []

    # Every entry is judged on its own; one bad row does not sink the rest
    try:
        for item in records:
            user_id = to_int((item or {}).get("userId"))
            status = (item or {}).get("status")
            error = "userId is required" if user_id is None else _validate_subject(
                batch, user_id, status, enrolled_ids
            )
            if error:
                results.append({"userId": user_id, "success": False, "error": error})
                continue

            record, created = _upsert_attendance(schedule_id, user_id, status, ctx.user_id)
            db.session.flush()
            results.append({
                "userId": user_id,
                "success": True,
                "data": record.to_dict(),
                "isUpdate": not created
            })

        if ctx.role == "instructor" and any(r["success"] for r in results):
            _auto_mark_instructor(schedule_id, ctx.user_id)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    failed = sum(1 for r in results if not r["success"])
    if failed:
        logger.info("Bulk attendance for schedule %s: %s of %s entries rejected", schedule_id, failed, len(results))

    return jsonify({"success": True, "data": results})


@attendance_bp.route("/<int:attendance_id>", methods=["PUT"])
@login_required
def update_attendance(attendance_id):
    ctx = current_context()
    if not is_staff(ctx):
        return api_error("Only instructors and admins can update attendance", 403)

    record = db.session.get(Attendance, attendance_id)
    if not record:
        return api_error("Attendance record not found", 404)

    batch = record.schedule.batch
    if not can_manage_batch(ctx, batch):
        return api_error("Not authorized to update attendance for this batch", 403)

    status = (request.json or {}).get("status")
    error = _validate_subject(batch, record.user_id, status, batch.student_ids())
    if error:
        return api_error(error, 400)

    try:
        record.status = status
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": record.to_dict()})


@attendance_bp.route("/<int:attendance_id>", methods=["DELETE"])
@login_required
def delete_attendance(attendance_id):
    ctx = current_context()
    if not is_staff(ctx):
        return api_error("Only admins and instructors can delete attendance records", 403)

    record = db.session.get(Attendance, attendance_id)
    if not record:
        return api_error("Attendance record not found", 404)
    if not can_manage_batch(ctx, record.schedule.batch):
        return api_error("You are not authorized to delete this attendance record", 403)

    try:
        db.session.delete(record)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True})


# =========================================================
# ANALYTICS
# =========================================================

def _teaches_student(instructor_id, student_id):
    return (
        db.session.query(StudentBatch.id)
        .join(Batch, Batch.batch_id == StudentBatch.batch_id)
        .filter(StudentBatch.student_id == student_id, Batch.instructor_id == instructor_id)
        .first()
    ) is not None


@attendance_bp.route("/analytics/student/<int:student_id>", methods=["GET"])
@login_required
def student_analytics(student_id):
    ctx = current_context()
    if not can_view_student(ctx, student_id):
        return api_error("You can only view your own attendance analytics", 403)
    if not db.session.get(User, student_id):
        return api_error("User not found", 404)
    if ctx.role == "instructor" and not _teaches_student(ctx.user_id, student_id):
        return api_error("This student is not enrolled in any of your batches", 403)

    try:
        data, error = attendance_analytics.student_analytics(student_id)
    except Exception as exc:
        return handle_api_error(exc)

    if error == "User not found":
        return api_error(error, 404)
    if error:
        return api_error(error, 400)

    return jsonify({"success": True, "data": data})


def _batch_analytics_for(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return None, api_error("Batch not found", 404)
    if not can_view_batch(current_context(), batch):
        return None, api_error("You do not have access to this batch", 403)

    data, error = attendance_analytics.batch_analytics(batch_id, batch)
    if error:
        return None, api_error(error, 404)
    return data, None


@attendance_bp.route("/analytics/batch/<int:batch_id>", methods=["GET"])
@login_required
def batch_analytics(batch_id):
    try:
        data, error = _batch_analytics_for(batch_id)
    except Exception as exc:
        return handle_api_error(exc)
    if error:
        return error
    return jsonify({"success": True, "data": data})


@attendance_bp.route("/analytics/batch/<int:batch_id>/export", methods=["GET"])
@login_required
def export_batch_analytics(batch_id):
    if not is_staff(current_context()):
        return api_error("Only instructors and admins can export attendance", 403)

    try:
        data, error = _batch_analytics_for(batch_id)
        if error:
            return error
        df = attendance_analytics.batch_analytics_frame(data)
        output = io.BytesIO()
        df.to_csv(output, index=False)
        output.seek(0)
    except Exception as exc:
        return handle_api_error(exc)

    return send_file(
        output,
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"attendance_batch_{batch_id}.csv"
    )
