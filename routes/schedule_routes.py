from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, Schedule
from services.request_context import current_context, can_manage_batch, can_view_batch
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int, parse_date, parse_time

schedules_bp = Blueprint("schedules", __name__, url_prefix="/api/schedules")


@schedules_bp.route("/batch/<int:batch_id>", methods=["GET"])
@login_required
def batch_schedules(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)
    if not can_view_batch(current_context(), batch):
        return api_error("You do not have access to this batch", 403)

    schedules = (
        Schedule.query
        .filter_by(batch_id=batch_id)
        .order_by(Schedule.schedule_date.asc(), Schedule.start_time.asc())
        .all()
    )
    return jsonify({"success": True, "data": [s.to_dict() for s in schedules]})


@schedules_bp.route("/<int:schedule_id>", methods=["GET"])
@login_required
def get_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)
    if not can_view_batch(current_context(), schedule.batch):
        return api_error("You do not have access to this batch", 403)
    return jsonify({"success": True, "data": schedule.to_dict()})


@schedules_bp.route("", methods=["POST"])
@login_required
def create_schedule():
    data = request.json or {}
    batch_id = to_int(data.get("batchId"))
    if batch_id is None or not data.get("scheduleDate"):
        return api_error("batchId and scheduleDate are required", 400)

    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)
    if not can_manage_batch(current_context(), batch):
        return api_error("Not authorized to schedule classes for this batch", 403)

    try:
        schedule = Schedule(
            batch_id=batch_id,
            topic=data.get("topic"),
            schedule_date=parse_date(data["scheduleDate"]),
            start_time=parse_time(data.get("startTime")),
            end_time=parse_time(data.get("endTime")),
            meeting_link=data.get("meetingLink") or batch.meeting_link
        )
        db.session.add(schedule)
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return api_error(f"Invalid date or time: {exc}", 400)
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": schedule.to_dict()}), 201


@schedules_bp.route("/<int:schedule_id>", methods=["PUT"])
@login_required
def update_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)
    if not can_manage_batch(current_context(), schedule.batch):
        return api_error("Not authorized to edit this schedule", 403)

    data = request.json or {}
    try:
        if "topic" in data:
            schedule.topic = data["topic"]
        if "scheduleDate" in data:
            schedule.schedule_date = parse_date(data["scheduleDate"])
        if "startTime" in data:
            schedule.start_time = parse_time(data["startTime"])
        if "endTime" in data:
            schedule.end_time = parse_time(data["endTime"])
        if "meetingLink" in data:
            schedule.meeting_link = data["meetingLink"]
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return api_error(f"Invalid date or time: {exc}", 400)
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": schedule.to_dict()})


@schedules_bp.route("/<int:schedule_id>", methods=["DELETE"])
@login_required
def delete_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return api_error("Schedule not found", 404)
    if not can_manage_batch(current_context(), schedule.batch):
        return api_error("Not authorized to delete this schedule", 403)

    # Attendance rows cascade with the schedule
    try:
        db.session.delete(schedule)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True})
