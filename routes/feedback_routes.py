from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, BatchFeedback
from services import feedback_gate
from services.request_context import current_context, can_manage_batch, can_view_batch
from utils.decorators import role_required
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int

feedback_bp = Blueprint("feedback", __name__, url_prefix="/api/feedback")


def _enrolled_batch(batch_id, ctx):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return None, api_error("Batch not found", 404)
    if not can_view_batch(ctx, batch):
        return None, api_error("You are not enrolled in this batch", 403)
    return batch, None


@feedback_bp.route("/batch/<int:batch_id>/check", methods=["GET"])
@role_required("student")
def check_feedback(batch_id):
    ctx = current_context()
    _, error = _enrolled_batch(batch_id, ctx)
    if error:
        return error

    status = feedback_gate.feedback_status(batch_id, ctx.user_id)
    return jsonify({"success": True, "data": status})


@feedback_bp.route("/batch/<int:batch_id>", methods=["POST"])
@role_required("student")
def submit_feedback(batch_id):
    ctx = current_context()
    _, error = _enrolled_batch(batch_id, ctx)
    if error:
        return error

    data = request.json or {}
    interval = to_int(data.get("interval"))
    rating = to_int(data.get("rating"))

    if interval is None or rating is None:
        return api_error("interval and rating are required", 400)
    if not 1 <= rating <= 5:
        return api_error("rating must be between 1 and 5", 400)

    try:
        row, created, message = feedback_gate.submit_feedback(
            batch_id, ctx.user_id, interval, rating, data.get("feedback")
        )
    except Exception as exc:
        return handle_api_error(exc)

    if message:
        return api_error(message, 400)

    return jsonify({
        "success": True,
        "data": row.to_dict(),
        "isUpdate": not created
    }), 201 if created else 200


@feedback_bp.route("/batch/<int:batch_id>", methods=["GET"])
@login_required
def list_feedback(batch_id):
    ctx = current_context()
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)

    q = BatchFeedback.query.filter_by(batch_id=batch_id)
    if not can_manage_batch(ctx, batch):
        if not can_view_batch(ctx, batch):
            return api_error("You do not have access to this batch", 403)
        q = q.filter_by(student_id=ctx.user_id)

    rows = q.order_by(BatchFeedback.interval.asc(), BatchFeedback.student_id.asc()).all()
    return jsonify({"success": True, "data": [r.to_dict() for r in rows]})
