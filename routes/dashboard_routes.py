from flask import Blueprint, jsonify

from extensions import db
from models import Batch, Course, Resource, User, StudentBatch
from utils.decorators import role_required

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("", methods=["GET"])
@role_required("admin")
def dashboard_metrics():
    counts = {
        "students": User.query.filter_by(role="student").count(),
        "instructors": User.query.filter_by(role="instructor").count(),
        "courses": Course.query.count(),
        "batches": Batch.query.count(),
        "resources": Resource.query.count(),
    }

    recent_batches = Batch.query.order_by(Batch.start_date.desc()).limit(5).all()

    # Courses ranked by the number of students across their batches
    popular = (
        db.session.query(Course, db.func.count(StudentBatch.id).label("enrolled"))
        .outerjoin(Batch, Batch.course_id == Course.course_id)
        .outerjoin(StudentBatch, StudentBatch.batch_id == Batch.batch_id)
        .group_by(Course.course_id)
        .order_by(db.desc("enrolled"))
        .limit(5)
        .all()
    )

    return jsonify({
        "success": True,
        "data": {
            "counts": counts,
            "recentBatches": [b.to_dict() for b in recent_batches],
            "popularCourses": [
                dict(course.to_dict(), enrolled=enrolled) for course, enrolled in popular
            ],
        }
    })
