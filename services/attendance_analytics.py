import logging
import math
from collections import Counter

import pandas as pd

from extensions import db
from models import Attendance, Batch, Schedule, User

logger = logging.getLogger(__name__)

STATUSES = ("present", "absent", "late")


def attendance_percentage(present, total):
    """Rounded percentage, half-up, 0 for an empty denominator."""
    if not total:
        return 0
    return int(math.floor(present / total * 100 + 0.5))


def tally(statuses):
    counts = Counter(s for s in statuses if s in STATUSES)
    return {status: counts.get(status, 0) for status in STATUSES}


def build_stats(total, counts):
    return {
        "total": total,
        "present": counts["present"],
        "absent": counts["absent"],
        "late": counts["late"],
        "percentage": attendance_percentage(counts["present"], total),
    }


def _schedule_ids(batch_id):
    rows = db.session.query(Schedule.schedule_id).filter_by(batch_id=batch_id).all()
    return [r[0] for r in rows]


def _statuses(schedule_ids, user_ids):
    if not schedule_ids or not user_ids:
        return []
    rows = (
        db.session.query(Attendance.user_id, Attendance.status)
        .filter(
            Attendance.schedule_id.in_(schedule_ids),
            Attendance.user_id.in_(user_ids)
        )
        .all()
    )
    return rows


def student_analytics(student_id):
    """
    Attendance of one student across every batch they belong to.

    Returns ``(data, error)``. The overall percentage is computed from the
    summed totals, not averaged over batches.
    """
    user = db.session.get(User, student_id)
    if not user:
        return None, "User not found"
    if user.role != "student":
        return None, "User is not a student"

    by_batch = []
    overall_total = 0
    overall_counts = {status: 0 for status in STATUSES}

    for enrollment in user.student_batches:
        batch = enrollment.batch
        schedule_ids = _schedule_ids(batch.batch_id)
        counts = tally(status for _, status in _statuses(schedule_ids, [student_id]))

        overall_total += len(schedule_ids)
        for status in STATUSES:
            overall_counts[status] += counts[status]

        stats = build_stats(len(schedule_ids), counts)
        stats.update({"batchId": batch.batch_id, "batchName": batch.batch_name})
        by_batch.append(stats)

    return {
        "overall": build_stats(overall_total, overall_counts),
        "byBatch": by_batch,
    }, None


def batch_analytics(batch_id, batch=None):
    """
    Attendance of every enrolled student of one batch.

    The batch-wide denominator is ``students * schedules``.
    """
    batch = batch or db.session.get(Batch, batch_id)
    if not batch:
        return None, "Batch not found"

    schedule_ids = _schedule_ids(batch.batch_id)
    students = [sb.student for sb in batch.students]
    rows = _statuses(schedule_ids, [s.user_id for s in students])

    per_student = {}
    for user_id, status in rows:
        per_student.setdefault(user_id, []).append(status)

    student_stats = []
    for student in sorted(students, key=lambda s: s.full_name or ""):
        stats = build_stats(len(schedule_ids), tally(per_student.get(student.user_id, [])))
        stats.update({
            "userId": student.user_id,
            "fullName": student.full_name,
            "email": student.email,
        })
        student_stats.append(stats)

    total_possible = len(students) * len(schedule_ids)
    return {
        "batchId": batch.batch_id,
        "batchName": batch.batch_name,
        "totalStudents": len(students),
        "totalClasses": len(schedule_ids),
        "overall": build_stats(total_possible, tally(status for _, status in rows)),
        "students": student_stats,
    }, None


def batch_analytics_frame(data):
    columns = ["Student Name", "Email", "Total Classes", "Present", "Absent", "Late", "Percentage"]
    rows = [
        [
            s["fullName"],
            s["email"],
            s["total"],
            s["present"],
            s["absent"],
            s["late"],
            s["percentage"],
        ]
        for s in data["students"]
    ]
    return pd.DataFrame(rows, columns=columns)
