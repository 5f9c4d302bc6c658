"""
Resource gating by periodic batch feedback.

Resources of a batch are grouped, in creation order, into intervals of
``FEEDBACK_INTERVAL_SIZE`` (5) uploads. Interval 1 is always open; every
later interval opens once the student has reviewed the one before it.
"""
import logging
import math

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import BatchFeedback, Resource

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SIZE = 5


def interval_size():
    try:
        return int(current_app.config.get("FEEDBACK_INTERVAL_SIZE", DEFAULT_INTERVAL_SIZE))
    except RuntimeError:
        # outside an application context
        return DEFAULT_INTERVAL_SIZE


# =========================================================
# PURE HELPERS
# =========================================================

def interval_for_index(index, size=DEFAULT_INTERVAL_SIZE):
    """1-based interval of the resource at zero-based ``index``."""
    return index // size + 1


def interval_count(resource_count, size=DEFAULT_INTERVAL_SIZE):
    if resource_count <= 0:
        return 0
    return int(math.ceil(resource_count / size))


def sequence_resources(resources, size=DEFAULT_INTERVAL_SIZE):
    """
    Order resources by creation and attach their derived position.

    Returns a list of ``(index, interval, resource)`` tuples. Ties on
    ``created_at`` fall back to the primary key so the order is stable.
    """
    ordered = sorted(resources, key=lambda r: (r.created_at, r.resource_id))
    return [
        (idx, interval_for_index(idx, size), resource)
        for idx, resource in enumerate(ordered)
    ]


def earliest_missing_interval(target_interval, submitted_intervals):
    """First interval in ``1..target_interval-1`` with no feedback, else None."""
    submitted = set(submitted_intervals)
    for interval in range(1, target_interval):
        if interval not in submitted:
            return interval
    return None


def compute_required_interval(resource_count, submitted_intervals=(), size=DEFAULT_INTERVAL_SIZE):
    # A single block never needs feedback, interval 1 is open to everyone.
    if resource_count < size + 1:
        return {"feedbackRequired": False, "interval": 0}

    current = (resource_count - 1) // size + 1
    required = current - 1
    missing = earliest_missing_interval(current, submitted_intervals)

    result = {"feedbackRequired": missing is not None, "interval": required}
    if missing is not None:
        result["missingInterval"] = missing
    return result


def unlocked_through(submitted_intervals):
    """Highest open interval: one past the latest reviewed block."""
    submitted = list(submitted_intervals)
    if not submitted:
        return 1
    return max(submitted) + 1


def is_resource_locked(resource_index, last_submitted_interval, size=DEFAULT_INTERVAL_SIZE):
    return interval_for_index(resource_index, size) > last_submitted_interval


def can_submit_interval(interval, submitted_intervals):
    """
    A student may review a block they can already open, or revise a
    review they have already given. Reviewing a locked block is refused,
    otherwise a single submission could unlock everything behind it.
    """
    submitted = list(submitted_intervals)
    return interval in submitted or interval <= unlocked_through(submitted)


def stale_intervals(feedback_intervals, resource_count, size=DEFAULT_INTERVAL_SIZE):
    """Feedback intervals no longer backed by any resource."""
    limit = interval_count(resource_count, size)
    return sorted({i for i in feedback_intervals if i > limit})


# =========================================================
# DATABASE OPERATIONS
# =========================================================

def batch_resources(batch_id):
    return (
        Resource.query
        .filter_by(batch_id=batch_id)
        .order_by(Resource.created_at.asc(), Resource.resource_id.asc())
        .all()
    )


def submitted_intervals_for(batch_id, student_id):
    rows = (
        db.session.query(BatchFeedback.interval)
        .filter_by(batch_id=batch_id, student_id=student_id)
        .all()
    )
    return [r[0] for r in rows]


def feedback_status(batch_id, student_id):
    resource_count = Resource.query.filter_by(batch_id=batch_id).count()
    return compute_required_interval(
        resource_count,
        submitted_intervals_for(batch_id, student_id),
        interval_size()
    )


def resources_with_lock_state(batch_id, student_id=None):
    """
    Serialized batch resources with ``sequenceIndex``, ``interval`` and
    ``locked``. Nothing is locked when ``student_id`` is None (staff view).
    """
    size = interval_size()
    open_through = None
    if student_id is not None:
        open_through = unlocked_through(submitted_intervals_for(batch_id, student_id))

    items = []
    for idx, interval, resource in sequence_resources(batch_resources(batch_id), size):
        data = resource.to_dict()
        data["sequenceIndex"] = idx
        data["interval"] = interval
        data["locked"] = (
            open_through is not None and is_resource_locked(idx, open_through, size)
        )
        if data["locked"]:
            data["fileUrl"] = None
        items.append(data)
    return items


def is_resource_visible(resource, student_id):
    size = interval_size()
    open_through = unlocked_through(submitted_intervals_for(resource.batch_id, student_id))
    for idx, _, item in sequence_resources(batch_resources(resource.batch_id), size):
        if item.resource_id == resource.resource_id:
            return not is_resource_locked(idx, open_through, size)
    return False


def _upsert_feedback(batch_id, student_id, interval, rating, feedback):
    row = BatchFeedback.query.filter_by(
        batch_id=batch_id,
        student_id=student_id,
        interval=interval
    ).first()

    if row:
        row.rating = rating
        row.feedback = feedback
        return row, False

    row = BatchFeedback(
        batch_id=batch_id,
        student_id=student_id,
        interval=interval,
        rating=rating,
        feedback=feedback
    )
    db.session.add(row)
    return row, True


def submit_feedback(batch_id, student_id, interval, rating, feedback=None):
    """
    Create or update the feedback row for ``(batch, student, interval)``.

    Returns ``(row, created, error)``. Only open or already reviewed
    intervals are accepted. Last write wins: a concurrent insert that trips
    the unique constraint is retried as an update.
    """
    resource_count = Resource.query.filter_by(batch_id=batch_id).count()
    available = interval_count(resource_count, interval_size())
    if interval < 1 or interval > available:
        return None, False, f"Interval {interval} has no resources in this batch"

    submitted = submitted_intervals_for(batch_id, student_id)
    if not can_submit_interval(interval, submitted):
        logger.info(
            "Rejected feedback for locked interval=%s batch=%s student=%s",
            interval, batch_id, student_id
        )
        return None, False, f"Interval {interval} is locked; submit feedback for interval {unlocked_through(submitted)} first"

    row, created = _upsert_feedback(batch_id, student_id, interval, rating, feedback)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info(
            "Feedback for batch=%s student=%s interval=%s written concurrently, updating",
            batch_id, student_id, interval
        )
        row, created = _upsert_feedback(batch_id, student_id, interval, rating, feedback)
        db.session.commit()

    logger.info(
        "Feedback %s batch=%s student=%s interval=%s",
        "created" if created else "updated", batch_id, student_id, interval
    )
    return row, created, None


def purge_stale_feedback(batch_id):
    """
    Delete feedback rows whose interval lost all its resources.

    Does not commit; the caller owns the transaction.
    """
    resource_count = Resource.query.filter_by(batch_id=batch_id).count()
    rows = (
        db.session.query(BatchFeedback.interval)
        .filter_by(batch_id=batch_id)
        .distinct()
        .all()
    )
    stale = stale_intervals([r[0] for r in rows], resource_count, interval_size())
    if not stale:
        return 0

    purged = (
        BatchFeedback.query
        .filter(BatchFeedback.batch_id == batch_id, BatchFeedback.interval.in_(stale))
        .delete(synchronize_session=False)
    )
    logger.info("Purged %s stale feedback rows for batch=%s (intervals %s)", purged, batch_id, stale)
    return purged


def delete_resources(resource_ids):
    """
    Delete resources and the feedback their removal orphans, atomically.

    Returns ``{"deleted": n, "purged": {batch_id: n}}``.
    """
    resources = Resource.query.filter(Resource.resource_id.in_(resource_ids)).all()
    batch_ids = sorted({r.batch_id for r in resources})

    try:
        for resource in resources:
            db.session.delete(resource)
        db.session.flush()
        purged = {batch_id: purge_stale_feedback(batch_id) for batch_id in batch_ids}
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return {"deleted": len(resources), "purged": purged}
