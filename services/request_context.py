from collections import namedtuple

from flask_login import current_user

RequestContext = namedtuple("RequestContext", ["user_id", "role"])


def current_context():
    """Snapshot of the authenticated caller, handed to access checks."""
    if not current_user.is_authenticated:
        return RequestContext(user_id=None, role=None)
    return RequestContext(user_id=current_user.user_id, role=current_user.role)


def is_admin(ctx):
    return ctx.role == "admin"


def is_staff(ctx):
    return ctx.role in ("admin", "instructor")


def can_view_student(ctx, student_id):
    # Students only see themselves
    if ctx.role == "student":
        return ctx.user_id == student_id
    return is_staff(ctx)


def can_manage_batch(ctx, batch):
    if is_admin(ctx):
        return True
    return ctx.role == "instructor" and batch.instructor_id == ctx.user_id


def can_view_batch(ctx, batch, enrolled_ids=None):
    if can_manage_batch(ctx, batch):
        return True
    if ctx.role == "student":
        if enrolled_ids is None:
            enrolled_ids = batch.student_ids()
        return ctx.user_id in enrolled_ids
    return False


def can_view_instructor(ctx, instructor_id):
    if is_admin(ctx):
        return True
    return ctx.role == "instructor" and ctx.user_id == instructor_id
