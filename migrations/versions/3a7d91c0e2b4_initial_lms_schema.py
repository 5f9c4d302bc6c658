"""initial lms schema

Revision ID: 3a7d91c0e2b4
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a7d91c0e2b4"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("admin", "instructor", "student", name="user_role"), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("must_reset_password", sa.Boolean(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "courses",
        sa.Column("course_id", sa.Integer(), primary_key=True),
        sa.Column("course_name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "course_level",
            sa.Enum("beginner", "intermediate", "advanced", name="course_level"),
            nullable=False,
        ),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "batches",
        sa.Column("batch_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("batch_name", sa.String(length=100), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("instructor_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("meeting_link", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.ForeignKeyConstraint(["instructor_id"], ["users.user_id"]),
    )

    op.create_table(
        "student_batches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("enrollment_date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.batch_id"]),
        sa.UniqueConstraint("student_id", "batch_id", name="unique_student_batch"),
    )

    op.create_table(
        "schedules",
        sa.Column("schedule_id", sa.Integer(), primary_key=True),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("topic", sa.String(length=150), nullable=True),
        sa.Column("schedule_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("meeting_link", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.batch_id"]),
    )

    op.create_table(
        "resources",
        sa.Column("resource_id", sa.Integer(), primary_key=True),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("resource_type", sa.Enum("assignment", "recording", name="resource_type"), nullable=False),
        sa.Column("file_url", sa.String(length=500), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.batch_id"]),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.user_id"]),
    )
    op.create_index("ix_resources_batch_created", "resources", ["batch_id", "created_at"])

    op.create_table(
        "attendance",
        sa.Column("attendance_id", sa.Integer(), primary_key=True),
        sa.Column("schedule_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("marked_by", sa.Integer(), nullable=True),
        sa.Column("status", sa.Enum("present", "absent", "late", name="attendance_status"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.schedule_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["marked_by"], ["users.user_id"]),
        sa.UniqueConstraint("schedule_id", "user_id", name="unique_schedule_user"),
    )

    op.create_table(
        "batch_feedback",
        sa.Column("feedback_id", sa.Integer(), primary_key=True),
        sa.Column("batch_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("interval", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.batch_id"]),
        sa.ForeignKeyConstraint(["student_id"], ["users.user_id"]),
        sa.UniqueConstraint("batch_id", "student_id", "interval", name="unique_batch_student_interval"),
    )


def downgrade():
    op.drop_table("batch_feedback")
    op.drop_table("attendance")
    op.drop_index("ix_resources_batch_created", table_name="resources")
    op.drop_table("resources")
    op.drop_table("schedules")
    op.drop_table("student_batches")
    op.drop_table("batches")
    op.drop_table("courses")
    op.drop_table("users")
