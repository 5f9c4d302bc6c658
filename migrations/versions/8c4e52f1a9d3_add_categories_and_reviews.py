"""add course categories and reviews

Revision ID: 8c4e52f1a9d3
Revises: 3a7d91c0e2b4
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "8c4e52f1a9d3"
down_revision = "3a7d91c0e2b4"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "course_categories",
        sa.Column("category_id", sa.Integer(), primary_key=True),
        sa.Column("category_name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )

    with op.batch_alter_table("courses") as batch_op:
        batch_op.add_column(sa.Column("category_id", sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            "fk_courses_category_id", "course_categories", ["category_id"], ["category_id"]
        )

    op.create_table(
        "course_reviews",
        sa.Column("review_id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"]),
        sa.UniqueConstraint("course_id", "user_id", name="unique_course_user_review"),
    )


def downgrade():
    op.drop_table("course_reviews")
    with op.batch_alter_table("courses") as batch_op:
        batch_op.drop_constraint("fk_courses_category_id", type_="foreignkey")
        batch_op.drop_column("category_id")
    op.drop_table("course_categories")
