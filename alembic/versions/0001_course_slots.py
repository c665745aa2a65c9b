"""course slots: schedules, time slots, processed capacity events

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "course_weekly_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("open_time", sa.Text(), nullable=False),
        sa.Column("close_time", sa.Text(), nullable=False),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("course_id", "day_of_week"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_weekly_day_of_week"),
        sa.CheckConstraint("slot_duration_minutes >= 10", name="ck_weekly_slot_duration"),
        sa.CheckConstraint("max_capacity >= 1", name="ck_weekly_max_capacity"),
    )

    op.create_table(
        "course_time_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("booked_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("course_id", "date", "start_time"),
        sa.CheckConstraint(
            "booked_count >= 0 AND booked_count <= max_capacity",
            name="ck_time_slot_booked_count",
        ),
    )
    op.create_index("ix_course_time_slots_course_id", "course_time_slots", ["course_id"])

    op.create_table(
        "processed_capacity_events",
        sa.Column("event_id", sa.Text(), primary_key=True),
        sa.Column("slot_id", sa.Integer(), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("processed_at", sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("processed_capacity_events")
    op.drop_index("ix_course_time_slots_course_id", table_name="course_time_slots")
    op.drop_table("course_time_slots")
    op.drop_table("course_weekly_schedules")
    op.drop_table("courses")
