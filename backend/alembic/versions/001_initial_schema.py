# backend/alembic/versions/001_initial_schema.py
"""Initial schema - users, classrooms, reviewable requests, mentorship, schedules, courses

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates every table the workflow services use, with the uniqueness and check
constraints the state machines rely on.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


def _tz(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), **kwargs)


def _user_fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Integer(), sa.ForeignKey("users.id"), nullable=nullable)


def _review_columns() -> list:
    """Columns shared by every pending/approved/rejected request table."""
    return [
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        _user_fk("reviewed_by", nullable=True),
        _tz("reviewed_at", nullable=True),
        _tz("created_at", server_default=sa.func.now()),
        _tz("updated_at", nullable=True),
    ]


REVIEW_TABLES = (
    "staff_requests",
    "resignation_requests",
    "master_role_requests",
    "mentor_applications",
)


def upgrade() -> None:
    print("Creating initial Maestro schema...")

    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("is_master", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("first_name", sa.String(50), nullable=True),
        sa.Column("last_name", sa.String(50), nullable=True),
        _tz("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "classrooms",
        _id(),
        _user_fk("master_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("level", sa.String(50), nullable=False),
        sa.Column("academy_name", sa.String(200), nullable=True),
        sa.Column("logo_url", sa.String(500), nullable=True),
        sa.Column("primary_color", sa.String(20), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("custom_slug", sa.String(100), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _tz("created_at", server_default=sa.func.now()),
        _tz("updated_at", nullable=True),
        sa.CheckConstraint("max_students > 0", name="ck_classrooms_max_students"),
    )
    op.create_index("ix_classrooms_id", "classrooms", ["id"])
    op.create_index("ix_classrooms_master_id", "classrooms", ["master_id"])

    op.create_table(
        "classroom_memberships",
        _id(),
        _user_fk("user_id"),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("message", sa.Text(), nullable=True),
        _tz("joined_at", server_default=sa.func.now()),
        _user_fk("reviewed_by", nullable=True),
        _tz("reviewed_at", nullable=True),
        _tz("removed_at", nullable=True),
        sa.UniqueConstraint("user_id", "classroom_id", name="uq_membership_user_classroom"),
        sa.CheckConstraint("role IN ('master', 'staff', 'student')", name="ck_membership_role"),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'removed')", name="ck_membership_status"
        ),
    )
    op.create_index("ix_classroom_memberships_id", "classroom_memberships", ["id"])
    op.create_index("ix_classroom_memberships_status", "classroom_memberships", ["status"])
    op.create_index(
        "ix_membership_classroom_status", "classroom_memberships", ["classroom_id", "status"]
    )

    op.create_table(
        "staff_requests",
        _id(),
        _user_fk("mentor_id"),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        *_review_columns(),
    )
    op.create_index("ix_staff_requests_mentor_id", "staff_requests", ["mentor_id"])
    op.create_index("ix_staff_requests_classroom_id", "staff_requests", ["classroom_id"])

    op.create_table(
        "resignation_requests",
        _id(),
        _user_fk("mentor_id"),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        *_review_columns(),
    )
    op.create_index("ix_resignation_requests_mentor_id", "resignation_requests", ["mentor_id"])
    op.create_index(
        "ix_resignation_requests_classroom_id", "resignation_requests", ["classroom_id"]
    )

    op.create_table(
        "master_role_requests",
        _id(),
        _user_fk("mentor_id"),
        sa.Column("reason", sa.Text(), nullable=True),
        _tz("approved_at", nullable=True),
        _tz("rejected_at", nullable=True),
        *_review_columns(),
    )
    op.create_index("ix_master_role_requests_mentor_id", "master_role_requests", ["mentor_id"])

    op.create_table(
        "mentor_applications",
        _id(),
        _user_fk("user_id"),
        sa.Column("instrument", sa.String(100), nullable=False),
        sa.Column("experience", sa.Text(), nullable=True),
        sa.Column("motivation", sa.Text(), nullable=True),
        *_review_columns(),
    )
    op.create_index("ix_mentor_applications_user_id", "mentor_applications", ["user_id"])

    for table in REVIEW_TABLES:
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_status", table, ["status"])

    op.create_table(
        "mentorship_requests",
        _id(),
        _user_fk("student_id"),
        _user_fk("mentor_id"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("mentor_response", sa.Text(), nullable=True),
        _tz("created_at", server_default=sa.func.now()),
        _tz("accepted_at", nullable=True),
        _tz("rejected_at", nullable=True),
        _tz("cancelled_at", nullable=True),
    )
    op.create_index("ix_mentorship_requests_id", "mentorship_requests", ["id"])
    op.create_index("ix_mentorship_requests_student_id", "mentorship_requests", ["student_id"])
    op.create_index("ix_mentorship_requests_mentor_id", "mentorship_requests", ["mentor_id"])
    op.create_index("ix_mentorship_requests_status", "mentorship_requests", ["status"])
    op.create_index(
        "ix_mentorship_pair", "mentorship_requests", ["student_id", "mentor_id", "status"]
    )

    op.create_table(
        "mentor_conversations",
        _id(),
        sa.Column(
            "mentorship_request_id",
            sa.Integer(),
            sa.ForeignKey("mentorship_requests.id"),
            nullable=False,
        ),
        _user_fk("sender_id"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _tz("read_at", nullable=True),
        _tz("created_at", server_default=sa.func.now()),
    )
    op.create_index("ix_mentor_conversations_id", "mentor_conversations", ["id"])
    op.create_index(
        "ix_mentor_conversations_mentorship_request_id",
        "mentor_conversations",
        ["mentorship_request_id"],
    )

    op.create_table(
        "mentorship_sessions",
        _id(),
        sa.Column(
            "mentorship_request_id",
            sa.Integer(),
            sa.ForeignKey("mentorship_requests.id"),
            nullable=False,
        ),
        _user_fk("mentor_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _tz("scheduled_at", nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("meeting_link", sa.String(500), nullable=True),
        sa.Column("mentor_notes", sa.Text(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("session_feedback", sa.Text(), nullable=True),
        _tz("created_at", server_default=sa.func.now()),
        _tz("completed_at", nullable=True),
        _tz("cancelled_at", nullable=True),
        sa.CheckConstraint("duration_minutes > 0", name="ck_session_duration_positive"),
        sa.CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_session_rating"
        ),
    )
    op.create_index("ix_mentorship_sessions_id", "mentorship_sessions", ["id"])
    op.create_index(
        "ix_mentorship_sessions_mentorship_request_id",
        "mentorship_sessions",
        ["mentorship_request_id"],
    )
    op.create_index("ix_mentorship_sessions_status", "mentorship_sessions", ["status"])
    op.create_index(
        "ix_mentorship_session_mentor_time", "mentorship_sessions", ["mentor_id", "scheduled_at"]
    )

    op.create_table(
        "schedules",
        _id(),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        _user_fk("instructor_id"),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _tz("created_at", server_default=sa.func.now()),
        _tz("updated_at", nullable=True),
        sa.CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_schedule_day"),
        sa.CheckConstraint("start_time < end_time", name="ck_schedule_time_order"),
        sa.CheckConstraint("max_students > 0", name="ck_schedule_max_students"),
    )
    op.create_index("ix_schedules_id", "schedules", ["id"])
    op.create_index("ix_schedules_classroom_id", "schedules", ["classroom_id"])
    op.create_index(
        "ix_schedules_instructor_day", "schedules", ["instructor_id", "day_of_week", "is_active"]
    )

    op.create_table(
        "schedule_enrollments",
        _id(),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id"), nullable=False),
        _user_fk("student_id"),
        sa.Column("status", sa.String(20), nullable=False, server_default="enrolled"),
        _tz("enrolled_at", server_default=sa.func.now()),
        _tz("unenrolled_at", nullable=True),
        sa.UniqueConstraint("schedule_id", "student_id", name="uq_schedule_enrollment_student"),
        sa.CheckConstraint(
            "status IN ('enrolled', 'unenrolled')", name="ck_schedule_enrollment_status"
        ),
    )
    op.create_index("ix_schedule_enrollments_id", "schedule_enrollments", ["id"])
    op.create_index("ix_schedule_enrollments_schedule_id", "schedule_enrollments", ["schedule_id"])
    op.create_index("ix_schedule_enrollments_student_id", "schedule_enrollments", ["student_id"])
    op.create_index("ix_schedule_enrollments_status", "schedule_enrollments", ["status"])

    op.create_table(
        "courses",
        _id(),
        _user_fk("mentor_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("level", sa.String(30), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        _user_fk("reviewed_by", nullable=True),
        _tz("reviewed_at", nullable=True),
        _tz("submitted_at", nullable=True),
        sa.Column("resubmission_count", sa.Integer(), nullable=False, server_default="0"),
        _tz("published_at", nullable=True),
        _tz("archived_at", nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _tz("created_at", server_default=sa.func.now()),
        _tz("updated_at", nullable=True),
    )
    op.create_index("ix_courses_id", "courses", ["id"])
    op.create_index("ix_courses_mentor_id", "courses", ["mentor_id"])
    op.create_index("ix_courses_status", "courses", ["status"])

    print("Initial Maestro schema created")


def downgrade() -> None:
    print("Dropping Maestro schema...")

    for table in (
        "courses",
        "schedule_enrollments",
        "schedules",
        "mentorship_sessions",
        "mentor_conversations",
        "mentorship_requests",
        *reversed(REVIEW_TABLES),
        "classroom_memberships",
        "classrooms",
        "users",
    ):
        op.drop_table(table)
