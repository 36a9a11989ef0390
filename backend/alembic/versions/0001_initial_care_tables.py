"""initial_care_tables

Revision ID: 0001_initial_care_tables
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_care_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PROFILE_TYPES = ("patient", "caregiver", "doctor", "family", "nurse")
RELATIONSHIP_STATUSES = ("active", "inactive")
PRIORITIES = ("low", "normal", "high", "urgent")
VITAL_SIGN_KINDS = ("blood-pressure", "glucose", "heart-rate", "temperature", "weight")


def upgrade() -> None:
    """Create users, care relationships, sessions, notifications and medical tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("weight", sa.Float, nullable=True, comment="Weight in kg"),
        sa.Column("whatsapp", sa.String(20), nullable=True),
        sa.Column("photo", sa.Text, nullable=True, comment="Base64 data or URL"),
        sa.Column("profile_type", sa.Enum(*PROFILE_TYPES, name="profile_type", create_constraint=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_profile_type", "users", ["profile_type"])

    op.create_table(
        "care_relationships",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("caregiver_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*RELATIONSHIP_STATUSES, name="relationship_status", create_constraint=True),
            nullable=False,
            server_default="active",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_care_caregiver_status", "care_relationships", ["caregiver_id", "status"])
    op.create_index("idx_care_patient_caregiver", "care_relationships", ["patient_id", "caregiver_id"])

    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("token", sa.String(255), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "selected_patient_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            comment="Patient currently viewed by this session (caregiver context)",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_auth_sessions_token", "auth_sessions", ["token"])
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "priority",
            sa.Enum(*PRIORITIES, name="notification_priority", create_constraint=True),
            nullable=False,
            server_default="normal",
        ),
        sa.Column("patient_name", sa.Text, nullable=True),
        sa.Column("editor_name", sa.Text, nullable=True),
        sa.Column("related_id", sa.Integer, nullable=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_notification_user_read", "notifications", ["user_id", "is_read"])
    op.create_index("idx_notification_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "medications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("dosage", sa.Text, nullable=False),
        sa.Column("frequency", sa.String(50), nullable=False, comment="daily, twice_daily, every_8h, ..."),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("instructions", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_medications_patient_id", "medications", ["patient_id"])

    op.create_table(
        "vital_sign_readings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.Enum(*VITAL_SIGN_KINDS, name="vital_sign_kind", create_constraint=True), nullable=False),
        sa.Column("value", sa.Float, nullable=False),
        sa.Column("secondary_value", sa.Float, nullable=True),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("measured_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_index(
        "idx_vital_patient_kind_measured",
        "vital_sign_readings",
        ["patient_id", "kind", "measured_at"],
    )


def downgrade() -> None:
    """Drop all care tables and enums."""
    op.drop_table("vital_sign_readings")
    op.drop_table("medications")
    op.drop_table("notifications")
    op.drop_table("auth_sessions")
    op.drop_table("care_relationships")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS vital_sign_kind")
    op.execute("DROP TYPE IF EXISTS notification_priority")
    op.execute("DROP TYPE IF EXISTS relationship_status")
    op.execute("DROP TYPE IF EXISTS profile_type")
