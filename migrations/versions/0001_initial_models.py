"""initial models

Creates report_summaries, files, appointments and error_logs.

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
import sqlmodel  # noqa: F401


revision: str = "0001_initial_models"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

processing_status = sa.Enum("PENDING", "PROCESSING", "COMPLETED", "FAILED", name="processingstatus")


def upgrade() -> None:
    op.create_table(
        "files",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("file_url", sa.String(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_files_user_id", "files", ["user_id"])
    op.create_index("ix_files_file_url", "files", ["file_url"])
    op.create_index("ix_files_uploaded_at", "files", ["uploaded_at"])

    op.create_table(
        "report_summaries",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("report_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("processing_status", processing_status, nullable=False),
        sa.Column("summary_text", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_report_summaries_report_id", "report_summaries", ["report_id"])
    op.create_index("ix_report_summaries_user_id", "report_summaries", ["user_id"])
    op.create_index("ix_report_summaries_processing_status", "report_summaries", ["processing_status"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("doctor_id", sa.String(), nullable=False),
        sa.Column("doctor_name", sa.String(), nullable=False),
        sa.Column("specialty", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_appointments_user_id", "appointments", ["user_id"])
    op.create_index("ix_appointments_date", "appointments", ["date"])

    op.create_table(
        "error_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("method", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("stack_trace", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("error_logs")
    op.drop_index("ix_appointments_date", table_name="appointments")
    op.drop_index("ix_appointments_user_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_report_summaries_processing_status", table_name="report_summaries")
    op.drop_index("ix_report_summaries_user_id", table_name="report_summaries")
    op.drop_index("ix_report_summaries_report_id", table_name="report_summaries")
    op.drop_table("report_summaries")
    processing_status.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_files_uploaded_at", table_name="files")
    op.drop_index("ix_files_file_url", table_name="files")
    op.drop_index("ix_files_user_id", table_name="files")
    op.drop_table("files")
