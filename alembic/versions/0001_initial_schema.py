"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "audits",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("edit_unique_id", sa.String(length=64), nullable=False),
        sa.Column("consult_unique_id", sa.String(length=64), nullable=False),
        sa.Column("procedure_name", sa.String(length=255), nullable=False),
        sa.Column("procedure_url", sa.String(length=500), nullable=True),
        sa.Column("initiator", sa.String(length=255), nullable=False),
        sa.Column("auditor_name", sa.String(length=255), nullable=False),
        sa.Column("auditor_email", sa.String(length=255), nullable=False),
        sa.Column("contact_name", sa.String(length=255), nullable=True),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("contact_form_url", sa.String(length=500), nullable=True),
        sa.Column("technologies", sa.JSON(), nullable=False),
        sa.Column("audit_type", sa.String(length=20), nullable=True),
        sa.Column("not_compliant_content", sa.Text(), nullable=True),
        sa.Column("derogated_content", sa.Text(), nullable=True),
        sa.Column("not_in_scope_content", sa.Text(), nullable=True),
        sa.Column("publication_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("edition_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audits_edit_unique_id"), "audits", ["edit_unique_id"], unique=True)
    op.create_index(op.f("ix_audits_consult_unique_id"), "audits", ["consult_unique_id"], unique=True)

    op.create_table(
        "audit_traces",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("audit_id", sa.String(length=36), nullable=True),
        sa.Column("edit_unique_id", sa.String(length=64), nullable=False),
        sa.Column("consult_unique_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_traces_audit_id"), "audit_traces", ["audit_id"], unique=False)
    op.create_index(op.f("ix_audit_traces_edit_unique_id"), "audit_traces", ["edit_unique_id"], unique=True)
    op.create_index(op.f("ix_audit_traces_consult_unique_id"), "audit_traces", ["consult_unique_id"], unique=True)

    op.create_table(
        "recipients",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("audit_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("audit_id", "email", name="uq_recipients_audit_email"),
    )
    op.create_index(op.f("ix_recipients_audit_id"), "recipients", ["audit_id"], unique=False)

    op.create_table(
        "tools",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("audit_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("function", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("audit_id", "name", "function", "url", name="uq_tools_audit_name_function_url"),
    )
    op.create_index(op.f("ix_tools_audit_id"), "tools", ["audit_id"], unique=False)

    op.create_table(
        "test_environments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("audit_id", sa.String(length=36), nullable=False),
        sa.Column("platform", sa.String(length=20), nullable=False),
        sa.Column("operating_system", sa.String(length=100), nullable=False),
        sa.Column("operating_system_version", sa.String(length=50), nullable=False),
        sa.Column("assistive_technology", sa.String(length=100), nullable=False),
        sa.Column("assistive_technology_version", sa.String(length=50), nullable=False),
        sa.Column("browser", sa.String(length=100), nullable=False),
        sa.Column("browser_version", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "audit_id",
            "platform",
            "operating_system",
            "operating_system_version",
            "assistive_technology",
            "assistive_technology_version",
            "browser",
            "browser_version",
            name="uq_test_environments_audit_setup",
        ),
    )
    op.create_index(op.f("ix_test_environments_audit_id"), "test_environments", ["audit_id"], unique=False)

    op.create_table(
        "audited_pages",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("audit_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("is_transverse", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["audit_id"], ["audits.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audited_pages_audit_id"), "audited_pages", ["audit_id"], unique=False)
    op.create_index(
        "uq_audited_pages_transverse",
        "audited_pages",
        ["audit_id"],
        unique=True,
        sqlite_where=sa.text("is_transverse = 1"),
        postgresql_where=sa.text("is_transverse"),
    )

    op.create_table(
        "criterion_results",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("page_id", sa.String(length=36), nullable=False),
        sa.Column("topic", sa.Integer(), nullable=False),
        sa.Column("criterion", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("compliant_comment", sa.Text(), nullable=True),
        sa.Column("error_description", sa.Text(), nullable=True),
        sa.Column("not_applicable_comment", sa.Text(), nullable=True),
        sa.Column("recommendation", sa.Text(), nullable=True),
        sa.Column("user_impact", sa.String(length=20), nullable=True),
        sa.Column("quick_win", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["page_id"], ["audited_pages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("page_id", "topic", "criterion", name="uq_criterion_results_page_topic_criterion"),
    )
    op.create_index(op.f("ix_criterion_results_page_id"), "criterion_results", ["page_id"], unique=False)
    op.create_index(op.f("ix_criterion_results_status"), "criterion_results", ["status"], unique=False)

    op.create_table(
        "example_images",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("result_id", sa.String(length=36), nullable=False),
        sa.Column("storage_key", sa.String(length=500), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["result_id"], ["criterion_results.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("storage_key"),
    )
    op.create_index(op.f("ix_example_images_result_id"), "example_images", ["result_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_example_images_result_id"), table_name="example_images")
    op.drop_table("example_images")
    op.drop_index(op.f("ix_criterion_results_status"), table_name="criterion_results")
    op.drop_index(op.f("ix_criterion_results_page_id"), table_name="criterion_results")
    op.drop_table("criterion_results")
    op.drop_index("uq_audited_pages_transverse", table_name="audited_pages")
    op.drop_index(op.f("ix_audited_pages_audit_id"), table_name="audited_pages")
    op.drop_table("audited_pages")
    op.drop_index(op.f("ix_test_environments_audit_id"), table_name="test_environments")
    op.drop_table("test_environments")
    op.drop_index(op.f("ix_tools_audit_id"), table_name="tools")
    op.drop_table("tools")
    op.drop_index(op.f("ix_recipients_audit_id"), table_name="recipients")
    op.drop_table("recipients")
    op.drop_index(op.f("ix_audit_traces_consult_unique_id"), table_name="audit_traces")
    op.drop_index(op.f("ix_audit_traces_edit_unique_id"), table_name="audit_traces")
    op.drop_index(op.f("ix_audit_traces_audit_id"), table_name="audit_traces")
    op.drop_table("audit_traces")
    op.drop_index(op.f("ix_audits_consult_unique_id"), table_name="audits")
    op.drop_index(op.f("ix_audits_edit_unique_id"), table_name="audits")
    op.drop_table("audits")
