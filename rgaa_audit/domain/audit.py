"""SQLAlchemy ORM models for Audits and the collections they own.

An audit is addressed by two opaque tokens:
  edit_unique_id     — authorizes mutation (auditor links)
  consult_unique_id  — read-only access to the published report

Audits are soft-deleted (deleted_at). AuditTrace keeps the token pair
forever so a lookup can tell "deleted" apart from "never existed".
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    and_,
    false,
    func,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rgaa_audit.db.base import Base
from rgaa_audit.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class Audit(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "audits"

    edit_unique_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    consult_unique_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    procedure_name: Mapped[str] = mapped_column(String(255), nullable=False)
    procedure_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    initiator: Mapped[str] = mapped_column(String(255), nullable=False)

    auditor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    auditor_email: Mapped[str] = mapped_column(String(255), nullable=False)

    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_form_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    technologies: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    # "FULL" | "COMPLEMENTARY" | "FAST" (chosen at step 2 of the editor)
    audit_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    not_compliant_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    derogated_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    not_in_scope_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    publication_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Last edit made after publication; cleared on (re)publish
    edition_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    recipients: Mapped[List["Recipient"]] = relationship(
        back_populates="audit", lazy="selectin", cascade="all, delete-orphan",
        order_by="Recipient.email",
    )
    tools: Mapped[List["Tool"]] = relationship(
        back_populates="audit", lazy="selectin", cascade="all, delete-orphan",
        order_by="Tool.name",
    )
    environments: Mapped[List["TestEnvironment"]] = relationship(
        back_populates="audit", lazy="selectin", cascade="all, delete-orphan",
        order_by="TestEnvironment.platform",
    )
    pages: Mapped[List["AuditedPage"]] = relationship(
        primaryjoin=lambda: and_(
            Audit.id == AuditedPage.audit_id, AuditedPage.is_transverse == false()
        ),
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=lambda: AuditedPage.order,
        overlaps="transverse_page",
    )
    transverse_page: Mapped["AuditedPage"] = relationship(
        primaryjoin=lambda: and_(
            Audit.id == AuditedPage.audit_id, AuditedPage.is_transverse == true()
        ),
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
        overlaps="pages",
    )

    @property
    def is_published(self) -> bool:
        return self.publication_date is not None

    @property
    def all_pages(self) -> list["AuditedPage"]:
        """User pages in order, followed by the transverse page."""
        pages = list(self.pages)
        if self.transverse_page is not None:
            pages.append(self.transverse_page)
        return pages

    def touch_edition_date(self) -> None:
        """Stamp the edition date; only published audits track post-publication edits."""
        if self.is_published:
            self.edition_date = utcnow()


class AuditTrace(Base, UUIDPrimaryKeyMixin):
    """Permanent token pairing, never deleted."""

    __tablename__ = "audit_traces"

    audit_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("audits.id", ondelete="SET NULL"), nullable=True, index=True
    )
    edit_unique_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    consult_unique_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class Recipient(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "recipients"
    __table_args__ = (
        UniqueConstraint("audit_id", "email", name="uq_recipients_audit_email"),
    )

    audit_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    audit: Mapped["Audit"] = relationship(back_populates="recipients")


class Tool(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "tools"
    __table_args__ = (
        UniqueConstraint("audit_id", "name", "function", "url", name="uq_tools_audit_name_function_url"),
    )

    audit_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    function: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)

    audit: Mapped["Audit"] = relationship(back_populates="tools")


class TestEnvironment(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "test_environments"
    __table_args__ = (
        UniqueConstraint(
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

    audit_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # "desktop" | "mobile"
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    operating_system: Mapped[str] = mapped_column(String(100), nullable=False)
    operating_system_version: Mapped[str] = mapped_column(String(50), nullable=False)
    assistive_technology: Mapped[str] = mapped_column(String(100), nullable=False)
    assistive_technology_version: Mapped[str] = mapped_column(String(50), nullable=False)
    browser: Mapped[str] = mapped_column(String(100), nullable=False)
    browser_version: Mapped[str] = mapped_column(String(50), nullable=False)

    audit: Mapped["Audit"] = relationship(back_populates="environments")


class AuditedPage(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "audited_pages"
    __table_args__ = (
        # One transverse page per audit
        Index(
            "uq_audited_pages_transverse",
            "audit_id",
            unique=True,
            sqlite_where=text("is_transverse = 1"),
            postgresql_where=text("is_transverse"),
        ),
    )

    audit_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_transverse: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
