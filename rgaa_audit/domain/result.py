"""SQLAlchemy ORM models for criterion results and their example images."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rgaa_audit.db.base import Base
from rgaa_audit.domain.enums import CriterionResultStatus
from rgaa_audit.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class CriterionResult(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Judgement for one (page, topic, criterion) triple.

    Rows are only created once a criterion has been scored; missing triples
    are read back as NOT_TESTED placeholders.
    """

    __tablename__ = "criterion_results"
    __table_args__ = (
        UniqueConstraint("page_id", "topic", "criterion", name="uq_criterion_results_page_topic_criterion"),
    )

    page_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audited_pages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    topic: Mapped[int] = mapped_column(Integer, nullable=False)
    criterion: Mapped[int] = mapped_column(Integer, nullable=False)

    # "NOT_TESTED" | "COMPLIANT" | "NOT_COMPLIANT" | "NOT_APPLICABLE"
    status: Mapped[str] = mapped_column(
        String(20), default=CriterionResultStatus.NOT_TESTED.value, nullable=False, index=True
    )
    compliant_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    not_applicable_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "MINOR" | "MAJOR" | "BLOCKING"
    user_impact: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    quick_win: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    example_images: Mapped[List["ExampleImage"]] = relationship(
        back_populates="result",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExampleImage.created_at",
    )


class ExampleImage(Base, UUIDPrimaryKeyMixin):
    """Metadata of an uploaded example image; the bytes live in file storage."""

    __tablename__ = "example_images"

    result_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("criterion_results.id", ondelete="CASCADE"), nullable=False, index=True
    )
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    result: Mapped["CriterionResult"] = relationship(back_populates="example_images")
