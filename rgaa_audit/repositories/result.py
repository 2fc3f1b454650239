"""CriterionResult and ExampleImage repositories."""

from datetime import datetime

from sqlalchemy import func, select

from rgaa_audit.domain.audit import Audit, AuditedPage
from rgaa_audit.domain.result import CriterionResult, ExampleImage
from rgaa_audit.repositories.base import BaseRepository


class CriterionResultRepository(BaseRepository[CriterionResult]):
    model = CriterionResult

    async def list_for_audit(self, audit_id: str) -> list[CriterionResult]:
        """All materialized results of an audit, transverse page last."""
        q = (
            select(CriterionResult)
            .join(AuditedPage, AuditedPage.id == CriterionResult.page_id)
            .where(AuditedPage.audit_id == audit_id)
            .order_by(
                AuditedPage.is_transverse,
                AuditedPage.order,
                CriterionResult.topic,
                CriterionResult.criterion,
            )
        )
        return list((await self._session.execute(q)).scalars().all())

    async def find(self, page_id: str, topic: int, criterion: int) -> CriterionResult | None:
        return await self._first(
            CriterionResult.page_id == page_id,
            CriterionResult.topic == topic,
            CriterionResult.criterion == criterion,
        )

    async def count_with_status(self, audit_id: str, status: str) -> int:
        q = (
            select(func.count())
            .select_from(CriterionResult)
            .join(AuditedPage, AuditedPage.id == CriterionResult.page_id)
            .where(AuditedPage.audit_id == audit_id)
            .where(CriterionResult.status == status)
        )
        return (await self._session.execute(q)).scalar_one()


class ExampleImageRepository(BaseRepository[ExampleImage]):
    model = ExampleImage

    async def get_for_audit(self, image_id: str, audit_id: str) -> ExampleImage | None:
        """Fetch an image only if it hangs off one of the audit's pages."""
        q = (
            select(ExampleImage)
            .join(CriterionResult, CriterionResult.id == ExampleImage.result_id)
            .join(AuditedPage, AuditedPage.id == CriterionResult.page_id)
            .where(ExampleImage.id == image_id)
            .where(AuditedPage.audit_id == audit_id)
        )
        return (await self._session.execute(q)).scalars().first()

    async def get_by_key_with_audit_state(
        self, storage_key: str
    ) -> tuple[ExampleImage, datetime | None] | None:
        """Fetch an image by storage key along with its audit's ``deleted_at``."""
        q = (
            select(ExampleImage, Audit.deleted_at)
            .join(CriterionResult, CriterionResult.id == ExampleImage.result_id)
            .join(AuditedPage, AuditedPage.id == CriterionResult.page_id)
            .join(Audit, Audit.id == AuditedPage.audit_id)
            .where(ExampleImage.storage_key == storage_key)
        )
        row = (await self._session.execute(q)).first()
        if row is None:
            return None
        return row[0], row[1]
