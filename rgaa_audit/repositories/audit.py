"""Audit and AuditTrace repositories."""

from sqlalchemy import exists, select, update

from rgaa_audit.domain.audit import Audit, AuditTrace
from rgaa_audit.domain.mixins import utcnow
from rgaa_audit.repositories.base import BaseRepository


class AuditRepository(BaseRepository[Audit]):
    model = Audit

    async def get_by_edit_id(self, edit_unique_id: str) -> Audit | None:
        return await self._first(Audit.edit_unique_id == edit_unique_id)

    async def get_by_consult_id(self, consult_unique_id: str) -> Audit | None:
        return await self._first(Audit.consult_unique_id == consult_unique_id)

    async def soft_delete_by_edit_id(self, edit_unique_id: str) -> bool:
        return await self.soft_delete(Audit.edit_unique_id == edit_unique_id)

    async def claim_live(self, audit_id: str) -> bool:
        """Write-lock the audit row for this transaction if it is still live.

        Returns False when the audit was soft-deleted since it was read.
        """
        result = await self._session.execute(
            update(Audit)
            .where(Audit.id == audit_id, Audit.deleted_at.is_(None))
            .values(updated_at=utcnow())
        )
        return result.rowcount > 0


class AuditTraceRepository(BaseRepository[AuditTrace]):
    """Traces are append-only: never updated, never deleted."""

    model = AuditTrace

    async def exists_for_edit_id(self, edit_unique_id: str) -> bool:
        q = select(exists().where(AuditTrace.edit_unique_id == edit_unique_id))
        return bool((await self._session.execute(q)).scalar())

    async def exists_for_consult_id(self, consult_unique_id: str) -> bool:
        q = select(exists().where(AuditTrace.consult_unique_id == consult_unique_id))
        return bool((await self._session.execute(q)).scalar())
