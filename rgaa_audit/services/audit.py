"""Audit service — lifecycle of an audit addressed by its edit / consult tokens.

Responsibilities:
  - Creation (fresh tokens + permanent AuditTrace)
  - Full-state updates, reconciling nested collections in one transaction
  - Completion check, publication, soft deletion
  - NotFound vs Gone disambiguation through the trace table
"""


import logging
import secrets
from collections.abc import Callable
from operator import attrgetter
from typing import Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.core.exceptions import AppException, ConflictError, GoneError, NotFoundError
from rgaa_audit.domain.audit import Audit, AuditedPage, AuditTrace, Recipient, TestEnvironment, Tool
from rgaa_audit.domain.enums import CriterionResultStatus
from rgaa_audit.domain.mixins import new_uuid, utcnow
from rgaa_audit.repositories.audit import AuditRepository, AuditTraceRepository
from rgaa_audit.repositories.result import CriterionResultRepository
from rgaa_audit.schemas.audit import AuditCreate, AuditUpdate, PageIn
from rgaa_audit.services.reconcile import (
    ENVIRONMENT_KEY,
    PAGE_KEY,
    RECIPIENT_KEY,
    TOOL_KEY,
    KeyFunc,
    reconcile,
)

logger = logging.getLogger(__name__)

TRANSVERSE_PAGE_NAME = "Éléments transverses"

# Scalar columns copied verbatim from an AuditUpdate payload
_SCALAR_FIELDS: tuple[str, ...] = (
    "procedure_name",
    "procedure_url",
    "initiator",
    "auditor_name",
    "auditor_email",
    "contact_name",
    "contact_email",
    "contact_form_url",
    "technologies",
    "audit_type",
    "not_compliant_content",
    "derogated_content",
    "not_in_scope_content",
)


def new_unique_id() -> str:
    """Opaque, URL-safe token used for edit and consult links."""
    return secrets.token_urlsafe(16)


def _values(item: BaseModel, exclude: set[str] | None = None) -> dict[str, Any]:
    # mode="json" stores enum values, not members
    return item.model_dump(mode="json", exclude=exclude)


def _sync_collection(
    collection: list,
    desired: list[BaseModel],
    key: KeyFunc,
    factory: Callable[..., Any],
) -> None:
    """Converge an ORM collection in place; delete-orphan cascades the removals."""
    diff = reconcile(list(collection), desired, key)
    for row in diff.to_delete:
        collection.remove(row)
    for row, item in diff.to_update:
        for name, value in _values(item).items():
            setattr(row, name, value)
    for item in diff.to_insert:
        collection.append(factory(**_values(item)))


class AuditService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = AuditRepository(session)
        self._traces = AuditTraceRepository(session)
        self._results = CriterionResultRepository(session)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def missing_audit_error(
        self, *, edit_id: str | None = None, consult_id: str | None = None
    ) -> AppException:
        """Gone when a trace proves the token was once issued, NotFound otherwise."""
        if edit_id is not None:
            was_deleted = await self._traces.exists_for_edit_id(edit_id)
            token = edit_id
        else:
            was_deleted = await self._traces.exists_for_consult_id(consult_id or "")
            token = consult_id
        if was_deleted:
            return GoneError("Audit", token)
        return NotFoundError("Audit", token)

    async def get_audit(self, edit_id: str) -> Audit:
        audit = await self._repo.get_by_edit_id(edit_id)
        if not audit:
            raise await self.missing_audit_error(edit_id=edit_id)
        return audit

    async def get_audit_by_consult_id(self, consult_id: str) -> Audit:
        audit = await self._repo.get_by_consult_id(consult_id)
        if not audit:
            raise await self.missing_audit_error(consult_id=consult_id)
        return audit

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    async def create_audit(self, data: AuditCreate) -> Audit:
        recipients = reconcile([], data.recipients, RECIPIENT_KEY).to_insert
        audit = Audit(
            id=new_uuid(),
            edit_unique_id=new_unique_id(),
            consult_unique_id=new_unique_id(),
            **_values(data, exclude={"recipients", "pages"}),
            recipients=[Recipient(**_values(r)) for r in recipients],
            tools=[],
            environments=[],
            pages=[
                AuditedPage(name=p.name, url=p.url, order=index)
                for index, p in enumerate(data.pages)
            ],
            transverse_page=AuditedPage(
                name=TRANSVERSE_PAGE_NAME,
                url=data.procedure_url or "",
                order=0,
                is_transverse=True,
            ),
        )
        await self._repo.add(audit)
        await self._traces.add(
            AuditTrace(
                audit_id=audit.id,
                edit_unique_id=audit.edit_unique_id,
                consult_unique_id=audit.consult_unique_id,
            )
        )
        logger.info("Created audit %s (%s)", audit.id, audit.procedure_name)
        return audit

    async def update_audit(self, edit_id: str, data: AuditUpdate) -> Audit:
        """Replace scalar fields and reconcile every nested collection."""
        audit = await self.get_audit(edit_id)

        values = _values(data)
        for name in _SCALAR_FIELDS:
            setattr(audit, name, values[name])
        # The transverse page stands for the whole procedure
        audit.transverse_page.url = audit.procedure_url or ""

        _sync_collection(audit.recipients, data.recipients, RECIPIENT_KEY, Recipient)
        _sync_collection(audit.tools, data.tools, TOOL_KEY, Tool)
        _sync_collection(audit.environments, data.environments, ENVIRONMENT_KEY, TestEnvironment)
        self._sync_pages(audit, data.pages)

        audit.touch_edition_date()
        await self.flush(audit)
        logger.info(
            "Updated audit %s: %d recipient(s), %d tool(s), %d environment(s), %d page(s)",
            audit.id, len(audit.recipients), len(audit.tools),
            len(audit.environments), len(audit.pages),
        )
        return audit

    def _sync_pages(self, audit: Audit, desired: list[PageIn]) -> None:
        known = {page.id for page in audit.pages}
        for item in desired:
            if item.id is not None and item.id not in known:
                raise NotFoundError("AuditedPage", item.id)

        diff = reconcile(list(audit.pages), desired, PAGE_KEY)
        for page in diff.to_delete:
            audit.pages.remove(page)

        placed: dict[int, AuditedPage] = {}
        for page, item in diff.to_update:
            page.name = item.name
            page.url = item.url
            placed[id(item)] = page
        for item in diff.to_insert:
            page = AuditedPage(name=item.name, url=item.url)
            audit.pages.append(page)
            placed[id(item)] = page

        # Payload position defines the order; duplicates keep their last slot
        order = 0
        for item in desired:
            page = placed.get(id(item))
            if page is not None:
                page.order = order
                order += 1
        # Plain list.sort: reorders in memory without firing collection events
        audit.pages.sort(key=attrgetter("order"))

    async def flush(self, audit: Audit) -> None:
        """Write pending changes, provided the audit is still live.

        The audit may have been deleted by a concurrent request since it was
        read; the guarded UPDATE then matches no row and the whole transaction
        is rolled back with Gone.
        """
        if not await self._repo.claim_live(audit.id):
            logger.warning("Audit %s was deleted while being modified", audit.id)
            raise await self.missing_audit_error(edit_id=audit.edit_unique_id)
        await self._session.flush()

    # ------------------------------------------------------------------
    # Completion / publication / deletion
    # ------------------------------------------------------------------

    async def is_audit_complete(self, audit: Audit) -> bool:
        """True when no *stored* result is NOT_TESTED.

        Criteria that were never touched have no row and are not counted, so
        an audit without any result is considered complete.
        """
        not_tested = await self._results.count_with_status(
            audit.id, CriterionResultStatus.NOT_TESTED.value
        )
        return not_tested == 0

    async def publish_audit(self, edit_id: str) -> Audit:
        audit = await self.get_audit(edit_id)
        if not await self.is_audit_complete(audit):
            raise ConflictError("Cannot publish audit if it is not complete.")

        audit.publication_date = utcnow()
        audit.edition_date = None
        await self.flush(audit)
        logger.info("Published audit %s", audit.id)
        return audit

    async def delete_audit(self, edit_id: str) -> None:
        deleted = await self._repo.soft_delete_by_edit_id(edit_id)
        if not deleted:
            raise await self.missing_audit_error(edit_id=edit_id)
        logger.info("Deleted audit with edit id %s", edit_id)
