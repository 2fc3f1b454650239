"""Criterion results — matrix synthesis, batch upsert and example images.

Result rows are materialized lazily: a row exists only once a criterion was
scored on a page. Reads fill the gaps with NOT_TESTED placeholders.
"""


import logging
from collections.abc import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.core.criteria import CriteriaCatalog, CriterionRef, get_catalog
from rgaa_audit.core.exceptions import GoneError, NotFoundError, ValidationError
from rgaa_audit.domain.audit import Audit
from rgaa_audit.domain.enums import CriterionResultStatus
from rgaa_audit.domain.result import CriterionResult, ExampleImage
from rgaa_audit.repositories.result import CriterionResultRepository, ExampleImageRepository
from rgaa_audit.schemas.result import CriterionResultOut, CriterionResultUpdate
from rgaa_audit.services.audit import AuditService
from rgaa_audit.services.storage import FileStorage

logger = logging.getLogger(__name__)

ResultKey = tuple[str, int, int]

# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def fill_missing_results(
    stored: Iterable[CriterionResult],
    page_ids: Sequence[str],
    catalog: CriteriaCatalog,
) -> list[CriterionResultOut]:
    """Return exactly ``len(page_ids) * len(catalog)`` results.

    Stored rows win over placeholders at the same (page, topic, criterion).
    Rows for pages not listed in *page_ids* are ignored.
    """
    by_key: dict[ResultKey, CriterionResult] = {
        (r.page_id, r.topic, r.criterion): r for r in stored
    }
    filled: list[CriterionResultOut] = []
    for page_id in page_ids:
        for ref in catalog.criteria:
            row = by_key.get((page_id, ref.topic, ref.criterion))
            if row is not None:
                filled.append(CriterionResultOut.model_validate(row))
            else:
                filled.append(
                    CriterionResultOut(page_id=page_id, topic=ref.topic, criterion=ref.criterion)
                )
    return filled


def apply_result_update(row: CriterionResult, item: CriterionResultUpdate) -> None:
    row.status = item.status.value
    row.compliant_comment = item.compliant_comment
    row.error_description = item.error_description
    row.not_applicable_comment = item.not_applicable_comment
    row.recommendation = item.recommendation
    row.user_impact = item.user_impact.value if item.user_impact else None
    row.quick_win = item.quick_win


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ResultService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._audits = AuditService(session)
        self._repo = CriterionResultRepository(session)
        self._images = ExampleImageRepository(session)

    def _check_target(self, audit: Audit, page_id: str, topic: int, criterion: int) -> None:
        if CriterionRef(topic, criterion) not in get_catalog():
            raise ValidationError(f"Unknown criterion {topic}.{criterion}")
        if page_id not in {page.id for page in audit.all_pages}:
            raise NotFoundError("AuditedPage", page_id)

    async def get_results(self, edit_id: str) -> list[CriterionResultOut]:
        audit = await self._audits.get_audit(edit_id)
        stored = await self._repo.list_for_audit(audit.id)
        return fill_missing_results(stored, [p.id for p in audit.all_pages], get_catalog())

    async def update_results(self, edit_id: str, items: list[CriterionResultUpdate]) -> None:
        """Upsert a batch of results; the whole batch is one transaction."""
        audit = await self._audits.get_audit(edit_id)
        for item in items:
            self._check_target(audit, item.page_id, item.topic, item.criterion)

        # Same triple twice in a batch: last one wins
        batch: dict[ResultKey, CriterionResultUpdate] = {
            (i.page_id, i.topic, i.criterion): i for i in items
        }
        existing: dict[ResultKey, CriterionResult] = {
            (r.page_id, r.topic, r.criterion): r
            for r in await self._repo.list_for_audit(audit.id)
        }

        created = 0
        for key, item in batch.items():
            row = existing.get(key)
            if row is None:
                page_id, topic, criterion = key
                row = CriterionResult(page_id=page_id, topic=topic, criterion=criterion)
                self._session.add(row)
                created += 1
            apply_result_update(row, item)

        audit.touch_edition_date()
        await self._audits.flush(audit)
        logger.info(
            "Audit %s: %d result(s) updated, %d created", audit.id, len(batch) - created, created
        )

    # ------------------------------------------------------------------
    # Example images
    # ------------------------------------------------------------------

    async def add_example_image(
        self,
        edit_id: str,
        page_id: str,
        topic: int,
        criterion: int,
        *,
        data: bytes,
        filename: str,
        content_type: str,
        storage: FileStorage,
    ) -> ExampleImage:
        audit = await self._audits.get_audit(edit_id)
        self._check_target(audit, page_id, topic, criterion)

        result = await self._repo.find(page_id, topic, criterion)
        if result is None:
            result = CriterionResult(
                page_id=page_id,
                topic=topic,
                criterion=criterion,
                status=CriterionResultStatus.NOT_TESTED.value,
                example_images=[],
            )
            self._session.add(result)

        key = await storage.save(data, filename)
        try:
            image = ExampleImage(
                storage_key=key,
                filename=filename,
                content_type=content_type,
                size_bytes=len(data),
            )
            result.example_images.append(image)
            audit.touch_edition_date()
            await self._audits.flush(audit)
        except Exception:
            # No row will point at the blob
            await storage.delete(key)
            raise
        return image

    async def delete_example_image(self, edit_id: str, image_id: str, storage: FileStorage) -> None:
        audit = await self._audits.get_audit(edit_id)
        image = await self._images.get_for_audit(image_id, audit.id)
        if image is None:
            raise NotFoundError("ExampleImage", image_id)

        key = image.storage_key
        await self._images.delete(image)
        audit.touch_edition_date()
        await self._audits.flush(audit)
        await storage.delete(key)

    async def open_example_image(self, storage_key: str, storage: FileStorage) -> tuple[ExampleImage, bytes]:
        """Return an image and its bytes, only while its audit is live."""
        found = await self._images.get_by_key_with_audit_state(storage_key)
        if found is None:
            raise NotFoundError("ExampleImage", storage_key)
        image, audit_deleted_at = found
        if audit_deleted_at is not None:
            raise GoneError("ExampleImage", storage_key)
        try:
            data = await storage.read(storage_key)
        except FileNotFoundError as exc:
            logger.error("Blob %s is missing for image %s", storage_key, image.id)
            raise NotFoundError("ExampleImage", storage_key) from exc
        return image, data
