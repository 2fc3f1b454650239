"""Audit router — edit-token addressed endpoints.

Pattern:
  1. Inject the DB session (one request = one transaction) via Depends
  2. Instantiate the service with the session
  3. Call service methods and wrap the result in the response envelope

NotFound / Gone / Conflict are raised by the services and rendered by the
global AppException handler.
"""

from __future__ import annotations

from urllib.parse import unquote

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.core.config import settings
from rgaa_audit.core.response import DataResponse
from rgaa_audit.db.base import get_db
from rgaa_audit.schemas.audit import AuditCreate, AuditOut, AuditUpdate
from rgaa_audit.schemas.result import CriterionResultOut, ExampleImageOut, ResultsUpdate
from rgaa_audit.services.audit import AuditService
from rgaa_audit.services.notifier import LogNotifier, get_notifier
from rgaa_audit.services.results import ResultService
from rgaa_audit.services.storage import FileStorage, get_storage

router = APIRouter(prefix="/audits", tags=["Audits"])


# ------------------------------------------------------------------
# Upload validation (HTTP concern, stays in the router)
# ------------------------------------------------------------------

async def _validate_and_read_image(file: UploadFile) -> bytes:
    """Return the image bytes. Raises HTTPException on invalid input."""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type '{file.content_type}'. Only images are accepted.",
        )

    contents = await file.read()

    if len(contents) == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")

    if len(contents) > settings.max_image_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds the {settings.max_image_size_kb}KB limit.",
        )

    return contents


# ------------------------------------------------------------------
# Audit endpoints
# ------------------------------------------------------------------

@router.post("", response_model=DataResponse[AuditOut], status_code=status.HTTP_201_CREATED)
async def create_audit(
    body: AuditCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db),
    notifier: LogNotifier = Depends(get_notifier),
):
    """Create an audit with fresh edit / consult tokens."""
    audit = await AuditService(session).create_audit(body)
    # Fire-and-forget: a failing notification never fails the creation
    background_tasks.add_task(notifier.send, notifier.build_audit_created(audit))
    return {"data": AuditOut.model_validate(audit)}


@router.get("/{edit_id}", response_model=DataResponse[AuditOut])
async def get_audit(
    edit_id: str,
    session: AsyncSession = Depends(get_db),
):
    audit = await AuditService(session).get_audit(edit_id)
    return {"data": AuditOut.model_validate(audit)}


@router.put("/{edit_id}", response_model=DataResponse[AuditOut])
async def update_audit(
    edit_id: str,
    body: AuditUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Replace the audit and all its nested collections with the payload."""
    audit = await AuditService(session).update_audit(edit_id, body)
    return {"data": AuditOut.model_validate(audit)}


@router.put("/{edit_id}/publish", response_model=DataResponse[AuditOut])
async def publish_audit(
    edit_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Flag the audit as published. 409 while any stored result is NOT_TESTED."""
    audit = await AuditService(session).publish_audit(edit_id)
    return {"data": AuditOut.model_validate(audit)}


@router.delete("/{edit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_audit(
    edit_id: str,
    session: AsyncSession = Depends(get_db),
):
    await AuditService(session).delete_audit(edit_id)


# ------------------------------------------------------------------
# Results endpoints
# ------------------------------------------------------------------

@router.get("/{edit_id}/results", response_model=DataResponse[list[CriterionResultOut]])
async def get_results(
    edit_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Full (page x criterion) matrix; untested cells are placeholders."""
    results = await ResultService(session).get_results(edit_id)
    return {"data": results}


@router.patch("/{edit_id}/results", status_code=status.HTTP_204_NO_CONTENT)
async def update_results(
    edit_id: str,
    body: ResultsUpdate,
    session: AsyncSession = Depends(get_db),
):
    await ResultService(session).update_results(edit_id, body.data)


@router.post(
    "/{edit_id}/results/examples",
    response_model=DataResponse[ExampleImageOut],
    status_code=status.HTTP_201_CREATED,
)
async def upload_example_image(
    edit_id: str,
    page_id: str = Form(..., alias="pageId"),
    topic: int = Form(..., ge=1),
    criterion: int = Form(..., ge=1),
    image: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    """Attach an example image to the result of (page, topic, criterion)."""
    contents = await _validate_and_read_image(image)
    # Clients URI-encode filenames to carry non-ASCII characters
    filename = unquote(image.filename or "image")
    saved = await ResultService(session).add_example_image(
        edit_id,
        page_id,
        topic,
        criterion,
        data=contents,
        filename=filename,
        content_type=image.content_type or "application/octet-stream",
        storage=storage,
    )
    return {"data": ExampleImageOut.model_validate(saved)}


@router.delete("/{edit_id}/results/examples/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_example_image(
    edit_id: str,
    image_id: str,
    session: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    await ResultService(session).delete_example_image(edit_id, image_id, storage)
