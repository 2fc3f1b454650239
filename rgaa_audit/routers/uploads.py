"""Example image router — serves stored bytes while the owning audit is live.

Mounted at ``settings.storage_url``; ``ExampleImageOut.url`` points here.
Images of a deleted audit answer 410 like the audit itself.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.db.base import get_db
from rgaa_audit.services.results import ResultService
from rgaa_audit.services.storage import FileStorage, get_storage

router = APIRouter(tags=["Uploads"])


@router.get("/{storage_key:path}")
async def get_example_image(
    storage_key: str,
    session: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    image, data = await ResultService(session).open_example_image(storage_key, storage)
    return Response(content=data, media_type=image.content_type)
