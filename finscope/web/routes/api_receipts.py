"""Routes for receipt uploads and management."""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.config import settings
from finscope.core.database import get_db
from finscope.core.rate_limit import enforce_ai_rate_limit
from finscope.core.session import get_current_user
from finscope.domain.receipts import services
from finscope.domain.receipts.pipeline import IncomingFile, process_batch
from finscope.domain.receipts.schemas import ReceiptBatchResult, ReceiptOut
from finscope.domain.users.models import User
from finscope.services.storage import ObjectStorage, StorageError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/",
    response_model=ReceiptBatchResult,
    dependencies=[Depends(enforce_ai_rate_limit)],
)
async def upload_receipts(
    files: List[UploadFile] = File(...),
    month: int = Form(..., ge=1, le=12),
    year: int = Form(..., ge=1900, le=2100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> ReceiptBatchResult:
    """Ingest a batch of receipt images for one month."""
    incoming = []
    for upload in files:
        incoming.append(
            IncomingFile(
                file_name=upload.filename or "receipt",
                content_type=upload.content_type,
                data=await upload.read(settings.receipt_max_bytes + 1),
            )
        )

    result = await process_batch(db, storage, incoming, user_id=user.id, month=month, year=year)
    logger.info(
        "Receipt batch for user %s %s-%02d: %s/%s processed, %s rejected",
        user.id,
        year,
        month,
        result.progress.completed,
        result.progress.total,
        len(result.rejected),
    )
    return result


@router.get("/", response_model=list[ReceiptOut])
async def list_receipts(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=2100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await services.list_receipts(db, user_id=user.id, month=month, year=year)


@router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_receipt(
    receipt_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> Response:
    receipt = await services.get_receipt(db, user_id=user.id, receipt_id=receipt_id)
    if receipt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")

    try:
        await services.delete_receipt(db, storage, receipt)
    except StorageError as exc:
        logger.error("Delete failed for receipt %s: %s", receipt_id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete receipt.",
        ) from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)
