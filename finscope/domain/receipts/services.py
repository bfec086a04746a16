"""Receipt listing and removal."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.services.storage import ObjectStorage

from .models import Receipt

logger = logging.getLogger(__name__)


async def list_receipts(db: AsyncSession, *, user_id: int, month: int, year: int) -> list[Receipt]:
    result = await db.execute(
        select(Receipt)
        .where(Receipt.user_id == user_id, Receipt.month == month, Receipt.year == year)
        .order_by(Receipt.upload_date, Receipt.id)
    )
    return list(result.scalars().all())


async def get_receipt(db: AsyncSession, *, user_id: int, receipt_id: int) -> Receipt | None:
    result = await db.execute(
        select(Receipt).where(Receipt.id == receipt_id, Receipt.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def delete_receipt(db: AsyncSession, storage: ObjectStorage, receipt: Receipt) -> None:
    """Remove the stored image first, then the row.

    The month's expense total is left as it is.
    """
    await storage.remove([receipt.file_path])
    await db.delete(receipt)
    await db.commit()
    logger.info("Deleted receipt %s for user %s", receipt.id, receipt.user_id)
