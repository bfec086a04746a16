"""Receipt ingestion: validate, upload, extract, then refresh the month's expenses.

Every accepted file walks ``uploading -> extracting -> complete``; a failure in
either step moves it to ``error`` and the batch carries on with the next file.
Files are processed one at a time to bound load on the extraction model.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.config import settings
from finscope.domain.analysis import repository as analysis_repository
from finscope.services.llm_client import LLMError
from finscope.services.storage import ObjectStorage, StorageError

from .extraction import extract_receipt
from .models import Receipt
from .schemas import (
    BatchProgress,
    ReceiptBatchResult,
    ReceiptFileResult,
    ReceiptState,
    RejectedFile,
)

logger = logging.getLogger(__name__)

FAILED_MESSAGE = "Failed to process receipt. Please try again."

_TRANSITIONS: dict[Optional[ReceiptState], frozenset[ReceiptState]] = {
    None: frozenset({ReceiptState.UPLOADING}),
    ReceiptState.UPLOADING: frozenset({ReceiptState.EXTRACTING, ReceiptState.ERROR}),
    ReceiptState.EXTRACTING: frozenset({ReceiptState.COMPLETE, ReceiptState.ERROR}),
    ReceiptState.COMPLETE: frozenset(),
    ReceiptState.ERROR: frozenset(),
}
TERMINAL_STATES = frozenset({ReceiptState.COMPLETE, ReceiptState.ERROR})


class InvalidTransition(RuntimeError):
    pass


@dataclass(slots=True)
class IncomingFile:
    file_name: str
    content_type: Optional[str]
    data: bytes


@dataclass(slots=True)
class ReceiptJob:
    """Tracks one file through the pipeline."""

    file: IncomingFile
    state: Optional[ReceiptState] = None
    receipt_id: Optional[int] = None
    file_path: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, new_state: ReceiptState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            current = self.state.value if self.state else "new"
            raise InvalidTransition(f"{current} -> {new_state.value}")
        self.state = new_state

    def fail(self, message: str = FAILED_MESSAGE) -> None:
        self.advance(ReceiptState.ERROR)
        self.error = message

    def to_result(self) -> ReceiptFileResult:
        return ReceiptFileResult(
            file_name=self.file.file_name,
            state=self.state or ReceiptState.UPLOADING,
            receipt_id=self.receipt_id,
            file_path=self.file_path,
            amount=self.amount,
            description=self.description,
            error=self.error,
        )


def validate_file(file: IncomingFile) -> RejectedFile | None:
    """Return a notification when the file may not enter the pipeline."""
    if not (file.content_type or "").lower().startswith("image/"):
        return RejectedFile(
            file_name=file.file_name,
            title="Invalid File Type",
            description=f"{file.file_name} is not an image. Please upload an image file.",
        )
    if len(file.data) > settings.receipt_max_bytes:
        return RejectedFile(
            file_name=file.file_name,
            title="File Too Large",
            description=(
                f"{file.file_name} is larger than {settings.RECEIPT_MAX_FILE_MB}MB. "
                "Please upload a smaller image."
            ),
        )
    return None


def _extension(file: IncomingFile) -> str:
    name = file.file_name or ""
    ext = name.rsplit(".", 1)[-1] if "." in name else ""
    if not ext and file.content_type and "/" in file.content_type:
        ext = file.content_type.split("/", 1)[1]
    ext = re.sub(r"[^a-z0-9]", "", ext.lower())
    return ext or "bin"


def build_storage_path(user_id: int, file: IncomingFile) -> str:
    """``<user_id>/<nanosecond timestamp>.<ext>``"""
    return f"{user_id}/{time.time_ns()}.{_extension(file)}"


async def _discard_object(storage: ObjectStorage, path: str) -> None:
    try:
        await storage.remove([path])
    except StorageError:
        logger.warning("Could not remove orphaned receipt object %s", path)


async def process_receipt(
    db: AsyncSession,
    storage: ObjectStorage,
    job: ReceiptJob,
    *,
    user_id: int,
    month: int,
    year: int,
) -> None:
    """Drive one job to a terminal state; never raises for collaborator failures."""
    job.advance(ReceiptState.UPLOADING)
    path = build_storage_path(user_id, job.file)
    try:
        await storage.upload(path, job.file.data, job.file.content_type)
    except StorageError:
        logger.exception("Receipt upload failed for %s", job.file.file_name)
        job.fail()
        return

    receipt = Receipt(
        user_id=user_id,
        month=month,
        year=year,
        file_path=path,
        file_name=job.file.file_name,
    )
    db.add(receipt)
    try:
        await db.commit()
        await db.refresh(receipt)
    except SQLAlchemyError:
        logger.exception("Could not record receipt %s", job.file.file_name)
        await db.rollback()
        await _discard_object(storage, path)
        job.fail()
        return

    job.file_path = path
    job.receipt_id = receipt.id

    job.advance(ReceiptState.EXTRACTING)
    try:
        extraction = await extract_receipt(storage, path, job.file.content_type)
    except (LLMError, StorageError) as exc:
        logger.warning("Receipt extraction failed for %s: %s", path, exc)
        job.fail("Could not read the receipt total.")
        return

    receipt.amount = extraction.amount
    receipt.description = extraction.description
    try:
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Could not store extraction for %s", path)
        await db.rollback()
        job.fail()
        return

    job.amount = extraction.amount
    job.description = extraction.description
    job.advance(ReceiptState.COMPLETE)


async def total_receipt_amount(db: AsyncSession, *, user_id: int, month: int, year: int) -> float:
    """Sum of every extracted receipt on file for the month."""
    result = await db.execute(
        select(func.coalesce(func.sum(Receipt.amount), 0)).where(
            Receipt.user_id == user_id,
            Receipt.month == month,
            Receipt.year == year,
            Receipt.amount.is_not(None),
        )
    )
    return float(result.scalar_one())


async def recalculate_monthly_expenses(
    db: AsyncSession, *, user_id: int, month: int, year: int
) -> float | None:
    """Overwrite the month's expenses with the receipt total.

    Returns the new total, or None when the month has no analysis yet.
    """
    total = await total_receipt_amount(db, user_id=user_id, month=month, year=year)
    updated = await analysis_repository.update_analysis_if_exists(
        db,
        user_id=user_id,
        month=month,
        year=year,
        fields={"monthly_expenses": total},
    )
    if updated is None:
        logger.info("No analysis for user %s %s-%02d; expense recompute skipped", user_id, year, month)
        return None
    return total


async def process_batch(
    db: AsyncSession,
    storage: ObjectStorage,
    files: Iterable[IncomingFile],
    *,
    user_id: int,
    month: int,
    year: int,
) -> ReceiptBatchResult:
    """Validate and ingest a batch, then refresh the month's expenses once."""
    rejected: list[RejectedFile] = []
    jobs: list[ReceiptJob] = []
    for incoming in files:
        notification = validate_file(incoming)
        if notification is not None:
            rejected.append(notification)
        else:
            jobs.append(ReceiptJob(file=incoming))

    for job in jobs:
        await process_receipt(db, storage, job, user_id=user_id, month=month, year=year)

    monthly_expenses = None
    if jobs:
        try:
            monthly_expenses = await recalculate_monthly_expenses(
                db, user_id=user_id, month=month, year=year
            )
        except SQLAlchemyError:
            logger.exception("Expense recompute failed for user %s %s-%02d", user_id, year, month)
            await db.rollback()

    return ReceiptBatchResult(
        files=[job.to_result() for job in jobs],
        rejected=rejected,
        progress=BatchProgress(
            completed=sum(1 for job in jobs if job.is_terminal),
            total=len(jobs),
        ),
        monthly_expenses=monthly_expenses,
    )
