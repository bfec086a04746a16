"""Pydantic schemas for receipt uploads."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReceiptState(str, Enum):
    """Per-file pipeline states; COMPLETE and ERROR are terminal."""

    UPLOADING = "uploading"
    EXTRACTING = "extracting"
    COMPLETE = "complete"
    ERROR = "error"


class ReceiptExtraction(BaseModel):
    amount: float
    description: str = "Receipt"


class RejectedFile(BaseModel):
    """Notification for a file stopped by validation."""

    file_name: str
    title: str
    description: str


class ReceiptFileResult(BaseModel):
    file_name: str
    state: ReceiptState
    receipt_id: Optional[int] = None
    file_path: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    error: Optional[str] = None


class BatchProgress(BaseModel):
    completed: int
    total: int


class ReceiptBatchResult(BaseModel):
    files: List[ReceiptFileResult] = Field(default_factory=list)
    rejected: List[RejectedFile] = Field(default_factory=list)
    progress: BatchProgress
    # New expense total written to the month's analysis, None when skipped.
    monthly_expenses: Optional[float] = None


class ReceiptOut(BaseModel):
    id: int
    month: int
    year: int
    file_path: str
    file_name: str
    amount: Optional[float]
    description: Optional[str]
    upload_date: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
