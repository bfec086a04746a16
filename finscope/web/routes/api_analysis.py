"""Routes for AI financial health analysis and its monthly history."""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.database import get_db
from finscope.core.rate_limit import enforce_ai_rate_limit
from finscope.core.session import get_current_user, get_optional_user
from finscope.core.validation import parse_amount, parse_optional_amount
from finscope.domain.analysis import repository
from finscope.domain.analysis.metrics import FinancialMetrics, compute_metrics
from finscope.domain.analysis.schemas import AnalysisOutcome, AnalysisRequest, FinancialAnalysisOut
from finscope.domain.analysis.services import AnalysisResult, analyze_finances
from finscope.domain.users.models import User
from finscope.services.llm_client import LLMError
from finscope.web.errors import llm_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _metrics_from_request(payload: AnalysisRequest) -> FinancialMetrics:
    income = parse_amount(payload.income, "Monthly income")
    expenses = parse_amount(payload.expenses, "Monthly expenses")
    debt = parse_amount(payload.debt, "Total debt")
    credit_score = parse_optional_amount(payload.credit_score, "Credit score")

    if income <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Monthly income must be greater than zero",
        )
    if expenses < 0 or debt < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Expenses and debt cannot be negative",
        )
    if credit_score is not None and credit_score < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credit score")

    return compute_metrics(income, expenses, debt, credit_score)


@router.post(
    "/analyze",
    response_model=AnalysisOutcome,
    response_model_exclude_none=True,
    dependencies=[Depends(enforce_ai_rate_limit)],
)
async def analyze(
    payload: AnalysisRequest,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> AnalysisResult:
    """Score the submitted figures; signed-in users also get the month saved."""
    metrics = _metrics_from_request(payload)

    now = datetime.utcnow()
    month = payload.month or now.month
    year = payload.year or now.year

    try:
        return await analyze_finances(
            db,
            metrics,
            user_id=user.id if user else None,
            month=month,
            year=year,
        )
    except LLMError as exc:
        logger.error("Error in analyze-finances: %s", exc)
        raise llm_http_error(exc) from exc


@router.get("/analyses", response_model=list[FinancialAnalysisOut])
async def list_analyses(
    limit: int = Query(24, ge=1, le=120),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Stored monthly analyses, newest first."""
    return await repository.list_recent_analyses(db, user_id=user.id, limit=limit)


@router.get("/analyses/{year}/{month}", response_model=FinancialAnalysisOut)
async def get_analysis(
    year: int = Path(..., ge=1900, le=2100),
    month: int = Path(..., ge=1, le=12),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    analysis = await repository.get_analysis(db, user_id=user.id, month=month, year=year)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return analysis
