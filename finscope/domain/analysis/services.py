"""Two-stage AI analysis: health assessment, then investment recommendations."""
from __future__ import annotations

import logging
from typing import Any, Sequence, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.config import settings
from finscope.services import llm_client
from finscope.services.llm_client import LLMError, LLMResponseError

from . import prompts, repository
from .metrics import FinancialMetrics
from .schemas import (
    CompleteAnalysis,
    HealthAnalysis,
    InvestmentPlan,
    PartialAnalysis,
)

logger = logging.getLogger(__name__)

AnalysisResult = Union[CompleteAnalysis, PartialAnalysis]


async def generate_health_analysis(
    metrics: FinancialMetrics, history: Sequence[Any] = ()
) -> HealthAnalysis:
    """First call. Any failure here aborts the whole analysis."""
    payload = await llm_client.generate_json(
        prompts.HEALTH_SYSTEM_PROMPT,
        prompts.build_health_prompt(metrics, history),
        tool=prompts.HEALTH_TOOL,
        stub_payload=prompts.build_health_stub(metrics),
    )
    try:
        return HealthAnalysis.model_validate(payload)
    except ValidationError as exc:
        raise LLMResponseError("Health analysis response did not match the expected shape") from exc


async def generate_investment_plan(
    metrics: FinancialMetrics, *, health_score: float, credit_score: int
) -> InvestmentPlan | None:
    """Second call. Failures are logged and reported as None."""
    try:
        payload = await llm_client.generate_json(
            prompts.INVESTMENT_SYSTEM_PROMPT,
            prompts.build_investment_prompt(metrics, health_score, credit_score),
            tool=prompts.INVESTMENT_TOOL,
            stub_payload=prompts.build_investment_stub(metrics),
        )
        return InvestmentPlan.model_validate(payload)
    except LLMError as exc:
        logger.warning("Investment recommendations unavailable: %s", exc)
    except ValidationError as exc:
        logger.warning("Investment recommendations had an unexpected shape: %s", exc)
    return None


async def run_analysis(metrics: FinancialMetrics, *, history: Sequence[Any] = ()) -> AnalysisResult:
    """Run both calls in order and merge them.

    Returns ``PartialAnalysis`` when only the second call failed.
    """
    health = await generate_health_analysis(metrics, history)

    credit_score = metrics.credit_score or health.estimated_credit_score
    if not credit_score:
        raise LLMResponseError("Health analysis did not include a credit score estimate")
    credit_score = int(round(credit_score))

    base = {
        "health_score": health.health_score,
        "credit_score": credit_score,
        "debt_to_income_ratio": metrics.debt_to_income_ratio,
        "credit_utilization": metrics.credit_utilization,
        "insights": health.insights,
        "recommendations": health.recommendations,
    }

    plan = await generate_investment_plan(
        metrics, health_score=health.health_score, credit_score=credit_score
    )
    if plan is None:
        return PartialAnalysis(**base)
    return CompleteAnalysis(**base, investment_recommendations=plan.recommendations)


def to_analysis_fields(metrics: FinancialMetrics, result: AnalysisResult) -> dict[str, Any]:
    """Map a merged result onto FinancialAnalysis columns."""
    recommendations: dict[str, Any] = {
        "insights": list(result.insights),
        "actions": list(result.recommendations),
    }
    if isinstance(result, CompleteAnalysis):
        recommendations["investments"] = [
            item.model_dump(by_alias=True, exclude_none=True) for item in result.investment_recommendations
        ]

    return {
        "monthly_income": metrics.income,
        "monthly_expenses": metrics.expenses,
        "debt_amount": metrics.debt,
        "credit_score": result.credit_score,
        "financial_score": int(round(result.health_score)),
        # stored as a percentage of a limit, so never above 100
        "credit_utilization": max(0.0, min(100.0, result.credit_utilization)),
        "debt_to_income_ratio": result.debt_to_income_ratio,
        "recommendations": recommendations,
    }


async def _load_history(db: AsyncSession, *, user_id: int, month: int, year: int) -> list[Any]:
    try:
        return await repository.list_recent_analyses(
            db,
            user_id=user_id,
            limit=settings.ANALYSIS_HISTORY_MONTHS,
            exclude=(month, year),
        )
    except SQLAlchemyError:
        logger.exception("Could not load analysis history for user %s", user_id)
        await db.rollback()
        return []


async def analyze_finances(
    db: AsyncSession,
    metrics: FinancialMetrics,
    *,
    user_id: int | None,
    month: int,
    year: int,
) -> AnalysisResult:
    """Analyze and, for signed-in users, store the month's result.

    A failed save does not fail the request; ``saved`` tells the caller.
    """
    history: list[Any] = []
    if user_id is not None:
        history = await _load_history(db, user_id=user_id, month=month, year=year)

    result = await run_analysis(metrics, history=history)

    if user_id is None:
        return result

    try:
        await repository.upsert_analysis(
            db,
            user_id=user_id,
            month=month,
            year=year,
            fields=to_analysis_fields(metrics, result),
        )
    except (SQLAlchemyError, ValueError):
        logger.exception("Analysis for user %s %s-%02d could not be saved", user_id, year, month)
        await db.rollback()
        return result.model_copy(update={"saved": False})

    return result.model_copy(update={"saved": True})
