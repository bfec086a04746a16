"""Persistence of monthly analyses keyed by (user, month, year)."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import FinancialAnalysis

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = frozenset(
    {
        "monthly_income",
        "monthly_expenses",
        "debt_amount",
        "credit_score",
        "financial_score",
        "credit_utilization",
        "debt_to_income_ratio",
        "recommendations",
    }
)
REQUIRED_ON_INSERT = frozenset(
    {"monthly_income", "monthly_expenses", "debt_amount", "credit_score", "financial_score"}
)


async def get_analysis(
    db: AsyncSession, *, user_id: int, month: int, year: int
) -> FinancialAnalysis | None:
    result = await db.execute(
        select(FinancialAnalysis).where(
            FinancialAnalysis.user_id == user_id,
            FinancialAnalysis.month == month,
            FinancialAnalysis.year == year,
        )
    )
    return result.scalar_one_or_none()


async def list_recent_analyses(
    db: AsyncSession,
    *,
    user_id: int,
    limit: int | None = None,
    exclude: tuple[int, int] | None = None,
) -> list[FinancialAnalysis]:
    """Return a user's analyses newest month first.

    ``exclude`` is a ``(month, year)`` pair left out of the result.
    """
    stmt = (
        select(FinancialAnalysis)
        .where(FinancialAnalysis.user_id == user_id)
        .order_by(FinancialAnalysis.year.desc(), FinancialAnalysis.month.desc())
    )
    if exclude is not None:
        month, year = exclude
        stmt = stmt.where(
            ~((FinancialAnalysis.month == month) & (FinancialAnalysis.year == year))
        )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _apply_fields(row: FinancialAnalysis, fields: Mapping[str, Any]) -> None:
    unknown = set(fields) - WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown analysis fields: {', '.join(sorted(unknown))}")

    for name, value in fields.items():
        setattr(row, name, value)

    # monthly_available is never written directly.
    if row.monthly_income is not None and row.monthly_expenses is not None:
        row.monthly_available = row.monthly_income - row.monthly_expenses
    row.updated_at = datetime.utcnow()


async def upsert_analysis(
    db: AsyncSession,
    *,
    user_id: int,
    month: int,
    year: int,
    fields: Mapping[str, Any],
) -> FinancialAnalysis:
    """Update the supplied fields of the month's row, or insert a full row.

    Last writer wins; there is no version check.
    """
    existing = await get_analysis(db, user_id=user_id, month=month, year=year)
    if existing is not None:
        _apply_fields(existing, fields)
        await db.commit()
        await db.refresh(existing)
        return existing

    missing = REQUIRED_ON_INSERT - set(fields)
    if missing:
        raise ValueError(f"Cannot create analysis without: {', '.join(sorted(missing))}")

    row = FinancialAnalysis(user_id=user_id, month=month, year=year)
    _apply_fields(row, fields)
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Another request created the row in the meantime; update it instead.
        logger.info("Concurrent insert for user %s %s-%02d; updating", user_id, year, month)
        existing = await get_analysis(db, user_id=user_id, month=month, year=year)
        if existing is None:
            raise
        _apply_fields(existing, fields)
        await db.commit()
        await db.refresh(existing)
        return existing

    await db.refresh(row)
    return row


async def update_analysis_if_exists(
    db: AsyncSession,
    *,
    user_id: int,
    month: int,
    year: int,
    fields: Mapping[str, Any],
) -> FinancialAnalysis | None:
    """Partial update of an existing month; returns None when there is no row."""
    existing = await get_analysis(db, user_id=user_id, month=month, year=year)
    if existing is None:
        return None
    _apply_fields(existing, fields)
    await db.commit()
    await db.refresh(existing)
    return existing
