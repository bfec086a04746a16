"""Portfolio preference storage."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import UserPortfolio


async def list_portfolios(db: AsyncSession, *, user_id: int) -> list[UserPortfolio]:
    result = await db.execute(
        select(UserPortfolio)
        .where(UserPortfolio.user_id == user_id)
        .order_by(UserPortfolio.investment_goal.desc())
    )
    return list(result.scalars().all())


async def get_portfolio(db: AsyncSession, *, user_id: int, goal: str) -> UserPortfolio | None:
    result = await db.execute(
        select(UserPortfolio).where(
            UserPortfolio.user_id == user_id,
            UserPortfolio.investment_goal == goal,
        )
    )
    return result.scalar_one_or_none()


async def save_portfolio(db: AsyncSession, *, user_id: int, goal: str, risk_appetite: str) -> UserPortfolio:
    """Create or update the portfolio for ``goal``."""
    portfolio = await get_portfolio(db, user_id=user_id, goal=goal)
    if portfolio is None:
        portfolio = UserPortfolio(user_id=user_id, investment_goal=goal, risk_appetite=risk_appetite)
        db.add(portfolio)
    else:
        portfolio.risk_appetite = risk_appetite

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        portfolio = await get_portfolio(db, user_id=user_id, goal=goal)
        if portfolio is None:
            raise
        portfolio.risk_appetite = risk_appetite
        await db.commit()

    await db.refresh(portfolio)
    return portfolio
