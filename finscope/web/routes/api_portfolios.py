"""Routes for short-term and long-term portfolio preferences."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.database import get_db
from finscope.core.session import get_current_user
from finscope.domain.portfolios import services
from finscope.domain.portfolios.schemas import InvestmentGoal, PortfolioOut, PortfolioUpdate, Quote
from finscope.domain.users.models import User
from finscope.services import market_data

router = APIRouter()


@router.get("/", response_model=list[PortfolioOut])
async def list_portfolios(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await services.list_portfolios(db, user_id=user.id)


@router.put("/{goal}", response_model=PortfolioOut)
async def save_portfolio(
    goal: InvestmentGoal,
    payload: PortfolioUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create the portfolio for this horizon or change its risk appetite."""
    return await services.save_portfolio(
        db, user_id=user.id, goal=goal, risk_appetite=payload.risk_appetite
    )


@router.get("/{goal}/recommendations", response_model=list[Quote])
async def portfolio_recommendations(
    goal: InvestmentGoal,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    portfolio = await services.get_portfolio(db, user_id=user.id, goal=goal)
    if portfolio is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Portfolio not set up")
    return await market_data.get_recommended_assets(portfolio.risk_appetite, portfolio.investment_goal)
