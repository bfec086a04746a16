"""Trade journal routes."""
from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.database import get_db
from finscope.core.session import get_current_user
from finscope.domain.portfolios.models import UserPortfolio
from finscope.domain.trades import services
from finscope.domain.trades.schemas import TradeCreate, TradeOut
from finscope.domain.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=TradeOut, status_code=status.HTTP_201_CREATED)
async def create_trade(
    payload: TradeCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if payload.portfolio_id is not None:
        owned = await db.scalar(
            select(UserPortfolio.id).where(
                UserPortfolio.id == payload.portfolio_id,
                UserPortfolio.user_id == user.id,
            )
        )
        if owned is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Portfolio not found")

    trade = await services.create_trade(db, user_id=user.id, payload=payload)
    logger.info("Trade %s logged for user %s (%s %s)", trade.id, user.id, trade.trade_type, trade.symbol)
    return trade


@router.get("/", response_model=list[TradeOut])
async def list_trades(
    status_filter: Optional[Literal["open", "closed"]] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await services.list_trades(db, user_id=user.id, status=status_filter)


@router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    trade = await services.get_trade(db, user_id=user.id, trade_id=trade_id)
    if trade is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trade not found")
    await db.delete(trade)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
