"""Trade journal helpers."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Trade
from .schemas import TradeCreate


def calculate_pnl(
    trade_type: str,
    entry_price: float,
    exit_price: Optional[float],
    quantity: float,
) -> tuple[Optional[float], Optional[float]]:
    """Return ``(pnl, pnl_percent)`` or ``(None, None)`` while the trade has no exit.

    The percentage is the raw price move and is not flipped for sells.
    """
    if exit_price is None or not entry_price or not quantity:
        return None, None
    if trade_type == "buy":
        pnl = (exit_price - entry_price) * quantity
    else:
        pnl = (entry_price - exit_price) * quantity
    pnl_percent = (exit_price - entry_price) / entry_price * 100
    return pnl, pnl_percent


async def create_trade(db: AsyncSession, *, user_id: int, payload: TradeCreate) -> Trade:
    pnl, pnl_percent = calculate_pnl(
        payload.trade_type, payload.entry_price, payload.exit_price, payload.quantity
    )
    trade = Trade(
        user_id=user_id,
        portfolio_id=payload.portfolio_id,
        symbol=payload.symbol,
        asset_name=payload.asset_name,
        trade_type=payload.trade_type,
        quantity=payload.quantity,
        entry_price=payload.entry_price,
        exit_price=payload.exit_price,
        entry_date=payload.entry_date or datetime.utcnow(),
        exit_date=payload.exit_date,
        status=payload.status,
        pnl=pnl,
        pnl_percent=pnl_percent,
        notes=payload.notes or None,
    )
    db.add(trade)
    await db.commit()
    await db.refresh(trade)
    return trade


async def list_trades(db: AsyncSession, *, user_id: int, status: Optional[str] = None) -> list[Trade]:
    stmt = select(Trade).where(Trade.user_id == user_id)
    if status:
        stmt = stmt.where(Trade.status == status)
    result = await db.execute(stmt.order_by(Trade.entry_date.desc(), Trade.id.desc()))
    return list(result.scalars().all())


async def get_trade(db: AsyncSession, *, user_id: int, trade_id: int) -> Trade | None:
    result = await db.execute(select(Trade).where(Trade.id == trade_id, Trade.user_id == user_id))
    return result.scalar_one_or_none()
