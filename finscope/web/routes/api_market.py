"""Market quote routes used by recommendation widgets."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from finscope.domain.portfolios.schemas import InvestmentGoal, Quote, RiskAppetite, SymbolMatch
from finscope.services import market_data

router = APIRouter()

MAX_SYMBOLS = 20


@router.get("/quotes", response_model=list[Quote])
async def quotes(symbols: str = Query(..., min_length=1, description="Comma-separated tickers")):
    requested = [symbol for symbol in symbols.split(",") if symbol.strip()]
    if len(requested) > MAX_SYMBOLS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_SYMBOLS} symbols per request",
        )
    return await market_data.get_quotes(requested)


@router.get("/search", response_model=list[SymbolMatch])
async def search(q: str = Query(..., min_length=1, max_length=50)):
    try:
        return await market_data.search_symbols(q)
    except market_data.MarketDataError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Market data is unavailable right now.",
        ) from exc


@router.get("/recommendations", response_model=list[Quote])
async def recommendations(
    risk: RiskAppetite = Query("medium"),
    goal: InvestmentGoal = Query("long-term"),
):
    return await market_data.get_recommended_assets(risk, goal)
