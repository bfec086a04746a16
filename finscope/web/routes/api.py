"""JSON API router."""
from __future__ import annotations

from fastapi import APIRouter

from finscope.web.routes import api_analysis
from finscope.web.routes import api_investments
from finscope.web.routes import api_market
from finscope.web.routes import api_portfolios
from finscope.web.routes import api_receipts
from finscope.web.routes import api_trades

router = APIRouter()

router.include_router(api_analysis.router, tags=["analysis"])
router.include_router(api_receipts.router, prefix="/receipts", tags=["receipts"])
router.include_router(api_market.router, prefix="/market", tags=["market"])
router.include_router(api_portfolios.router, prefix="/portfolios", tags=["portfolios"])
router.include_router(api_trades.router, prefix="/trades", tags=["trades"])
router.include_router(api_investments.router, tags=["investments"])
