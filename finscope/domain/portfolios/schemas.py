"""Pydantic schemas for portfolio preferences and market data."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

RiskAppetite = Literal["low", "medium", "high"]
InvestmentGoal = Literal["short-term", "long-term"]


class PortfolioUpdate(BaseModel):
    risk_appetite: RiskAppetite

    model_config = ConfigDict(extra="forbid")


class PortfolioOut(BaseModel):
    id: int
    investment_goal: InvestmentGoal
    risk_appetite: RiskAppetite
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class Quote(BaseModel):
    symbol: str
    name: Optional[str] = None
    price: float
    previous_close: Optional[float] = None
    change: float
    change_percent: float
    volume: int = 0
    market_cap: float = 0
    high: float = 0
    low: float = 0
    type: Optional[Literal["stock", "etf"]] = None


class SymbolMatch(BaseModel):
    symbol: str
    name: Optional[str] = None
    type: Optional[str] = None
    exchange: Optional[str] = None
