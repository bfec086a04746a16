"""Pydantic schemas for the trade journal."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TradeCreate(BaseModel):
    portfolio_id: Optional[int] = None
    symbol: str = Field(min_length=1, max_length=20)
    asset_name: Optional[str] = None
    trade_type: Literal["buy", "sell"]
    quantity: float = Field(gt=0)
    entry_price: float = Field(gt=0)
    exit_price: Optional[float] = Field(default=None, ge=0)
    entry_date: Optional[datetime] = None
    exit_date: Optional[datetime] = None
    status: Literal["open", "closed"] = "open"
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, value: str) -> str:
        return value.upper()


class TradeOut(BaseModel):
    id: int
    portfolio_id: Optional[int]
    symbol: str
    asset_name: Optional[str]
    trade_type: Literal["buy", "sell"]
    quantity: float
    entry_price: float
    exit_price: Optional[float]
    entry_date: Optional[datetime]
    exit_date: Optional[datetime]
    status: Literal["open", "closed"]
    pnl: Optional[float]
    pnl_percent: Optional[float]
    notes: Optional[str]
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
