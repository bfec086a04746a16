"""Quotes and symbol search backed by the public Yahoo Finance endpoints."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from finscope.core.config import settings

logger = logging.getLogger(__name__)

MAX_RECOMMENDED_ASSETS = 8
SEARCH_RESULT_LIMIT = 10

# Yahoo rejects requests without a browser-like agent.
_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; FinScope/1.0)"}

RECOMMENDATION_POOLS: dict[tuple[str, str], list[str]] = {
    ("low", "short-term"): ["BND", "VCSH", "SHY", "AGG", "GOVT"],
    ("low", "long-term"): ["VOO", "VTI", "BND", "VIG", "SCHD"],
    ("medium", "short-term"): ["SPY", "IWM", "QQQ", "DIA", "VEA"],
    ("medium", "long-term"): ["VTI", "VOO", "VXUS", "VEA", "VWO"],
    ("high", "short-term"): ["QQQ", "ARKK", "TSLA", "NVDA", "AMD"],
    ("high", "long-term"): ["QQQ", "VUG", "ARKK", "TSLA", "NVDA", "MSFT", "GOOGL"],
}


class MarketDataError(Exception):
    """Raised when the quote provider cannot be reached or answers garbage."""


def recommendation_pool(risk_appetite: str, investment_goal: str) -> list[str]:
    """Return the curated symbols for a risk/goal pair (unknown risk counts as high)."""
    risk = risk_appetite if risk_appetite in {"low", "medium"} else "high"
    goal = "short-term" if investment_goal == "short-term" else "long-term"
    return RECOMMENDATION_POOLS[(risk, goal)][:MAX_RECOMMENDED_ASSETS]


def _parse_chart(data: Any) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        return None
    results = (data.get("chart") or {}).get("result") or []
    if not results:
        return None

    result = results[0]
    meta = result.get("meta") or {}
    quote = ((result.get("indicators") or {}).get("quote") or [{}])[0] or {}

    price = float(meta.get("regularMarketPrice") or 0)
    previous_close = meta.get("chartPreviousClose") or meta.get("previousClose")
    previous_close = float(previous_close) if previous_close else None

    change = meta.get("regularMarketChange")
    change_percent = meta.get("regularMarketChangePercent")
    if change is None and previous_close:
        change = price - previous_close
    if change_percent is None and previous_close:
        change_percent = (price - previous_close) / previous_close * 100

    highs = quote.get("high") or []
    lows = quote.get("low") or []

    return {
        "symbol": meta.get("symbol"),
        "name": meta.get("longName") or meta.get("shortName") or meta.get("symbol"),
        "price": price,
        "previous_close": previous_close,
        "change": float(change or 0),
        "change_percent": float(change_percent or 0),
        "volume": int(meta.get("regularMarketVolume") or 0),
        "market_cap": float(meta.get("marketCap") or 0),
        "high": float(highs[0] or 0) if highs else 0.0,
        "low": float(lows[0] or 0) if lows else 0.0,
    }


async def _fetch_quote(client: httpx.AsyncClient, symbol: str) -> dict[str, Any] | None:
    url = f"{settings.MARKET_DATA_URL}/v8/finance/chart/{symbol}"
    try:
        response = await client.get(url, params={"interval": "1d", "range": "1d"})
        response.raise_for_status()
        return _parse_chart(response.json())
    except (httpx.HTTPError, ValueError, TypeError, AttributeError, IndexError) as exc:
        logger.warning("Error fetching %s: %s", symbol, exc)
        return None


async def get_quotes(symbols: list[str]) -> list[dict[str, Any]]:
    """Fetch current quotes concurrently; symbols that fail are dropped."""
    cleaned = [symbol.strip().upper() for symbol in symbols if symbol and symbol.strip()]
    if not cleaned:
        return []

    async with httpx.AsyncClient(
        timeout=settings.MARKET_DATA_TIMEOUT_SECONDS,
        headers=_HEADERS,
    ) as client:
        quotes = await asyncio.gather(*(_fetch_quote(client, symbol) for symbol in cleaned))

    return [quote for quote in quotes if quote is not None]


async def search_symbols(query: str) -> list[dict[str, Any]]:
    """Search tickers by free text."""
    url = f"{settings.MARKET_DATA_URL}/v1/finance/search"
    params = {"q": query, "quotesCount": SEARCH_RESULT_LIMIT, "newsCount": 0}
    try:
        async with httpx.AsyncClient(
            timeout=settings.MARKET_DATA_TIMEOUT_SECONDS,
            headers=_HEADERS,
        ) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise MarketDataError(f"Symbol search failed: {exc}") from exc
    if not isinstance(data, dict):
        raise MarketDataError("Symbol search returned an unexpected payload")

    return [
        {
            "symbol": item.get("symbol"),
            "name": item.get("longname") or item.get("shortname") or item.get("symbol"),
            "type": item.get("quoteType"),
            "exchange": item.get("exchange"),
        }
        for item in data.get("quotes") or []
        if isinstance(item, dict) and item.get("symbol")
    ]


async def get_recommended_assets(risk_appetite: str, investment_goal: str) -> list[dict[str, Any]]:
    """Quote the curated pool for a risk profile and tag each entry stock/etf."""
    quotes = await get_quotes(recommendation_pool(risk_appetite, investment_goal))
    for quote in quotes:
        symbol = quote.get("symbol") or ""
        quote["type"] = "stock" if len(symbol) <= 5 and "." not in symbol else "etf"
    return quotes


__all__ = [
    "MarketDataError",
    "get_quotes",
    "get_recommended_assets",
    "recommendation_pool",
    "search_symbols",
]
