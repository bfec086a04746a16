"""In-app help assistant."""
from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

from finscope.services import llm_client

MAX_HISTORY_MESSAGES = 20

SUPPORT_SYSTEM_PROMPT = """You are a helpful assistant for FinScope, a personal finance and investment platform. Help users find their way around and understand its features:

1. Dashboard: financial health score, monthly income, expenses and money available to save, total debt, credit score, key ratios and the month-by-month history.
2. Analyze Finances: enter income, expenses, debt and an optional credit score to get a health score, insights, actions and investment categories. Receipts can be uploaded there to build the month's expense total.
3. Compare Investments: compare up to three options side by side with risk, expected return and a suitability score for a monthly amount.
4. Portfolio: separate short-term (1-3 years) and long-term (5+ years) portfolios, each with its own risk appetite (low, medium or high). The Recommended Assets section lists 5-8 stocks and ETFs with live prices and daily changes for that risk profile. This platform DOES recommend specific assets there.
5. Trade Journal: log buy and sell trades with entry and exit prices, see profit/loss and percentage returns, and track open and closed positions.

Be friendly and accurate, and point users to the right page for their question."""


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)


class ChatReply(BaseModel):
    message: str


async def answer(request: ChatRequest) -> ChatReply:
    history = [message.model_dump() for message in request.messages[-MAX_HISTORY_MESSAGES:]]
    reply = await llm_client.generate_reply(
        SUPPORT_SYSTEM_PROMPT,
        history,
        stub_reply="[stub] Open the Portfolio page to see recommended assets for your risk profile.",
    )
    return ChatReply(message=reply)
