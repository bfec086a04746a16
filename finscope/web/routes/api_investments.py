"""Routes for AI investment comparison and the help assistant."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from finscope.core.rate_limit import enforce_ai_rate_limit
from finscope.core.validation import parse_amount
from finscope.domain.investments.schemas import ComparisonRequest, InvestmentComparison
from finscope.domain.investments.services import compare_investments
from finscope.domain.support.services import ChatReply, ChatRequest, answer
from finscope.services.llm_client import LLMError
from finscope.web.errors import llm_http_error

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(enforce_ai_rate_limit)])


@router.post("/investments/compare", response_model=InvestmentComparison)
async def compare(payload: ComparisonRequest) -> InvestmentComparison:
    options = payload.options()
    if not options:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Enter at least one investment to compare",
        )
    monthly_amount = parse_amount(payload.monthly_investment, "Monthly investment")
    if monthly_amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Monthly investment must be greater than zero",
        )

    try:
        return await compare_investments(options, monthly_amount)
    except LLMError as exc:
        logger.error("Error in compare-investments: %s", exc)
        raise llm_http_error(exc) from exc


@router.post("/support/chat", response_model=ChatReply)
async def support_chat(payload: ChatRequest) -> ChatReply:
    try:
        return await answer(payload)
    except LLMError as exc:
        logger.error("Error in support-chat: %s", exc)
        raise llm_http_error(exc) from exc
