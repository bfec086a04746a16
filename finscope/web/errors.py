"""Translate collaborator failures into HTTP errors."""
from __future__ import annotations

from fastapi import HTTPException

from finscope.services.llm_client import LLMError


def llm_http_error(exc: LLMError) -> HTTPException:
    """Rate limits, exhausted credits and other failures each keep their own status."""
    return HTTPException(status_code=exc.status_code, detail=exc.user_message)
