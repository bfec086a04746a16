"""HTTP client for the OpenAI-compatible AI gateway."""
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any

import httpx

from finscope.core.config import settings

logger = logging.getLogger(__name__)

STUB_KEYS = {"stub", "debug"}

_FENCE_START = re.compile(r"^\s*```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_END = re.compile(r"\n?\s*```\s*$")


class LLMError(Exception):
    """The gateway could not produce a usable answer."""

    status_code = 502
    user_message = "The AI service failed to respond. Please try again."


class LLMConfigurationError(LLMError):
    status_code = 503
    user_message = "The AI service is not configured."


class LLMRateLimitError(LLMError):
    status_code = 429
    user_message = "Rate limit exceeded. Please try again later."


class LLMPaymentRequiredError(LLMError):
    status_code = 402
    user_message = "AI credits exhausted. Please add credits to your workspace."


class LLMResponseError(LLMError):
    """The gateway answered, but not with the structure we asked for."""

    user_message = "The AI service returned an unexpected response."


def _api_key() -> str:
    return (os.getenv("LLM_API_KEY") or settings.LLM_API_KEY or "").strip()


def is_stub_mode() -> bool:
    """Return True when deterministic offline payloads should be served."""
    return _api_key().lower() in STUB_KEYS


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker."""
    cleaned = _FENCE_START.sub("", text or "", count=1)
    cleaned = _FENCE_END.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_content(text: str) -> Any:
    """Parse model text as JSON, tolerating a surrounding code fence."""
    try:
        return json.loads(strip_code_fences(text))
    except (TypeError, ValueError) as exc:
        logger.error("Error parsing AI response: %.500s", text)
        raise LLMResponseError("Failed to parse AI response") from exc


def build_tool(name: str, description: str, parameters: dict[str, Any]) -> dict[str, Any]:
    """Describe a function tool used to force schema-shaped output."""
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": parameters,
        },
    }


def _raise_for_gateway_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    logger.error("AI gateway error: %s %.500s", response.status_code, response.text)
    if response.status_code == 429:
        raise LLMRateLimitError(f"AI gateway rate limited the request ({response.status_code})")
    if response.status_code == 402:
        raise LLMPaymentRequiredError(f"AI gateway requires payment ({response.status_code})")
    raise LLMError(f"AI gateway error: {response.status_code}")


async def chat_completion(
    messages: list[dict[str, Any]],
    *,
    tools: list[dict[str, Any]] | None = None,
    tool_choice: dict[str, Any] | None = None,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Send a chat completion request and return the assistant message."""
    api_key = _api_key()
    if not api_key:
        raise LLMConfigurationError("LLM_API_KEY not configured")

    payload: dict[str, Any] = {
        "model": settings.LLM_MODEL,
        "messages": messages,
    }
    if temperature is not None:
        payload["temperature"] = temperature
    if tools:
        payload["tools"] = tools
    if tool_choice:
        payload["tool_choice"] = tool_choice

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.LLM_API_URL, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise LLMError(f"AI gateway unreachable: {exc}") from exc

    _raise_for_gateway_status(response)

    try:
        data = response.json()
        return data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise LLMResponseError("Invalid response received from the AI gateway") from exc


def _tool_call_arguments(message: dict[str, Any]) -> dict[str, Any] | None:
    tool_calls = message.get("tool_calls") or []
    if not tool_calls:
        return None
    raw_arguments = (tool_calls[0].get("function") or {}).get("arguments")
    if isinstance(raw_arguments, dict):
        return raw_arguments
    try:
        parsed = json.loads(raw_arguments or "")
    except (TypeError, ValueError) as exc:
        raise LLMResponseError("Tool call arguments are not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise LLMResponseError("Tool call arguments must be a JSON object")
    return parsed


async def generate_json(
    system_prompt: str,
    user_prompt: str,
    *,
    tool: dict[str, Any] | None = None,
    stub_payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Ask the gateway for a JSON object.

    When structured output is enabled and a tool is given, the tool-call
    arguments are the contract. Plain message text is still accepted and
    parsed after stripping code fences, for gateways or models that ignore
    ``tool_choice``.
    """
    if is_stub_mode() and stub_payload is not None:
        return stub_payload

    use_tool = bool(tool) and settings.LLM_STRUCTURED_OUTPUT
    message = await chat_completion(
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        tools=[tool] if use_tool else None,
        tool_choice=(
            {"type": "function", "function": {"name": tool["function"]["name"]}} if use_tool else None
        ),
        temperature=settings.LLM_TEMPERATURE,
    )

    if use_tool:
        arguments = _tool_call_arguments(message)
        if arguments is not None:
            return arguments
        logger.info("Structured output not honoured by the gateway; parsing message text")

    parsed = parse_json_content(message.get("content") or "")
    if not isinstance(parsed, dict):
        raise LLMResponseError("AI response must be a JSON object")
    return parsed


async def extract_with_image(
    system_prompt: str,
    instruction: str,
    image_data_url: str,
    *,
    tool: dict[str, Any],
    stub_payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Run a vision request that must answer through ``tool``."""
    if is_stub_mode() and stub_payload is not None:
        return stub_payload

    message = await chat_completion(
        [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": instruction},
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            },
        ],
        tools=[tool],
        tool_choice={"type": "function", "function": {"name": tool["function"]["name"]}},
    )

    arguments = _tool_call_arguments(message)
    if arguments is None:
        raise LLMResponseError("No tool call in AI response")
    return arguments


async def generate_reply(system_prompt: str, messages: list[dict[str, str]], *, stub_reply: str) -> str:
    """Continue a conversation and return the assistant text."""
    if is_stub_mode():
        return stub_reply

    message = await chat_completion([{"role": "system", "content": system_prompt}, *messages])
    content = (message.get("content") or "").strip()
    if not content:
        raise LLMResponseError("Empty reply from the AI gateway")
    return content


__all__ = [
    "LLMConfigurationError",
    "LLMError",
    "LLMPaymentRequiredError",
    "LLMRateLimitError",
    "LLMResponseError",
    "build_tool",
    "chat_completion",
    "extract_with_image",
    "generate_json",
    "generate_reply",
    "is_stub_mode",
    "parse_json_content",
    "strip_code_fences",
]
