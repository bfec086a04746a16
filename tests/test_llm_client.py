import json

import httpx
import pytest

from finscope.services import llm_client
from finscope.services.llm_client import (
    LLMConfigurationError,
    LLMError,
    LLMPaymentRequiredError,
    LLMRateLimitError,
    LLMResponseError,
)

TOOL = llm_client.build_tool(
    "report",
    "Report something",
    {"type": "object", "properties": {"value": {"type": "number"}}, "required": ["value"]},
)


@pytest.fixture
def live_key(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "test-key")


@pytest.fixture
def gateway(monkeypatch, live_key):
    """Route the client's HTTP calls to a handler set by the test."""
    calls = []
    state = {"handler": None}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        return state["handler"](request)

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(llm_client.httpx, "AsyncClient", client_factory)

    def respond(func):
        state["handler"] = func

    respond.calls = calls
    return respond


def _message(message: dict) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": message}]})


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}\n```', '{"a": 1}'),
        ('{"a": 1}', '{"a": 1}'),
        ('  ```JSON\n[1, 2]```  ', "[1, 2]"),
    ],
)
def test_strip_code_fences(raw, expected):
    assert llm_client.strip_code_fences(raw) == expected


def test_parse_json_content_rejects_prose():
    with pytest.raises(LLMResponseError):
        llm_client.parse_json_content("Here is your analysis!")


def test_stub_mode_follows_api_key(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "debug")
    assert llm_client.is_stub_mode()

    monkeypatch.setenv("LLM_API_KEY", "real-key")
    assert not llm_client.is_stub_mode()


async def test_missing_key_is_configuration_error(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "")
    monkeypatch.setattr(llm_client.settings, "LLM_API_KEY", "")

    with pytest.raises(LLMConfigurationError):
        await llm_client.chat_completion([{"role": "user", "content": "hi"}])


async def test_generate_json_prefers_tool_arguments(gateway):
    gateway(
        lambda request: _message(
            {
                "content": None,
                "tool_calls": [{"function": {"name": "report", "arguments": '{"value": 42}'}}],
            }
        )
    )

    result = await llm_client.generate_json("system", "user", tool=TOOL)

    assert result == {"value": 42}
    sent = gateway.calls[0]
    assert sent["tools"][0]["function"]["name"] == "report"
    assert sent["tool_choice"] == {"type": "function", "function": {"name": "report"}}


async def test_generate_json_falls_back_to_fenced_text(gateway):
    gateway(lambda request: _message({"content": '```json\n{"value": 7}\n```'}))

    result = await llm_client.generate_json("system", "user", tool=TOOL)

    assert result == {"value": 7}


async def test_generate_json_without_structured_output(gateway, monkeypatch):
    monkeypatch.setattr(llm_client.settings, "LLM_STRUCTURED_OUTPUT", False)
    gateway(lambda request: _message({"content": '{"value": 1}'}))

    result = await llm_client.generate_json("system", "user", tool=TOOL)

    assert result == {"value": 1}
    assert "tools" not in gateway.calls[0]


async def test_generate_json_rejects_non_object(gateway):
    gateway(lambda request: _message({"content": "[1, 2, 3]"}))

    with pytest.raises(LLMResponseError):
        await llm_client.generate_json("system", "user")


@pytest.mark.parametrize(
    ("status_code", "error_type", "http_status"),
    [
        (429, LLMRateLimitError, 429),
        (402, LLMPaymentRequiredError, 402),
        (500, LLMError, 502),
    ],
)
async def test_gateway_status_mapping(gateway, status_code, error_type, http_status):
    gateway(lambda request: httpx.Response(status_code, text="nope"))

    with pytest.raises(error_type) as exc_info:
        await llm_client.generate_json("system", "user", tool=TOOL)

    assert exc_info.value.status_code == http_status


async def test_unreachable_gateway_is_llm_error(gateway):
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway(boom)

    with pytest.raises(LLMError):
        await llm_client.generate_json("system", "user")


async def test_extract_with_image_requires_tool_call(gateway):
    gateway(lambda request: _message({"content": '{"amount": 3}'}))

    with pytest.raises(LLMResponseError, match="No tool call"):
        await llm_client.extract_with_image(
            "system", "read it", "data:image/png;base64,AAAA", tool=TOOL
        )


async def test_extract_with_image_sends_data_url(gateway):
    gateway(
        lambda request: _message(
            {"tool_calls": [{"function": {"name": "report", "arguments": '{"value": 12.5}'}}]}
        )
    )

    result = await llm_client.extract_with_image(
        "system", "read it", "data:image/png;base64,AAAA", tool=TOOL
    )

    assert result == {"value": 12.5}
    content = gateway.calls[0]["messages"][1]["content"]
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


async def test_stub_payload_skips_gateway(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "stub")

    result = await llm_client.generate_json("system", "user", stub_payload={"value": 0})

    assert result == {"value": 0}
