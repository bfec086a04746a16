"""Ask the AI gateway to compare up to three investment options."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from finscope.services import llm_client
from finscope.services.llm_client import LLMResponseError

from .schemas import InvestmentComparison

logger = logging.getLogger(__name__)

MAX_OPTIONS = 3

COMPARISON_SYSTEM_PROMPT = (
    "You are an investment advisor AI. Provide balanced, realistic advice about investments. "
    "Always respond with valid JSON only, no markdown formatting. "
    "Base recommendations on risk tolerance and investment timeframe."
)

COMPARISON_TOOL = llm_client.build_tool(
    "compare_investments",
    "Compare investment options",
    {
        "type": "object",
        "properties": {
            "investments": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "risk": {"type": "string"},
                        "expectedReturn": {"type": "string"},
                        "recommendation": {"type": "string"},
                        "suitability": {"type": "number"},
                    },
                    "required": ["name", "risk", "expectedReturn", "recommendation", "suitability"],
                },
            },
            "bestChoice": {"type": "string"},
            "reasoning": {"type": "string"},
        },
        "required": ["investments", "bestChoice", "reasoning"],
    },
)


def build_comparison_prompt(options: list[str], monthly_amount: float) -> str:
    listed = "\n".join(f"{index}. {option}" for index, option in enumerate(options, start=1))
    return (
        f"Compare these investment options for someone who can invest £{monthly_amount:g} per month:\n\n"
        f"{listed}\n\n"
        "For each investment, provide:\n"
        "- Risk level (Low/Medium/High)\n"
        "- Expected annual return estimate\n"
        "- A brief recommendation explaining pros/cons\n"
        "- A suitability score (0-100) based on the monthly investment amount\n\n"
        "Then recommend the best choice overall and explain why.\n\n"
        "Format your response as JSON with this structure:\n"
        "{\n"
        '  "investments": [\n'
        "    {\n"
        '      "name": string,\n'
        '      "risk": string,\n'
        '      "expectedReturn": string,\n'
        '      "recommendation": string,\n'
        '      "suitability": number\n'
        "    }\n"
        "  ],\n"
        '  "bestChoice": string,\n'
        '  "reasoning": string\n'
        "}"
    )


def _stub_comparison(options: list[str]) -> dict:
    return {
        "investments": [
            {
                "name": option,
                "risk": "Medium",
                "expectedReturn": "4-6%",
                "recommendation": "[stub] Diversify and review fees.",
                "suitability": 50,
            }
            for option in options
        ],
        "bestChoice": options[0],
        "reasoning": "[stub] First option listed.",
    }


async def compare_investments(options: list[str], monthly_amount: float) -> InvestmentComparison:
    """Raises ``LLMError`` when the comparison cannot be produced."""
    if not options:
        raise ValueError("At least one investment option is required")
    options = options[:MAX_OPTIONS]

    payload = await llm_client.generate_json(
        COMPARISON_SYSTEM_PROMPT,
        build_comparison_prompt(options, monthly_amount),
        tool=COMPARISON_TOOL,
        stub_payload=_stub_comparison(options),
    )
    try:
        return InvestmentComparison.model_validate(payload)
    except ValidationError as exc:
        raise LLMResponseError("Comparison response did not match the expected shape") from exc
