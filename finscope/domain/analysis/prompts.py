"""Prompt text and output tools for the two analysis calls."""
from __future__ import annotations

from typing import Any, Sequence

from finscope.domain.analysis.metrics import FinancialMetrics
from finscope.services.llm_client import build_tool

HEALTH_SYSTEM_PROMPT = (
    "You are a financial advisor AI. Provide clear, actionable advice. "
    "Always respond with valid JSON only, no markdown formatting."
)

INVESTMENT_SYSTEM_PROMPT = (
    "You are an investment advisor AI. Provide balanced, realistic advice that fits "
    "the person's risk capacity and time horizon. Always respond with valid JSON only, "
    "no markdown formatting."
)

HEALTH_TOOL = build_tool(
    "report_financial_health",
    "Report the financial health assessment",
    {
        "type": "object",
        "properties": {
            "healthScore": {"type": "number", "description": "Financial health score 0-100"},
            "estimatedCreditScore": {"type": "number", "description": "Estimated or validated credit score"},
            "insights": {"type": "array", "items": {"type": "string"}},
            "recommendations": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["healthScore", "estimatedCreditScore", "insights", "recommendations"],
        "additionalProperties": False,
    },
)

INVESTMENT_TOOL = build_tool(
    "recommend_investments",
    "Recommend investment categories",
    {
        "type": "object",
        "properties": {
            "recommendations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "category": {"type": "string"},
                        "riskLevel": {"type": "string", "enum": ["low", "medium", "high"]},
                        "timeHorizon": {"type": "string"},
                        "reasoning": {"type": "string"},
                        "suggestions": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["category", "riskLevel", "timeHorizon", "reasoning", "suggestions"],
                },
            },
        },
        "required": ["recommendations"],
        "additionalProperties": False,
    },
)


def _money(value: float) -> str:
    return f"£{value:g}" if float(value).is_integer() else f"£{value:.2f}"


def _format_history(history: Sequence[Any]) -> str:
    lines = []
    for row in history:
        lines.append(
            f"- {row.year}-{row.month:02d}: income {_money(row.monthly_income)}, "
            f"expenses {_money(row.monthly_expenses)}, debt {_money(row.debt_amount)}, "
            f"health score {row.financial_score}, credit score {row.credit_score}"
        )
    return "\n".join(lines)


def build_health_prompt(metrics: FinancialMetrics, history: Sequence[Any] = ()) -> str:
    """Prompt for the health score, credit estimate, insights and actions.

    ``history`` holds previous monthly analyses, newest first.
    """
    credit_line = f"Credit Score: {metrics.credit_score:g}\n" if metrics.credit_score else ""
    prompt = (
        "Analyze this financial situation and provide insights:\n\n"
        f"Monthly Income: {_money(metrics.income)}\n"
        f"Monthly Expenses: {_money(metrics.expenses)}\n"
        f"Total Debt: {_money(metrics.debt)}\n"
        f"{credit_line}\n"
        f"Disposable Income: {_money(metrics.disposable_income)}\n"
        f"Debt-to-Income Ratio: {metrics.debt_to_income_ratio}%\n"
        f"Credit Utilization: {metrics.credit_utilization}%\n"
    )

    if history:
        prompt += (
            "\nPrevious months (newest first), use them to comment on the trend:\n"
            f"{_format_history(history)}\n"
        )

    prompt += (
        "\nProvide:\n"
        "1. A financial health score (0-100)\n"
        "2. An estimated credit score if not provided (or validate the provided one)\n"
        "3. 3-4 key insights about their financial situation\n"
        "4. 3-4 specific, actionable recommendations to improve their financial health\n\n"
        "Format your response as JSON with this structure:\n"
        "{\n"
        '  "healthScore": number,\n'
        '  "estimatedCreditScore": number,\n'
        '  "insights": [string],\n'
        '  "recommendations": [string]\n'
        "}"
    )
    return prompt


def build_investment_prompt(metrics: FinancialMetrics, health_score: float, credit_score: int) -> str:
    """Prompt for investment categories, aware of the health assessment."""
    prompt = (
        "Suggest investment categories for this person:\n\n"
        f"Monthly Income: {_money(metrics.income)}\n"
        f"Monthly Expenses: {_money(metrics.expenses)}\n"
        f"Disposable Income: {_money(metrics.disposable_income)}\n"
        f"Total Debt: {_money(metrics.debt)}\n"
        f"Debt-to-Income Ratio: {metrics.debt_to_income_ratio}%\n"
        f"Financial Health Score: {health_score:g}/100\n"
        f"Credit Score: {credit_score}\n\n"
    )

    if metrics.disposable_income <= 0:
        prompt += (
            "They currently have no money left over each month. Do not recommend market "
            "investments as the first step: focus the categories on building an emergency "
            "fund, cutting expenses and paying down debt, and only then low-risk saving.\n\n"
        )
    else:
        prompt += (
            "Give 3-4 categories that match their risk capacity, from safest to most growth-oriented.\n\n"
        )

    prompt += (
        "Format your response as JSON with this structure:\n"
        "{\n"
        '  "recommendations": [\n'
        "    {\n"
        '      "category": string,\n'
        '      "riskLevel": "low" | "medium" | "high",\n'
        '      "timeHorizon": string,\n'
        '      "reasoning": string,\n'
        '      "suggestions": [string]\n'
        "    }\n"
        "  ]\n"
        "}"
    )
    return prompt


def build_health_stub(metrics: FinancialMetrics) -> dict[str, Any]:
    """Deterministic offline answer for local development."""
    score = 50.0
    if metrics.disposable_income > 0:
        score += 20
    if metrics.debt_to_income_ratio < 20:
        score += 15
    if metrics.credit_utilization < 30:
        score += 15
    return {
        "healthScore": min(score, 100.0),
        "estimatedCreditScore": metrics.credit_score or 650,
        "insights": [
            f"[stub] You keep {_money(metrics.disposable_income)} each month after expenses.",
            f"[stub] Debt equals {metrics.debt_to_income_ratio}% of your yearly income.",
        ],
        "recommendations": [
            "[stub] Build an emergency fund covering three months of expenses.",
            "[stub] Pay down the highest-interest debt first.",
        ],
    }


def build_investment_stub(metrics: FinancialMetrics) -> dict[str, Any]:
    if metrics.disposable_income <= 0:
        category = {
            "category": "Emergency fund",
            "riskLevel": "low",
            "timeHorizon": "0-1 years",
            "reasoning": "[stub] Stabilise cash flow before investing.",
            "suggestions": ["Easy-access savings account"],
        }
    else:
        category = {
            "category": "Global index funds",
            "riskLevel": "medium",
            "timeHorizon": "5+ years",
            "reasoning": "[stub] Broad diversification at low cost.",
            "suggestions": ["VWRL", "VOO"],
        }
    return {"recommendations": [category]}
