import pytest
from sqlalchemy import func, select

from finscope.domain.analysis import services
from finscope.domain.analysis.metrics import compute_metrics
from finscope.domain.analysis.models import FinancialAnalysis
from finscope.domain.analysis.repository import list_recent_analyses, upsert_analysis
from finscope.domain.analysis.schemas import CompleteAnalysis, PartialAnalysis
from finscope.services.llm_client import LLMError, LLMRateLimitError, LLMResponseError

HEALTH = {
    "healthScore": 72,
    "estimatedCreditScore": 690,
    "insights": ["You save a third of your income."],
    "recommendations": ["Keep three months of expenses aside."],
}
INVESTMENTS = {
    "recommendations": [
        {
            "category": "Index funds",
            "riskLevel": "Medium",
            "timeHorizon": "5+ years",
            "reasoning": "Low cost and diversified.",
            "suggestions": ["VOO", "VTI"],
        }
    ]
}


def scripted_llm(monkeypatch, *responses):
    """Replace generate_json with a sequence of payloads or exceptions."""
    queue = list(responses)
    prompts = []

    async def fake_generate_json(system_prompt, user_prompt, *, tool=None, stub_payload=None):
        prompts.append(user_prompt)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(services.llm_client, "generate_json", fake_generate_json)
    return prompts


async def test_complete_analysis_merges_both_calls(monkeypatch):
    scripted_llm(monkeypatch, HEALTH, INVESTMENTS)
    metrics = compute_metrics(3000, 2000, 5000)

    result = await services.run_analysis(metrics)

    assert isinstance(result, CompleteAnalysis)
    assert result.status == "complete"
    assert result.health_score == 72
    assert result.credit_score == 690
    assert result.debt_to_income_ratio == 13.9
    assert result.credit_utilization == 83.3
    assert result.investment_recommendations[0].risk_level == "medium"


async def test_supplied_credit_score_wins_over_estimate(monkeypatch):
    scripted_llm(monkeypatch, HEALTH, INVESTMENTS)

    result = await services.run_analysis(compute_metrics(3000, 2000, 5000, 745))

    assert result.credit_score == 745
    assert result.credit_utilization == 100.0


async def test_investment_failure_yields_partial(monkeypatch):
    scripted_llm(monkeypatch, HEALTH, LLMRateLimitError("busy"))

    result = await services.run_analysis(compute_metrics(3000, 2000, 5000))

    assert isinstance(result, PartialAnalysis)
    assert result.status == "partial_missing_investments"
    assert result.insights == HEALTH["insights"]


async def test_malformed_investments_yield_partial(monkeypatch):
    scripted_llm(monkeypatch, HEALTH, {"recommendations": [{"category": "?"}]})

    result = await services.run_analysis(compute_metrics(3000, 2000, 5000))

    assert isinstance(result, PartialAnalysis)


async def test_health_failure_is_fatal(monkeypatch):
    scripted_llm(monkeypatch, LLMError("down"))

    with pytest.raises(LLMError):
        await services.run_analysis(compute_metrics(3000, 2000, 5000))


async def test_missing_credit_estimate_is_fatal(monkeypatch):
    health = {key: value for key, value in HEALTH.items() if key != "estimatedCreditScore"}
    scripted_llm(monkeypatch, health)

    with pytest.raises(LLMResponseError):
        await services.run_analysis(compute_metrics(3000, 2000, 5000))


async def test_health_score_is_clamped(monkeypatch):
    scripted_llm(monkeypatch, {**HEALTH, "healthScore": 140}, INVESTMENTS)

    result = await services.run_analysis(compute_metrics(3000, 2000, 5000))

    assert result.health_score == 100


async def test_no_disposable_income_asks_for_emergency_fund(monkeypatch):
    prompts = scripted_llm(monkeypatch, HEALTH, INVESTMENTS)

    await services.run_analysis(compute_metrics(2000, 2500, 1000))

    assert "emergency fund" in prompts[1]


def test_analysis_fields_clamp_stored_utilization():
    metrics = compute_metrics(1000, 500, 4000)
    result = PartialAnalysis(
        health_score=40,
        credit_score=600,
        debt_to_income_ratio=metrics.debt_to_income_ratio,
        credit_utilization=metrics.credit_utilization,
        insights=["a"],
        recommendations=["b"],
    )

    fields = services.to_analysis_fields(metrics, result)

    assert fields["credit_utilization"] == 100.0
    assert fields["recommendations"] == {"insights": ["a"], "actions": ["b"]}
    assert "investments" not in fields["recommendations"]


async def test_analyze_finances_saves_one_row_per_month(monkeypatch, db_session, user):
    scripted_llm(monkeypatch, HEALTH, INVESTMENTS, {**HEALTH, "healthScore": 55}, LLMError("down"))

    first = await services.analyze_finances(
        db_session, compute_metrics(3000, 2000, 5000), user_id=user.id, month=3, year=2025
    )
    second = await services.analyze_finances(
        db_session, compute_metrics(3200, 2100, 4000), user_id=user.id, month=3, year=2025
    )

    assert first.saved is True
    assert second.saved is True
    assert isinstance(second, PartialAnalysis)

    count = await db_session.scalar(select(func.count()).select_from(FinancialAnalysis))
    assert count == 1

    row = await db_session.scalar(select(FinancialAnalysis).execution_options(populate_existing=True))
    assert row.monthly_income == 3200
    assert row.financial_score == 55
    assert row.monthly_available == 1100
    assert "investments" not in row.recommendations


async def test_anonymous_analysis_is_not_saved(monkeypatch, db_session):
    scripted_llm(monkeypatch, HEALTH, INVESTMENTS)

    result = await services.analyze_finances(
        db_session, compute_metrics(3000, 2000, 5000), user_id=None, month=1, year=2025
    )

    assert result.saved is None
    count = await db_session.scalar(select(func.count()).select_from(FinancialAnalysis))
    assert count == 0


async def test_save_failure_still_returns_result(monkeypatch, db_session, user):
    scripted_llm(monkeypatch, HEALTH, INVESTMENTS)

    async def broken_upsert(*args, **kwargs):
        raise ValueError("boom")

    monkeypatch.setattr(services.repository, "upsert_analysis", broken_upsert)

    result = await services.analyze_finances(
        db_session, compute_metrics(3000, 2000, 5000), user_id=user.id, month=1, year=2025
    )

    assert isinstance(result, CompleteAnalysis)
    assert result.saved is False


async def test_history_excludes_target_month_and_feeds_prompt(monkeypatch, db_session, user):
    base = {
        "monthly_income": 3000,
        "monthly_expenses": 2000,
        "debt_amount": 1000,
        "credit_score": 700,
        "financial_score": 60,
    }
    for month in (1, 2, 3):
        await upsert_analysis(db_session, user_id=user.id, month=month, year=2025, fields=base)

    history = await list_recent_analyses(db_session, user_id=user.id, exclude=(3, 2025))
    assert [(row.year, row.month) for row in history] == [(2025, 2), (2025, 1)]

    prompts = scripted_llm(monkeypatch, HEALTH, INVESTMENTS)
    await services.analyze_finances(
        db_session, compute_metrics(3000, 2000, 1000), user_id=user.id, month=3, year=2025
    )

    assert "2025-02" in prompts[0]
    assert "2025-03" not in prompts[0]


async def test_upsert_rejects_unknown_fields(db_session, user):
    with pytest.raises(ValueError):
        await upsert_analysis(
            db_session,
            user_id=user.id,
            month=1,
            year=2025,
            fields={"monthly_income": 1, "monthly_available": 5},
        )
