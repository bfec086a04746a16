import pytest
from sqlalchemy import select
from starlette.datastructures import UploadFile

from finscope.core.config import settings
from finscope.core.cookies import SESSION_COOKIE_NAME
from finscope.domain.analysis.models import FinancialAnalysis
from finscope.domain.analysis.repository import upsert_analysis
from finscope.domain.receipts import extraction
from finscope.services import llm_client
from finscope.services.llm_client import LLMPaymentRequiredError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


async def test_health(anonymous_client):
    response = await anonymous_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


async def test_anonymous_analysis_is_camel_case_and_unsaved(anonymous_client):
    response = await anonymous_client.post(
        "/api/analyze",
        json={"income": "£3,000", "expenses": 2000, "debt": "5000"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "complete"
    assert body["debtToIncomeRatio"] == 13.9
    assert body["creditUtilization"] == 83.3
    assert body["creditScore"] == 650
    assert body["investmentRecommendations"]
    assert "saved" not in body


async def test_signed_in_analysis_is_saved(client, db_session, user):
    response = await client.post(
        "/api/analyze",
        json={"income": 3000, "expenses": 2000, "debt": 5000, "creditScore": "720", "month": 4, "year": 2025},
    )

    assert response.status_code == 200
    assert response.json()["saved"] is True

    row = await db_session.scalar(select(FinancialAnalysis).where(FinancialAnalysis.user_id == user.id))
    assert (row.month, row.year, row.credit_score) == (4, 2025, 720)

    listed = await client.get("/api/analyses")
    assert [item["month"] for item in listed.json()] == [4]

    single = await client.get("/api/analyses/2025/4")
    assert single.json()["monthly_available"] == 1000

    missing = await client.get("/api/analyses/2025/5")
    assert missing.status_code == 404


async def test_analysis_rejects_bad_amounts(anonymous_client):
    zero_income = await anonymous_client.post(
        "/api/analyze", json={"income": 0, "expenses": 10, "debt": 0}
    )
    garbage = await anonymous_client.post(
        "/api/analyze", json={"income": "lots", "expenses": 10, "debt": 0}
    )

    assert zero_income.status_code == 400
    assert garbage.status_code == 400


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
async def test_analysis_rejects_non_finite_numbers(anonymous_client, token):
    response = await anonymous_client.post(
        "/api/analyze",
        content=f'{{"income": {token}, "expenses": 100, "debt": 50}}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


async def test_analysis_maps_gateway_errors(anonymous_client, monkeypatch):
    async def out_of_credits(*args, **kwargs):
        raise LLMPaymentRequiredError("402")

    monkeypatch.setattr(llm_client, "generate_json", out_of_credits)

    response = await anonymous_client.post(
        "/api/analyze", json={"income": 3000, "expenses": 2000, "debt": 0}
    )

    assert response.status_code == 402
    assert response.json()["detail"] == LLMPaymentRequiredError.user_message


async def test_ai_endpoints_are_rate_limited(anonymous_client, monkeypatch):
    monkeypatch.setattr(settings, "AI_RATE_LIMIT_MAX", 2)
    payload = {"income": 3000, "expenses": 2000, "debt": 0}

    codes = [
        (await anonymous_client.post("/api/analyze", json=payload)).status_code for _ in range(3)
    ]

    assert codes == [200, 200, 429]


async def test_history_requires_session(anonymous_client):
    response = await anonymous_client.get("/api/analyses")

    assert response.status_code == 401


async def test_tampered_cookie_is_rejected(anonymous_client):
    anonymous_client.cookies.set(SESSION_COOKIE_NAME, "forged")

    response = await anonymous_client.post(
        "/api/analyze", json={"income": 3000, "expenses": 2000, "debt": 0}
    )

    assert response.status_code == 401


async def test_receipt_upload_recomputes_expenses(client, db_session, user, monkeypatch):
    await upsert_analysis(
        db_session,
        user_id=user.id,
        month=5,
        year=2025,
        fields={
            "monthly_income": 3000,
            "monthly_expenses": 2000,
            "debt_amount": 0,
            "credit_score": 700,
            "financial_score": 70,
        },
    )
    amounts = iter([{"amount": 20.5, "description": "Dinner"}, {"amount": 4.5, "description": "Tea"}])

    async def fake_extract(*args, **kwargs):
        return next(amounts)

    monkeypatch.setattr(extraction.llm_client, "extract_with_image", fake_extract)

    response = await client.post(
        "/api/receipts/",
        data={"month": "5", "year": "2025"},
        files=[
            ("files", ("dinner.png", PNG, "image/png")),
            ("files", ("notes.txt", b"hello", "text/plain")),
            ("files", ("tea.png", PNG, "image/png")),
        ],
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["state"] for item in body["files"]] == ["complete", "complete"]
    assert body["rejected"][0]["title"] == "Invalid File Type"
    assert body["progress"] == {"completed": 2, "total": 2}
    assert body["monthly_expenses"] == 25.0

    listed = await client.get("/api/receipts/", params={"month": 5, "year": 2025})
    receipts = listed.json()
    assert [item["amount"] for item in receipts] == [20.5, 4.5]

    deleted = await client.delete(f"/api/receipts/{receipts[0]['id']}")
    assert deleted.status_code == 204

    remaining = await client.get("/api/receipts/", params={"month": 5, "year": 2025})
    assert len(remaining.json()) == 1

    again = await client.delete(f"/api/receipts/{receipts[0]['id']}")
    assert again.status_code == 404


async def test_receipts_require_session(anonymous_client):
    response = await anonymous_client.get("/api/receipts/", params={"month": 5, "year": 2025})

    assert response.status_code == 401


async def test_portfolio_and_trade_flow(client):
    saved = await client.put("/api/portfolios/long-term", json={"risk_appetite": "high"})
    assert saved.status_code == 200
    portfolio = saved.json()
    assert portfolio["risk_appetite"] == "high"

    updated = await client.put("/api/portfolios/long-term", json={"risk_appetite": "low"})
    assert updated.json()["id"] == portfolio["id"]
    assert updated.json()["risk_appetite"] == "low"

    invalid = await client.put("/api/portfolios/long-term", json={"risk_appetite": "reckless"})
    assert invalid.status_code == 422

    trade = await client.post(
        "/api/trades/",
        json={
            "portfolio_id": portfolio["id"],
            "symbol": "vti",
            "trade_type": "buy",
            "quantity": 3,
            "entry_price": 200,
            "exit_price": 210,
            "status": "closed",
        },
    )
    assert trade.status_code == 201
    assert trade.json()["symbol"] == "VTI"
    assert trade.json()["pnl"] == 30

    foreign = await client.post(
        "/api/trades/",
        json={"portfolio_id": 9999, "symbol": "VTI", "trade_type": "buy", "quantity": 1, "entry_price": 1},
    )
    assert foreign.status_code == 404

    open_trades = await client.get("/api/trades/", params={"status": "open"})
    assert open_trades.json() == []

    removed = await client.delete(f"/api/trades/{trade.json()['id']}")
    assert removed.status_code == 204


async def test_portfolio_recommendations_need_a_portfolio(client):
    response = await client.get("/api/portfolios/short-term/recommendations")

    assert response.status_code == 404


async def test_compare_investments_stub(anonymous_client):
    response = await anonymous_client.post(
        "/api/investments/compare",
        json={"investment1": "Index fund", "investment2": " ", "investment3": "Gold", "monthlyInvestment": "£200"},
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body["investments"]] == ["Index fund", "Gold"]
    assert body["bestChoice"] == "Index fund"


async def test_compare_requires_an_option(anonymous_client):
    response = await anonymous_client.post(
        "/api/investments/compare", json={"monthlyInvestment": 100}
    )

    assert response.status_code == 400


async def test_support_chat_stub(anonymous_client):
    response = await anonymous_client.post(
        "/api/support/chat",
        json={"messages": [{"role": "user", "content": "Where are my trades?"}]},
    )

    assert response.status_code == 200
    assert response.json()["message"]


async def test_logout_clears_cookie(client):
    response = await client.post("/logout")

    assert response.status_code == 204
    assert SESSION_COOKIE_NAME in response.headers["set-cookie"]


async def test_oversized_receipt_is_read_only_up_to_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "RECEIPT_MAX_FILE_MB", 1)
    limit = settings.receipt_max_bytes
    requested_sizes = []
    real_read = UploadFile.read

    async def recording_read(self, size=-1):
        requested_sizes.append(size)
        return await real_read(self, size)

    monkeypatch.setattr(UploadFile, "read", recording_read)

    response = await client.post(
        "/api/receipts/",
        data={"month": "5", "year": "2025"},
        files=[("files", ("huge.png", b"0" * (limit + 4096), "image/png"))],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["files"] == []
    assert body["rejected"][0]["title"] == "File Too Large"
    assert requested_sizes == [limit + 1]
