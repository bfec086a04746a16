"""Pydantic schemas for the financial analysis workflow."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisRequest(CamelModel):
    """Raw form input; amounts may arrive as text and are parsed by the route."""

    income: Union[str, float]
    expenses: Union[str, float]
    debt: Union[str, float]
    credit_score: Optional[Union[str, float]] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class HealthAnalysis(CamelModel):
    """Answer of the health-analysis prompt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    health_score: float
    estimated_credit_score: Optional[float] = None
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("health_score")
    @classmethod
    def clamp_score(cls, value: float) -> float:
        return max(0.0, min(100.0, value))

    @field_validator("insights", "recommendations", mode="before")
    @classmethod
    def stringify_items(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value]
        return value


class InvestmentSuggestion(CamelModel):
    """A concrete pick inside a recommendation category."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    ticker: Optional[str] = None
    allocation: Optional[str] = None
    description: Optional[str] = None


class InvestmentRecommendation(CamelModel):
    category: str
    risk_level: Literal["low", "medium", "high"]
    time_horizon: str
    reasoning: str
    suggestions: List[Union[str, InvestmentSuggestion]] = Field(default_factory=list)

    @field_validator("risk_level", mode="before")
    @classmethod
    def normalize_risk(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class InvestmentPlan(CamelModel):
    """Answer of the investment-recommendation prompt."""

    recommendations: List[InvestmentRecommendation]


class AnalysisResultBase(CamelModel):
    health_score: float
    credit_score: int
    debt_to_income_ratio: float
    credit_utilization: float
    insights: List[str]
    recommendations: List[str]
    # None for anonymous callers, False when persisting failed.
    saved: Optional[bool] = None


class CompleteAnalysis(AnalysisResultBase):
    status: Literal["complete"] = "complete"
    investment_recommendations: List[InvestmentRecommendation]


class PartialAnalysis(AnalysisResultBase):
    """Health analysis succeeded but investment recommendations could not be produced."""

    status: Literal["partial_missing_investments"] = "partial_missing_investments"


AnalysisOutcome = Annotated[Union[CompleteAnalysis, PartialAnalysis], Field(discriminator="status")]


class FinancialAnalysisOut(BaseModel):
    """Stored monthly analysis, as returned to history/trend views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    month: int
    year: int
    monthly_income: float
    monthly_expenses: float
    debt_amount: float
    credit_score: int
    financial_score: int
    credit_utilization: Optional[float]
    debt_to_income_ratio: Optional[float]
    monthly_available: Optional[float]
    recommendations: Optional[dict[str, Any]]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
