"""Pydantic schemas for side-by-side investment comparison."""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import Field, field_validator

from finscope.domain.analysis.schemas import CamelModel


class ComparisonRequest(CamelModel):
    investment1: Optional[str] = None
    investment2: Optional[str] = None
    investment3: Optional[str] = None
    monthly_investment: Union[str, float]

    def options(self) -> list[str]:
        return [
            option.strip()
            for option in (self.investment1, self.investment2, self.investment3)
            if option and option.strip()
        ]


class ComparedInvestment(CamelModel):
    name: str
    risk: str
    expected_return: str
    recommendation: str
    suitability: float

    @field_validator("expected_return", mode="before")
    @classmethod
    def stringify_return(cls, value):
        return value if isinstance(value, str) else str(value)

    @field_validator("suitability")
    @classmethod
    def clamp_suitability(cls, value: float) -> float:
        return max(0.0, min(100.0, value))


class InvestmentComparison(CamelModel):
    investments: List[ComparedInvestment] = Field(default_factory=list)
    best_choice: str
    reasoning: str
