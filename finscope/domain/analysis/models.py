from datetime import datetime
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from finscope.core.database import Base


class FinancialAnalysis(Base):
    """One scored snapshot of a user's finances per calendar month."""

    __tablename__ = "financial_analyses"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "month",
            "year",
            name="uq_financial_analyses_user_month_year",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)

    monthly_income = Column(Float, nullable=False)
    monthly_expenses = Column(Float, nullable=False)
    debt_amount = Column(Float, nullable=False)
    credit_score = Column(Integer, nullable=False)

    financial_score = Column(Integer, nullable=False)  # 0-100, AI-assigned
    credit_utilization = Column(Float, nullable=True)  # percent, 0-100
    debt_to_income_ratio = Column(Float, nullable=True)  # percent, unbounded
    monthly_available = Column(Float, nullable=True)  # income - expenses

    # {"insights": [...], "actions": [...], "investments": [...]?}
    recommendations = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", backref="financial_analyses")
