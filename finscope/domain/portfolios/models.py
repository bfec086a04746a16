from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from finscope.core.database import Base


class UserPortfolio(Base):
    """Risk preference for one of the user's investment horizons."""

    __tablename__ = "user_portfolios"
    __table_args__ = (
        UniqueConstraint("user_id", "investment_goal", name="uq_user_portfolios_user_goal"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    investment_goal = Column(String, nullable=False)  # short-term, long-term
    risk_appetite = Column(String, nullable=False)  # low, medium, high
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", backref="portfolios")
    trades = relationship("Trade", back_populates="portfolio")
