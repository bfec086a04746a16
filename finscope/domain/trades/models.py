from datetime import datetime
from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from finscope.core.database import Base


class Trade(Base):
    """Journal entry for a buy or sell; P&L is fixed when the trade is saved."""

    __tablename__ = "trades"
    __table_args__ = (
        Index("ix_trades_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    portfolio_id = Column(
        Integer,
        ForeignKey("user_portfolios.id", ondelete="SET NULL"),
        nullable=True,
    )
    symbol = Column(String, nullable=False)
    asset_name = Column(String, nullable=True)
    trade_type = Column(String, nullable=False)  # buy, sell
    quantity = Column(Float, nullable=False)
    entry_price = Column(Float, nullable=False)
    exit_price = Column(Float, nullable=True)
    entry_date = Column(DateTime, default=datetime.utcnow)
    exit_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="open")  # open, closed
    pnl = Column(Float, nullable=True)
    pnl_percent = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    portfolio = relationship("UserPortfolio", back_populates="trades")
