from datetime import datetime
from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from finscope.core.database import Base


class Receipt(Base):
    """Uploaded receipt image and the amount read from it."""

    __tablename__ = "receipts"
    __table_args__ = (
        Index("ix_receipts_user_period", "user_id", "year", "month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    file_path = Column(String, nullable=False, unique=True)
    file_name = Column(String, nullable=False)
    # null until extraction succeeds
    amount = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    upload_date = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", backref="receipts")
