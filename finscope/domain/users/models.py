from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from finscope.core.database import Base


class User(Base):
    """Account owner; every analysis, receipt, portfolio and trade is scoped to one."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
