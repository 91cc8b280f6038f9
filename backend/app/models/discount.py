"""Discount catalog entries applied to contract items."""

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String(10), nullable=False)  # percent | fixed
    value = Column(Numeric(14, 2), nullable=False)
    status = Column(String(10), nullable=False, default="active")  # active | paused
    created_at = Column(DateTime, nullable=False, default=utc_now)
