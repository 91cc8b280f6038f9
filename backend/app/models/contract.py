"""Contract and contract item models."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(40), nullable=False, unique=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    category = Column(String(20), nullable=False, default="new")  # new | renewal | linked
    status = Column(String(20), nullable=False, default="paid")  # paid | partial | unpaid

    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    total_discount = Column(Numeric(14, 2), nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(14, 2), nullable=False, default=0)
    remaining_amount = Column(Numeric(14, 2), nullable=False, default=0)

    total_sessions = Column(Integer, nullable=False, default=0)
    credited_sessions = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utc_now)

    student = relationship("Student", back_populates="contracts")
    items = relationship("ContractItem", back_populates="contract", cascade="all, delete-orphan")


class ContractItem(Base):
    __tablename__ = "contract_items"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    item_type = Column(String(10), nullable=False, default="course")  # course | product
    name = Column(String, nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=True)
    unit_price = Column(Numeric(14, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    subtotal = Column(Numeric(14, 2), nullable=False)
    applied_discounts = Column(JSON, nullable=False, default=list)
    discount_ratio = Column(Numeric(6, 4), nullable=False, default=0)
    final_price = Column(Numeric(14, 2), nullable=False)

    contract = relationship("Contract", back_populates="items")
