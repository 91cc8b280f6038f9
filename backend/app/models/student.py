"""Student model holding the enrollment counters and bad-debt flag."""

import enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class StudentStatus(str, enum.Enum):
    STUDYING = "studying"
    TRIAL = "trial"
    RESERVED = "reserved"
    WITHDRAWN = "withdrawn"
    DEBT = "debt"


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=True, unique=True)
    full_name = Column(String, nullable=False)
    parent_name = Column(String, nullable=True)
    phone = Column(String(30), nullable=True)
    status = Column(String(20), nullable=False, default=StudentStatus.STUDYING.value)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=True, index=True)
    start_date = Column(Date, nullable=True)

    registered_sessions = Column(Integer, nullable=False, default=0)
    attended_sessions = Column(Integer, nullable=False, default=0)

    bad_debt = Column(Boolean, nullable=False, default=False)
    bad_debt_sessions = Column(Integer, nullable=True)
    bad_debt_amount = Column(Numeric(14, 2), nullable=True)
    bad_debt_date = Column(DateTime(timezone=True), nullable=True)
    bad_debt_note = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    class_group = relationship("ClassGroup", back_populates="students")
    contracts = relationship("Contract", back_populates="student", cascade="all, delete-orphan")
    settlement_invoices = relationship(
        "SettlementInvoice",
        back_populates="student",
        order_by="SettlementInvoice.created_at.desc()",
    )
