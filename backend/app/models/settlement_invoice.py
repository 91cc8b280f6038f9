"""Settlement invoice model; rows are append-only once written."""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, event
from sqlalchemy.orm import relationship

from backend.app.core.errors import ImmutableRecordError
from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class SettlementStatus(str, enum.Enum):
    PAID = "paid"
    BAD_DEBT = "bad_debt"


class SettlementInvoice(Base):
    __tablename__ = "settlement_invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_code = Column(String(40), nullable=False, unique=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    student_name = Column(String, nullable=False)
    class_name = Column(String, nullable=True)
    course_name = Column(String, nullable=True)

    total_sessions = Column(Integer, nullable=False)
    attended_sessions = Column(Integer, nullable=False)
    debt_sessions = Column(Integer, nullable=False)

    price_per_session = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), nullable=False)
    remaining_amount = Column(Numeric(14, 2), nullable=False)

    status = Column(String(20), nullable=False, index=True)
    payment_method = Column(String(20), nullable=True)
    collected_by_name = Column(String, nullable=True)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    student = relationship("Student", back_populates="settlement_invoices")


@event.listens_for(SettlementInvoice, "before_update")
def prevent_settlement_invoice_update(mapper, connection, target):
    raise ImmutableRecordError(f"Settlement invoice {target.invoice_code} cannot be modified")


@event.listens_for(SettlementInvoice, "before_delete")
def prevent_settlement_invoice_delete(mapper, connection, target):
    raise ImmutableRecordError(f"Settlement invoice {target.invoice_code} cannot be deleted")
