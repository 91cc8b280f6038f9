"""Settlement invoice history."""

from typing import List, Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.schemas.settlement import SettlementInvoiceRead
from backend.app.services.settlement import list_settlement_invoices

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.get("/", response_model=List[SettlementInvoiceRead])
async def list_settlements(
    status: Literal["paid", "bad_debt"] | None = None,
    student_id: int | None = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return list_settlement_invoices(db, student_id=student_id, status=status, skip=skip, limit=limit)
