"""Dashboard lists for the front desk."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.core.time import utc_today
from backend.app.db.session import get_db
from backend.app.services.dashboard_service import get_bad_debt_students, get_debt_students, get_expiring_soon

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/expiring-soon")
async def expiring_soon(
    as_of: date | None = None,
    threshold: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    return get_expiring_soon(db, today=as_of or utc_today(), threshold=threshold)


@router.get("/debt")
async def debt_students(as_of: date | None = None, db: Session = Depends(get_db)):
    return get_debt_students(db, today=as_of or utc_today())


@router.get("/bad-debt")
async def bad_debt_students(as_of: date | None = None, db: Session = Depends(get_db)):
    return get_bad_debt_students(db, today=as_of or utc_today())
