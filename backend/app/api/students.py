"""Student enrollment, ledger and settlement endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.time import utc_today
from backend.app.db.session import get_db
from backend.app.models.class_group import ClassGroup
from backend.app.models.student import Student
from backend.app.schemas.settlement import SettlementCreate, SettlementInvoiceRead
from backend.app.schemas.student import EnrollmentUpdate, LedgerRead, ReconcileRead, StudentCreate, StudentRead
from backend.app.services.bad_debt import EnrollmentSnapshot, on_student_updated, reconcile_student
from backend.app.services.ledger import ledger_summary
from backend.app.services.settlement import list_settlement_invoices, settle

router = APIRouter(prefix="/students", tags=["students"])


def _get_student(db: Session, student_id: int) -> Student:
    student = db.get(Student, student_id)
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


def _check_class(db: Session, class_id: int | None) -> None:
    if class_id is not None and db.get(ClassGroup, class_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")


@router.post("/", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def create_student(student_in: StudentCreate, db: Session = Depends(get_db)):
    _check_class(db, student_in.class_id)
    student = Student(**student_in.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    reconcile_student(db, student.id)
    db.refresh(student)
    return student


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(student_id: int, db: Session = Depends(get_db)):
    return _get_student(db, student_id)


@router.patch("/{student_id}/enrollment", response_model=StudentRead)
async def update_enrollment(student_id: int, payload: EnrollmentUpdate, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    changes = payload.model_dump(exclude_unset=True)
    if "class_id" in changes:
        _check_class(db, changes["class_id"])

    before = EnrollmentSnapshot.from_student(student)
    for key, value in changes.items():
        setattr(student, key, value)
    db.commit()

    on_student_updated(db, before, student.id)
    db.refresh(student)
    return student


@router.get("/{student_id}/ledger", response_model=LedgerRead)
async def get_ledger(student_id: int, as_of: date | None = None, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    return ledger_summary(student, today=as_of or utc_today())


@router.post("/{student_id}/reconcile", response_model=ReconcileRead)
async def reconcile(student_id: int, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    action = reconcile_student(db, student.id)
    db.refresh(student)
    return {"student_id": student.id, "action": action.value, "student": student}


@router.post("/{student_id}/settlement", response_model=SettlementInvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_settlement(student_id: int, payload: SettlementCreate, db: Session = Depends(get_db)):
    return settle(
        db,
        student_id,
        payload.decision,
        price_per_session=payload.price_per_session,
        note=payload.note,
        payment_method=payload.payment_method,
        collected_by_name=payload.collected_by_name,
        course_name=payload.course_name,
    )


@router.get("/{student_id}/settlements", response_model=list[SettlementInvoiceRead])
async def list_student_settlements(student_id: int, db: Session = Depends(get_db)):
    _get_student(db, student_id)
    return list_settlement_invoices(db, student_id=student_id)
