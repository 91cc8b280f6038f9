"""Class endpoints; schedules feed the end-date projection."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.class_group import ClassGroup
from backend.app.schemas.class_group import ClassGroupCreate, ClassGroupRead
from backend.app.services.schedule import class_schedule_for

router = APIRouter(prefix="/classes", tags=["classes"])


def _to_read(class_group: ClassGroup) -> ClassGroupRead:
    data = ClassGroupRead.model_validate(class_group)
    return data.model_copy(update={"schedule_days": sorted(class_schedule_for(class_group))})


@router.post("/", response_model=ClassGroupRead, status_code=status.HTTP_201_CREATED)
async def create_class(class_in: ClassGroupCreate, db: Session = Depends(get_db)):
    class_group = ClassGroup(**class_in.model_dump())
    db.add(class_group)
    db.commit()
    db.refresh(class_group)
    return _to_read(class_group)


@router.get("/{class_id}", response_model=ClassGroupRead)
async def get_class(class_id: int, db: Session = Depends(get_db)):
    class_group = db.get(ClassGroup, class_id)
    if not class_group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return _to_read(class_group)
