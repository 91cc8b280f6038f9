"""Contract endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.contract import Contract
from backend.app.schemas.contract import ContractCreate, ContractRead
from backend.app.services.contracts import ContractItemInput, create_contract

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.post("/", response_model=ContractRead, status_code=status.HTTP_201_CREATED)
async def create_contract_endpoint(payload: ContractCreate, db: Session = Depends(get_db)):
    items = [
        ContractItemInput(
            name=item.name,
            unit_price=item.unit_price,
            quantity=item.quantity,
            item_type=item.item_type,
            class_id=item.class_id,
            discount_ids=list(item.discount_ids),
            custom_discount_value=item.custom_discount.value if item.custom_discount else None,
            custom_discount_type=item.custom_discount.type if item.custom_discount else "percent",
        )
        for item in payload.items
    ]
    return create_contract(
        db,
        student_id=payload.student_id,
        items=items,
        category=payload.category,
        status=payload.status,
        paid_amount=payload.paid_amount,
    )


@router.get("/{contract_id}", response_model=ContractRead)
async def get_contract(contract_id: int, db: Session = Depends(get_db)):
    contract = db.get(Contract, contract_id)
    if not contract:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contract not found")
    return contract
