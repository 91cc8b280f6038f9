"""Discount catalog and pricing preview."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.discount import Discount
from backend.app.schemas.discount import DiscountCreate, DiscountRead, LineItemPricingRead, PricingPreviewRequest
from backend.app.services.discounts import DiscountType, price_with_catalog

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.post("/", response_model=DiscountRead, status_code=status.HTTP_201_CREATED)
async def create_discount(discount_in: DiscountCreate, db: Session = Depends(get_db)):
    discount = Discount(**discount_in.model_dump())
    db.add(discount)
    db.commit()
    db.refresh(discount)
    return discount


@router.get("/", response_model=list[DiscountRead])
async def list_discounts(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(Discount)
    if active_only:
        query = query.filter(Discount.status == "active")
    return query.order_by(Discount.id.asc()).all()


@router.post("/preview", response_model=LineItemPricingRead)
async def preview_pricing(payload: PricingPreviewRequest, db: Session = Depends(get_db)):
    ids = [int(d) for d in payload.discount_ids if d.isdigit()]
    catalog = {str(d.id): d for d in db.query(Discount).filter(Discount.id.in_(ids)).all()} if ids else {}
    custom = None
    if payload.custom_discount is not None:
        custom = (payload.custom_discount.value, DiscountType(payload.custom_discount.type))
    pricing = price_with_catalog(payload.subtotal, payload.discount_ids, catalog, custom)
    return {
        "subtotal": pricing.subtotal,
        "applied_discounts": [ad.to_dict() for ad in pricing.applied_discounts],
        "total_discount": pricing.total_discount,
        "discount_ratio": pricing.discount_ratio,
        "final_price": pricing.final_price,
    }
