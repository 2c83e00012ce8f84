# storefront/api/orders.py
# Оформление заказа, продолжение прерванного оформления и история заказов.
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.security import get_db, get_principal
from storefront.schemas.order import CheckoutIn, CheckoutOut, OrderOut
from storefront.services import checkout as checkout_service
from storefront.services import order_status
from storefront.services.authz import Principal

router = APIRouter()

@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(payload: CheckoutIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    result = checkout_service.checkout(db, principal, payload.shipping_address)
    return CheckoutOut(order_id=result.order_id, total_amount=result.total.to_display())

@router.post("/{order_id}/resume", response_model=CheckoutOut)
def resume_checkout(order_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    result = checkout_service.resume(db, principal, order_id)
    return CheckoutOut(order_id=result.order_id, total_amount=result.total.to_display())

@router.get("", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return order_status.list_orders(db, principal)

@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return order_status.get_order(db, principal, order_id)
