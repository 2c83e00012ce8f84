# storefront/api/admin.py
# Админка: товары и статусы заказов. Роль проверяет сервисный слой.
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.core.security import get_db, get_principal
from storefront.schemas.order import AdminOrderOut, OrderOut, OrderStatusUpdate
from storefront.schemas.product import ProductIn, ProductOut
from storefront.services import admin as admin_service
from storefront.services.authz import Principal

router = APIRouter()

@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return admin_service.create_product(db, principal, payload.model_dump())

@router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn,
                   db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return admin_service.update_product(db, principal, product_id, payload.model_dump(exclude_unset=True))

@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    admin_service.delete_product(db, principal, product_id)
    return Response(status_code=204)

@router.get("/orders", response_model=List[AdminOrderOut])
def list_orders(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return [
        AdminOrderOut(
            **OrderOut.model_validate(order).model_dump(),
            customer_email=order.user.email if order.user else None,
            customer_name=order.user.full_name if order.user else None,
        )
        for order in admin_service.list_all_orders(db, principal)
    ]

@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, payload: OrderStatusUpdate,
                        db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return admin_service.update_order_status(db, principal, order_id, payload.status)
