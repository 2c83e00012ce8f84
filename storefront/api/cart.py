# storefront/api/cart.py
# Корзина текущего пользователя.
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from storefront.core.security import get_db, get_principal
from storefront.schemas.cart import CartItemAdd, CartItemOut, CartItemUpdate, CartOut
from storefront.schemas.product import ProductOut
from storefront.services import cart as cart_service
from storefront.services.authz import Principal
from storefront.services.money import quantize, to_decimal

router = APIRouter()

def _cart_out(db: Session, principal: Principal) -> CartOut:
    lines = cart_service.snapshot(db, principal)
    items = [
        CartItemOut(
            id=item.id,
            product_id=product.id,
            quantity=item.quantity,
            product=ProductOut.model_validate(product),
            line_total=quantize(to_decimal(product.price) * item.quantity),
        )
        for item, product in lines
    ]
    return CartOut(
        items=items,
        item_count=len(items),
        total=cart_service.total(lines).to_display(),
    )

@router.get("", response_model=CartOut)
def get_cart(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return _cart_out(db, principal)

@router.post("/items", response_model=CartOut, status_code=201)
def add_item(payload: CartItemAdd, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    cart_service.add_or_increment(db, principal, payload.product_id)
    return _cart_out(db, principal)

@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(item_id: int, payload: CartItemUpdate,
                db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    cart_service.set_quantity(db, principal, item_id, payload.quantity)
    return _cart_out(db, principal)

@router.delete("/items/{item_id}", status_code=204)
def remove_item(item_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    cart_service.remove(db, principal, item_id)
    return Response(status_code=204)

@router.delete("", status_code=204)
def clear_cart(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    cart_service.clear(db, principal)
    return Response(status_code=204)
