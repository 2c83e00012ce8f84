# storefront/schemas/cart.py
# Схемы корзины: позиции с текущей ценой товара и «живая» сумма.
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from storefront.schemas.product import ProductOut


class CartItemAdd(BaseModel):
    product_id: int


class CartItemUpdate(BaseModel):
    quantity: int


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    product: ProductOut
    line_total: Decimal


class CartOut(BaseModel):
    items: List[CartItemOut]
    item_count: int
    total: Decimal
