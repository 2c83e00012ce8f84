# storefront/schemas/order.py
# Схемы заказов и оформления.
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.models.order import CheckoutStage, OrderStatus


class CheckoutIn(BaseModel):
    shipping_address: str


class CheckoutOut(BaseModel):
    order_id: int
    total_amount: Decimal


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    total_amount: Decimal
    shipping_address: str
    status: OrderStatus
    checkout_stage: CheckoutStage
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]


class AdminOrderOut(OrderOut):
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str
