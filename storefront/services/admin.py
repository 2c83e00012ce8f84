# storefront/services/admin.py
# Привилегированные операции: каталог и статусы заказов.
# Каждая операция сначала проверяет роль; при отказе ничего не меняется.

import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from storefront.core.errors import NotFoundError, ValidationError
from storefront.db.transaction import atomic
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderStatus
from storefront.models.product import Product
from storefront.services import order_status
from storefront.services.authz import Capability, Principal, require
from storefront.services.catalog import PRODUCT_FIELDS, validate_product

logger = logging.getLogger(__name__)


def create_product(db: Session, principal: Optional[Principal], data: dict) -> Product:
    principal = require(principal, Capability.ADMIN)
    values = validate_product(data)
    product = Product(**values)
    with atomic(db, "admin.create_product"):
        db.add(product)
    logger.info(f"Admin {principal.user_id} created product {product.id} ({product.name})")
    return product


def update_product(db: Session, principal: Optional[Principal], product_id: int, data: dict) -> Product:
    """Частичное обновление: переданные поля накладываются на текущие и проверяются целиком."""
    principal = require(principal, Capability.ADMIN)
    with atomic(db, "admin.update_product"):
        product = db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        merged = {field: getattr(product, field) for field in PRODUCT_FIELDS}
        merged.update({k: v for k, v in data.items() if k in PRODUCT_FIELDS})
        for field, value in validate_product(merged).items():
            setattr(product, field, value)
    logger.info(f"Admin {principal.user_id} updated product {product_id}")
    return product


def delete_product(db: Session, principal: Optional[Principal], product_id: int) -> None:
    """
    Удаление без проверки ссылок: позиции заказов хранят свою цену и количество,
    а имя товара у них просто перестаёт находиться. Из корзин товар уходит вместе с ним.
    """
    principal = require(principal, Capability.ADMIN)
    with atomic(db, "admin.delete_product"):
        product = db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        db.delete(product)
    logger.info(f"Admin {principal.user_id} deleted product {product_id}")


def update_order_status(db: Session, principal: Optional[Principal], order_id: int, status) -> Order:
    principal = require(principal, Capability.ADMIN)
    try:
        target = OrderStatus(status)
    except ValueError:
        raise ValidationError("status", f"Unknown order status: {status}")
    with atomic(db, "admin.update_order_status"):
        order = db.get(Order, order_id, populate_existing=True)
        if order is None:
            raise NotFoundError("Order", order_id)
        current = order.status
        order_status.check_transition(current, target)
        order.status = target
    if current != target:
        logger.info(f"Admin {principal.user_id} moved order {order_id}: {current.value} -> {target.value}")
    return order


def list_all_orders(db: Session, principal: Optional[Principal]) -> List[Order]:
    require(principal, Capability.ADMIN)
    return order_status.list_all_orders(db)
