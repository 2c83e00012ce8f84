# storefront/services/cart.py
# Корзина пользователя: добавление (upsert), изменение количества, удаление, снимок.
# Сумма корзины не замораживается: она пересчитывается по текущим ценам каталога.

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.errors import BackendUnavailable, ForbiddenError, NotFoundError, ValidationError
from storefront.db.transaction import atomic
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.services.authz import Capability, Principal, require
from storefront.services.money import LiveTotal

logger = logging.getLogger(__name__)

CartLine = Tuple[CartItem, Product]

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _find_item(db: Session, user_id: int, product_id: int) -> Optional[CartItem]:
    stmt = (
        select(CartItem)
        .where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        .execution_options(populate_existing=True)
    )
    return db.scalars(stmt).first()


def _increment(db: Session, user_id: int, product_id: int) -> None:
    """INSERT ... ON CONFLICT (user_id, product_id) DO UPDATE quantity = quantity + 1."""
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        stmt = insert(CartItem).values(
            user_id=user_id, product_id=product_id, quantity=1, added_at=datetime.utcnow()
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "product_id"],
            set_={"quantity": CartItem.__table__.c.quantity + 1},
        )
        db.execute(stmt)
        return

    # Диалект без ON CONFLICT: вставка под savepoint, при конфликте — инкремент
    try:
        with db.begin_nested():
            db.add(CartItem(user_id=user_id, product_id=product_id, quantity=1))
    except IntegrityError:
        item = _find_item(db, user_id, product_id)
        item.quantity = CartItem.quantity + 1


def add_or_increment(db: Session, principal: Optional[Principal], product_id: int) -> CartItem:
    """Первое добавление даёт quantity = 1, повторное увеличивает на 1 ту же строку."""
    principal = require(principal, Capability.SHOP)
    with atomic(db, "cart.add_or_increment"):
        product = db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        existing = _find_item(db, principal.user_id, product_id)
        in_cart = existing.quantity if existing else 0
        if product.stock <= in_cart:
            raise ValidationError("quantity", "Not enough stock" if in_cart else "Product is out of stock")
        _increment(db, principal.user_id, product_id)
    item = _find_item(db, principal.user_id, product_id)
    logger.info(f"User {principal.user_id} cart: product {product_id} quantity={item.quantity}")
    return item


def _owned_item(db: Session, principal: Principal, item_id: int) -> Optional[CartItem]:
    item = db.get(CartItem, item_id, populate_existing=True)
    if item is not None and item.user_id != principal.user_id:
        raise ForbiddenError("Cart item belongs to another user")
    return item


def set_quantity(db: Session, principal: Optional[Principal], item_id: int, quantity: int) -> Optional[CartItem]:
    """
    quantity < 0 — ошибка, 0 — удаление, > 0 — обновление.
    Повторный вызов с тем же количеством даёт то же состояние.
    Возвращает обновлённую позицию или None, если она удалена.
    """
    principal = require(principal, Capability.SHOP)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("quantity", "Quantity must be a non-negative integer")
    if quantity == 0:
        remove(db, principal, item_id)
        return None

    with atomic(db, "cart.set_quantity"):
        item = _owned_item(db, principal, item_id)
        if item is None:
            raise NotFoundError("Cart item", item_id)
        product = db.get(Product, item.product_id)
        if product is None:
            raise NotFoundError("Product", item.product_id)
        if quantity > product.stock:
            raise ValidationError("quantity", f"Only {product.stock} left in stock")
        item.quantity = quantity
    return item


def remove(db: Session, principal: Optional[Principal], item_id: int) -> None:
    """Удаление без условий: отсутствующая позиция считается уже удалённой."""
    principal = require(principal, Capability.SHOP)
    with atomic(db, "cart.remove"):
        item = _owned_item(db, principal, item_id)
        if item is None:
            return
        db.delete(item)
    logger.info(f"User {principal.user_id} cart: item {item_id} removed")


def snapshot(db: Session, principal: Optional[Principal]) -> List[CartLine]:
    """Позиции корзины вместе с текущими товарами. Только чтение."""
    principal = require(principal, Capability.SHOP)
    stmt = (
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == principal.user_id)
        .order_by(CartItem.added_at, CartItem.id)
        .execution_options(populate_existing=True)
    )
    try:
        return [(item, product) for item, product in db.execute(stmt)]
    except SQLAlchemyError as e:
        logger.error(f"Failed to read cart of user {principal.user_id}: {e}")
        raise BackendUnavailable() from e


def clear(db: Session, principal: Optional[Principal]) -> int:
    principal = require(principal, Capability.SHOP)
    with atomic(db, "cart.clear"):
        result = db.execute(delete(CartItem).where(CartItem.user_id == principal.user_id))
    return result.rowcount


def total(lines: List[CartLine]) -> LiveTotal:
    return LiveTotal.of((product.price, item.quantity) for item, product in lines)
