# storefront/services/checkout.py
# Оформление заказа: корзина -> Order + OrderItem -> очистка корзины.
#
# Шаги выполняются в отдельных транзакциях, без общего commit:
#   1. снимок корзины (цены замораживаются)
#   2. FrozenTotal по снимку
#   3. INSERT orders — граница надёжности: после неё заказ считается оформленным
#   4. INSERT order_items, которых ещё нет у заказа
#   5. DELETE cart_items из снимка
# Стадия сохраняется в orders.checkout_stage, снимок — в orders.checkout_snapshot.
# Ошибка шага 3 — обычный отказ, корзина не тронута. Ошибка шагов 4–5 —
# CheckoutPartialFailure с id заказа; resume(order_id) доводит заказ до конца.

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.errors import (
    BackendUnavailable,
    CheckoutPartialFailure,
    EmptyCartError,
    NotFoundError,
    ValidationError,
)
from storefront.db.transaction import atomic
from storefront.models.cart import CartItem
from storefront.models.order import CheckoutStage, Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.services import cart as cart_service
from storefront.services.authz import Capability, Principal, require, require_owner
from storefront.services.money import FrozenTotal, SnapshotLine, quantize, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order_id: int
    total: FrozenTotal


def validate_address(address: Optional[str]) -> str:
    address = (address or "").strip()
    if len(address) < settings.MIN_ADDRESS_LENGTH:
        raise ValidationError(
            "shipping_address",
            f"Address must be at least {settings.MIN_ADDRESS_LENGTH} characters",
        )
    return address


class CheckoutSaga:
    """Сага оформления заказа с идемпотентным продолжением по id заказа."""

    def __init__(self, db: Session):
        self.db = db

    def checkout(self, principal: Optional[Principal], shipping_address: str) -> CheckoutResult:
        principal = require(principal, Capability.SHOP)
        address = validate_address(shipping_address)

        snapshot = self._take_snapshot(principal)
        if not snapshot:
            raise EmptyCartError()
        total = FrozenTotal.of(snapshot)

        order_id = self._create_order(principal, address, snapshot, total)
        self._finish(order_id, snapshot, CheckoutStage.order_created)
        logger.info(f"Order {order_id} placed by user {principal.user_id}, total={total.to_display()}")
        return CheckoutResult(order_id=order_id, total=total)

    def resume(self, principal: Optional[Principal], order_id: int) -> CheckoutResult:
        order = self.db.get(Order, order_id, populate_existing=True)
        if order is None:
            raise NotFoundError("Order", order_id)
        require_owner(principal, order.user_id)

        snapshot = [SnapshotLine.from_json(line) for line in order.checkout_snapshot]
        total = FrozenTotal(to_decimal(order.total_amount))
        stage = order.checkout_stage
        if stage == CheckoutStage.completed:
            return CheckoutResult(order_id=order.id, total=total)

        logger.info(f"Resuming checkout of order {order_id} from stage {stage.value}")
        self._finish(order.id, snapshot, stage)
        return CheckoutResult(order_id=order.id, total=total)

    # -- шаги ---------------------------------------------------------------

    def _take_snapshot(self, principal: Principal) -> List[SnapshotLine]:
        return [
            SnapshotLine(product_id=product.id, quantity=item.quantity, price=to_decimal(product.price))
            for item, product in cart_service.snapshot(self.db, principal)
        ]

    def _create_order(self, principal: Principal, address: str,
                      snapshot: List[SnapshotLine], total: FrozenTotal) -> int:
        order = Order(
            user_id=principal.user_id,
            total_amount=quantize(total.amount),
            shipping_address=address,
            status=OrderStatus.pending,
            checkout_stage=CheckoutStage.order_created,
            checkout_snapshot=[line.to_json() for line in snapshot],
        )
        try:
            with atomic(self.db, "checkout.create_order"):
                self.db.add(order)
        except BackendUnavailable:
            logger.error(f"Checkout of user {principal.user_id} failed before the order was created")
            raise
        logger.debug(f"Order {order.id} created with {len(snapshot)} snapshot lines")
        return order.id

    def _write_items(self, order_id: int, snapshot: List[SnapshotLine]) -> None:
        with atomic(self.db, "checkout.write_items"):
            written = set(self.db.scalars(
                select(OrderItem.product_id).where(OrderItem.order_id == order_id)
            ))
            orphans = self.db.scalar(
                select(func.count(OrderItem.id))
                .where(OrderItem.order_id == order_id, OrderItem.product_id.is_(None))
            )
            for line in snapshot:
                if line.product_id in written:
                    continue
                product_id = line.product_id
                if self.db.get(Product, product_id) is None:
                    # товар удалён после создания заказа; строка без ссылки уже могла быть записана
                    if orphans:
                        orphans -= 1
                        continue
                    product_id = None
                self.db.add(OrderItem(
                    order_id=order_id,
                    product_id=product_id,
                    quantity=line.quantity,
                    price=line.price,
                ))
            self.db.get(Order, order_id).checkout_stage = CheckoutStage.items_written

    def _clear_cart(self, order_id: int, snapshot: List[SnapshotLine]) -> None:
        with atomic(self.db, "checkout.clear_cart"):
            order = self.db.get(Order, order_id)
            product_ids = [line.product_id for line in snapshot]
            self.db.execute(
                delete(CartItem).where(
                    CartItem.user_id == order.user_id,
                    CartItem.product_id.in_(product_ids),
                )
            )
            order.checkout_stage = CheckoutStage.completed

    def _finish(self, order_id: int, snapshot: List[SnapshotLine], stage: CheckoutStage) -> None:
        try:
            if stage == CheckoutStage.order_created:
                self._write_items(order_id, snapshot)
                stage = CheckoutStage.items_written
            if stage == CheckoutStage.items_written:
                self._clear_cart(order_id, snapshot)
        except Exception as e:
            # заказ уже записан: любая ошибка дальше — частичный отказ с id заказа
            logger.error(f"Checkout of order {order_id} stopped at stage {stage.value}; resume required: {e}")
            raise CheckoutPartialFailure(order_id, stage.value) from e


def checkout(db: Session, principal: Optional[Principal], shipping_address: str) -> CheckoutResult:
    return CheckoutSaga(db).checkout(principal, shipping_address)


def resume(db: Session, principal: Optional[Principal], order_id: int) -> CheckoutResult:
    return CheckoutSaga(db).resume(principal, order_id)
