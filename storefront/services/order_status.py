# storefront/services/order_status.py
# Жизненный цикл заказа и чтение заказов.
#
#   pending -> processing -> shipped -> delivered
#   cancelled — из любого нетерминального статуса
# delivered и cancelled терминальные: их больше не меняем.

import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from storefront.core.config import settings
from storefront.core.errors import BackendUnavailable, InvalidTransitionError, NotFoundError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.services.authz import Capability, Principal, require, require_owner

logger = logging.getLogger(__name__)

TERMINAL: FrozenSet[OrderStatus] = frozenset({OrderStatus.delivered, OrderStatus.cancelled})

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.processing, OrderStatus.cancelled}),
    OrderStatus.processing: frozenset({OrderStatus.shipped, OrderStatus.cancelled}),
    OrderStatus.shipped: frozenset({OrderStatus.delivered, OrderStatus.cancelled}),
    OrderStatus.delivered: frozenset(),
    OrderStatus.cancelled: frozenset(),
}


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL


def can_transition(current: OrderStatus, target: OrderStatus, strict: Optional[bool] = None) -> bool:
    """
    strict=False (STRICT_STATUS_TRANSITIONS=false) разрешает персоналу
    исправлять статус как угодно, пока заказ не в терминальном статусе.
    """
    current, target = OrderStatus(current), OrderStatus(target)
    if strict is None:
        strict = settings.STRICT_STATUS_TRANSITIONS
    if current in TERMINAL:
        return False
    if current == target:
        return True
    if not strict:
        return True
    return target in TRANSITIONS[current]


def check_transition(current: OrderStatus, target: OrderStatus, strict: Optional[bool] = None) -> None:
    if not can_transition(current, target, strict):
        raise InvalidTransitionError(OrderStatus(current).value, OrderStatus(target).value)


def _orders_query():
    return (
        select(Order)
        .options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.user),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
    )


def list_orders(db: Session, principal: Optional[Principal]) -> List[Order]:
    """Заказы текущего пользователя, новые первыми."""
    principal = require(principal, Capability.SHOP)
    try:
        return list(db.scalars(_orders_query().where(Order.user_id == principal.user_id)))
    except SQLAlchemyError as e:
        logger.error(f"Failed to list orders of user {principal.user_id}: {e}")
        raise BackendUnavailable() from e


def list_all_orders(db: Session) -> List[Order]:
    """Без проверки прав: вызывается только из admin-сервиса."""
    try:
        return list(db.scalars(_orders_query()))
    except SQLAlchemyError as e:
        logger.error(f"Failed to list orders: {e}")
        raise BackendUnavailable() from e


def get_order(db: Session, principal: Optional[Principal], order_id: int) -> Order:
    principal = require(principal, Capability.SHOP)
    try:
        order = db.scalars(_orders_query().where(Order.id == order_id)).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load order {order_id}: {e}")
        raise BackendUnavailable() from e
    if order is None:
        raise NotFoundError("Order", order_id)
    require_owner(principal, order.user_id)
    return order
