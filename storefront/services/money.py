# storefront/services/money.py
# Денежные значения корзины и заказа.
#
# LiveTotal пересчитывается из текущих цен каталога и «плавает» вместе с ними.
# FrozenTotal строится только из снимка оформления заказа и больше не пересчитывается.
# Это разные типы, чтобы один нельзя было подставить вместо другого.

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from storefront.core.config import settings

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Приводит цену к Decimal без прохода через float-арифметику."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr float даёт кратчайшее представление: 5.5 -> "5.5"
        return Decimal(repr(value))
    return Decimal(str(value))


def quantize(amount: Decimal) -> Decimal:
    exp = Decimal(1).scaleb(-settings.CURRENCY_PLACES)
    return amount.quantize(exp, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SnapshotLine:
    """Строка снимка корзины: цена заморожена на момент оформления."""

    product_id: int
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_json(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity, "price": str(self.price)}

    @classmethod
    def from_json(cls, data: dict) -> "SnapshotLine":
        return cls(
            product_id=int(data["product_id"]),
            quantity=int(data["quantity"]),
            price=to_decimal(data["price"]),
        )


@dataclass(frozen=True)
class LiveTotal:
    amount: Decimal

    @classmethod
    def of(cls, lines: Iterable[Tuple[Decimal, int]]) -> "LiveTotal":
        """lines — пары (текущая цена товара, количество)."""
        return cls(sum((to_decimal(price) * qty for price, qty in lines), ZERO))

    def to_display(self) -> Decimal:
        return quantize(self.amount)


@dataclass(frozen=True)
class FrozenTotal:
    amount: Decimal

    @classmethod
    def of(cls, snapshot: Iterable[SnapshotLine]) -> "FrozenTotal":
        return cls(sum((line.subtotal for line in snapshot), ZERO))

    def to_display(self) -> Decimal:
        return quantize(self.amount)
