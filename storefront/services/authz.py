# storefront/services/authz.py
# Проверка прав до любой мутации.
# authorize() только принимает решение, require() превращает отказ в ForbiddenError.

import enum
from dataclasses import dataclass
from typing import Optional

from storefront.core.errors import ForbiddenError


class Capability(str, enum.Enum):
    SHOP = "shop"      # любой вошедший пользователь: корзина, свои заказы
    ADMIN = "admin"    # каталог и статусы заказов


@dataclass(frozen=True)
class Principal:
    user_id: int
    is_admin: bool = False


@dataclass(frozen=True)
class AuthzDecision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


def authorize(principal: Optional[Principal], capability: Capability) -> AuthzDecision:
    if principal is None:
        return AuthzDecision(False, "Authentication required")
    if capability is Capability.ADMIN and not principal.is_admin:
        return AuthzDecision(False, "Admin role required")
    return AuthzDecision(True)


def require(principal: Optional[Principal], capability: Capability) -> Principal:
    decision = authorize(principal, capability)
    if not decision:
        raise ForbiddenError(decision.reason)
    return principal


def require_owner(principal: Optional[Principal], owner_id: int) -> Principal:
    """Владелец записи или администратор."""
    require(principal, Capability.SHOP)
    if principal.user_id != owner_id and not principal.is_admin:
        raise ForbiddenError("Not allowed to access this record")
    return principal
