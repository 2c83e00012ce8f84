# storefront/core/errors.py
# Таксономия ошибок предметной области.
# Сервисы бросают только эти исключения; HTTP-коды назначаются в main.py.

from typing import Optional


class StorefrontError(Exception):
    """Базовая ошибка магазина. code попадает в JSON-ответ."""

    code = "storefront_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Ошибка поля, которую пользователь может исправить сам."""

    code = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ForbiddenError(StorefrontError):
    code = "forbidden"

    def __init__(self, message: str = "Insufficient privileges"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    code = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class EmptyCartError(StorefrontError):
    code = "empty_cart"

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class CheckoutPartialFailure(StorefrontError):
    """
    Заказ уже создан, но позиции заказа или очистка корзины не завершены.
    Повтор выполняется через resume(order_id), а не через новый checkout.
    """

    code = "checkout_partial_failure"

    def __init__(self, order_id: int, stage: str, message: Optional[str] = None):
        super().__init__(message or f"Order {order_id} was placed but checkout did not finish")
        self.order_id = order_id
        self.stage = stage


class InvalidTransitionError(StorefrontError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change order status from {current} to {target}")
        self.current = current
        self.target = target


class BackendUnavailable(StorefrontError):
    """Хранилище недоступно или отклонило запрос."""

    code = "backend_unavailable"

    def __init__(self, message: str = "Storage backend is unavailable"):
        super().__init__(message)
