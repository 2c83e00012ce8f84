# storefront/services/catalog.py
# Каталог товаров: чтение и общие правила валидации для админских мутаций.
# Остаток на складе не резервируется: stock > 0 при чтении ничего не блокирует.

import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.errors import BackendUnavailable, NotFoundError, ValidationError
from storefront.models.product import Product
from storefront.services.money import quantize

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "description", "price", "stock", "category", "image_url")
MAX_PRICE = Decimal("99999999.99")

_url_adapter = TypeAdapter(HttpUrl)


def list_products(db: Session, category: Optional[str] = None) -> List[Product]:
    """Товары каталога, новые первыми."""
    stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
    if category:
        stmt = stmt.where(Product.category == category)
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError as e:
        logger.error(f"Failed to list products: {e}")
        raise BackendUnavailable() from e


def get_product(db: Session, product_id: int) -> Product:
    try:
        product = db.get(Product, product_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load product {product_id}: {e}")
        raise BackendUnavailable() from e
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def list_categories(db: Session) -> List[str]:
    stmt = (
        select(Product.category)
        .where(Product.category.is_not(None), Product.category != "")
        .distinct()
        .order_by(Product.category)
    )
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError as e:
        logger.error(f"Failed to list categories: {e}")
        raise BackendUnavailable() from e


def _clean_price(value) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError("price", "Price must be a positive number")
    try:
        price = Decimal(repr(value)) if isinstance(value, float) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError("price", "Price must be a positive number")
    if not price.is_finite():
        raise ValidationError("price", "Price must be a positive number")
    price = quantize(price)
    if price <= 0:
        raise ValidationError("price", "Price must be a positive number")
    if price > MAX_PRICE:
        raise ValidationError("price", "Price is too large")
    return price


def _clean_stock(value) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError("stock", "Stock must be a non-negative number")
    if isinstance(value, int):
        stock = value
    else:
        try:
            stock = int(str(value).strip())
        except ValueError:
            raise ValidationError("stock", "Stock must be a non-negative number")
    if stock < 0:
        raise ValidationError("stock", "Stock must be a non-negative number")
    return stock


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def validate_product(data: dict) -> dict:
    """
    Проверяет полный набор полей товара и возвращает очищенные значения.
    Порядок проверок: name, price, stock, image_url — ошибка называет первое неверное поле.
    """
    name = _optional_text(data.get("name")) or ""
    if len(name) < 2:
        raise ValidationError("name", "Name must be at least 2 characters")

    price = _clean_price(data.get("price"))
    stock = _clean_stock(data.get("stock"))

    image_url = _optional_text(data.get("image_url"))
    if image_url is not None:
        try:
            _url_adapter.validate_python(image_url)
        except PydanticValidationError:
            raise ValidationError("image_url", "Invalid URL")

    return {
        "name": name,
        "description": _optional_text(data.get("description")),
        "price": price,
        "stock": stock,
        "category": _optional_text(data.get("category")),
        "image_url": image_url,
    }
