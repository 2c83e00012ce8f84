# storefront/schemas/product.py
# Схемы товара. Входные поля типизированы мягко: правила (длина имени, цена > 0,
# остаток >= 0, URL) проверяет сервис каталога, чтобы ошибка называла поле.
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class ProductIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Union[Decimal, str]] = None
    stock: Optional[Union[int, str]] = None
    category: Optional[str] = None
    image_url: Optional[str] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
