# storefront/api/products.py
# Публичный каталог: список (новые первыми), категории, карточка товара.
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.security import get_db
from storefront.schemas.product import ProductOut
from storefront.services import catalog

router = APIRouter()

@router.get("", response_model=List[ProductOut])
def list_products(category: Optional[str] = None, db: Session = Depends(get_db)):
    return catalog.list_products(db, category=category)

@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)

@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id)
