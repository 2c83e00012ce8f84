# storefront/schemas/user.py
# Pydantic-схемы регистрации и профиля.
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=6, max_length=72)
    full_name: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: Optional[str] = None
    is_admin: bool


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
