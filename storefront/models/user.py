# storefront/models/user.py
# Модель пользователя: email, hashed_password, role.
from sqlalchemy import Column, Integer, String, DateTime, Enum
from datetime import datetime
from storefront.db.base import Base
import enum

class RoleEnum(str, enum.Enum):
    client = "client"
    admin = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    role = Column(Enum(RoleEnum), default=RoleEnum.client, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin
