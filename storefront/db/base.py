# storefront/db/base.py
# Общая declarative база для SQLAlchemy.
# Модуль не импортирует модели, чтобы избежать циклических импортов.

from sqlalchemy.orm import declarative_base

Base = declarative_base()
