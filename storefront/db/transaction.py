# storefront/db/transaction.py
# Единица работы поверх Session: один блок — один commit.
# При ошибке хранилища делаем rollback и поднимаем BackendUnavailable.

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.errors import BackendUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, action: str) -> Iterator[Session]:
    """
    with atomic(db, "cart.remove"):
        db.delete(item)

    Ошибки предметной области внутри блока тоже откатывают транзакцию,
    но пробрасываются как есть.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{action} failed, transaction rolled back: {e}")
        raise BackendUnavailable() from e
    except Exception:
        db.rollback()
        raise
