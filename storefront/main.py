# storefront/main.py
# Точка входа FastAPI. Создание таблиц выполняется в событии startup с обработкой ошибок.

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.db.session import engine
from storefront.db.base import Base
from storefront.core.config import settings
from storefront.core.errors import (
    BackendUnavailable,
    CheckoutPartialFailure,
    EmptyCartError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.api import admin as admin_router
from storefront.api import auth as auth_router
from storefront.api import cart as cart_router
from storefront.api import orders as orders_router
from storefront.api import products as products_router

# Импорт моделей, чтобы SQLAlchemy видел их определения
import storefront.models.user
import storefront.models.product
import storefront.models.cart
import storefront.models.order

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 422,
    ForbiddenError: 403,
    EmptyCartError: 400,
    NotFoundError: 404,
    CheckoutPartialFailure: 409,
    InvalidTransitionError: 409,
    BackendUnavailable: 503,
}


def try_create_tables(retries: int = 5, delay: int = 2) -> bool:
    """
    Пытаемся создать таблицы с повторными попытками.
    Если БД недоступна, логируем ошибку и пробуем снова.

    Returns:
        True если таблицы созданы/существуют, False если все попытки исчерпаны
    """
    for attempt in range(1, retries + 1):
        try:
            logger.info(f"Creating tables ({attempt}/{retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (or already exist).")
            return True
        except Exception as e:
            logger.warning(f"Attempt {attempt}/{retries} failed to create tables: {e}")
            if attempt < retries:
                logger.info(f"Waiting {delay}s before retry...")
                time.sleep(delay)
    logger.error(f"Could not create tables after {retries} retries.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Старт и остановка приложения."""
    logger.info("Storefront API starting up...")
    if not try_create_tables(retries=5, delay=2):
        if settings.ENVIRONMENT in ("production", "prod"):
            raise RuntimeError("Cannot start application: database tables creation failed")
        logger.error("Failed to create database tables. Application may not work correctly.")

    yield

    logger.info("Storefront API shutting down...")
    engine.dispose()


app = FastAPI(
    title="Storefront API",
    description="Каталог, корзина, оформление заказов и админка магазина",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware для разработки (ограничить в продакшене!)
if settings.ENVIRONMENT == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["https://yourdomain.com"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])
app.include_router(products_router.router, prefix="/api/products", tags=["products"])
app.include_router(cart_router.router, prefix="/api/cart", tags=["cart"])
app.include_router(orders_router.router, prefix="/api/orders", tags=["orders"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["admin"])


@app.get("/", tags=["health"])
async def root():
    """Базовый health check."""
    return {
        "status": "ok",
        "service": "Storefront API",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["health"])
async def health():
    return {"status": "healthy", "version": "1.0.0"}


@app.exception_handler(StorefrontError)
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    """Ошибки предметной области -> JSON с кодом, понятным клиенту."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    body = {"status": "error", "code": exc.code, "message": exc.message}
    if isinstance(exc, ValidationError):
        body["field"] = exc.field
    elif isinstance(exc, CheckoutPartialFailure):
        body.update({"order_id": exc.order_id, "stage": exc.stage, "resumable": True})
    elif isinstance(exc, InvalidTransitionError):
        body.update({"current": exc.current, "target": exc.target})
    log = logger.error if status_code >= 500 or isinstance(exc, CheckoutPartialFailure) else logger.info
    log(f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Глобальный обработчик ошибок."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error",
            "detail": str(exc) if settings.ENVIRONMENT == "development" else "An error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
