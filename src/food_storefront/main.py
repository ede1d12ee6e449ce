from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from .api import health, users
from .api.routes import admin, cart, catalog, orders, owner
from .db.session import engine
from .exceptions import InvalidInput, StorefrontError
from .logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("application_started")
    yield
    await engine.dispose()
    logger.info("application_stopped")


app = FastAPI(title="Food Storefront", lifespan=lifespan)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.kind, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Невалидное тело или параметры запроса отдаются в том же формате, что и InvalidInput.
    """
    error = InvalidInput("Request validation failed")
    content = error.to_dict()
    content["errors"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=error.status_code, content=content)


# Подключаем роуты
app.include_router(health.router)
app.include_router(users.router)
app.include_router(catalog.router)
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(owner.router)
app.include_router(admin.router)

Instrumentator().instrument(app).expose(app, include_in_schema=False)
