# main.py

"""FastAPI application for bar ordering, pricing and ticket printing."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.asyncio import from_url
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

from .db import get_engine, init_schema
from .errors import BarError
from .middlewares import (
    LoggingMiddleware,
    PrometheusMiddleware,
    RequestIdMiddleware,
)
from .obs import configure_logging
from .printing import PrintQueue, SocketPrinter
from .routes_admin_catalog import router as admin_catalog_router
from .routes_metrics import router as metrics_router
from .routes_orders import router as orders_router
from .routes_print import router as print_router
from .routes_public_menu import router as public_menu_router
from .routes_sessions import router as sessions_router
from .utils.responses import err

logger = logging.getLogger("api")

settings = get_settings()
app = FastAPI(title="Bar Orders API", version="1.0.0")
app.state.redis = from_url(settings.redis_url, decode_responses=True)
app.state.print_queue = None

app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(BarError)
async def bar_error_handler(request: Request, exc: BarError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s: %s",
        exc.code,
        exc.message,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    return JSONResponse(
        err(exc.code, exc.message, exc.details), status_code=exc.status_code
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = {
        "errors": [
            {"loc": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]}
            for e in exc.errors()
        ]
    }
    return JSONResponse(
        err("VALIDATION", "invalid request", details), status_code=400
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        exc.detail,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    return JSONResponse(
        err(exc.status_code, exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.on_event("startup")
async def startup() -> None:
    configure_logging(settings.log_level)
    if settings.auto_create_schema:
        await init_schema(get_engine())
    if settings.printer_host:
        queue = PrintQueue(SocketPrinter(settings.printer_host, settings.printer_port))
        queue.start()
        app.state.print_queue = queue
        logger.info(
            "print queue started printer=%s:%d",
            settings.printer_host,
            settings.printer_port,
        )


@app.on_event("shutdown")
async def shutdown() -> None:
    queue = app.state.print_queue
    if queue is not None:
        await queue.stop()


# Session routes first: /api/orders/session must not match /api/orders/{order_id}
app.include_router(sessions_router)
app.include_router(orders_router)
app.include_router(print_router)
app.include_router(public_menu_router)
app.include_router(admin_catalog_router)
app.include_router(metrics_router)
