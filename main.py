# File: main.py

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.router import router as auth_router
from config.settings import settings
from database import db, db_ping, ensure_indexes
from errors import (
    DuplicateProductError,
    ForbiddenError,
    InsufficientStockError,
    InvalidStatusError,
    NotFoundError,
    StoreError,
)
from routers.orders import router as orders_router
from routers.products import router as products_router
from routers.status import router as status_router
from utils import error_response, success_response, utcnow

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="[%(levelname)s] %(asctime)s %(name)s - %(message)s",
)
logger = logging.getLogger("product_listing")

STARTED_AT = time.monotonic()

# Domain error -> HTTP status. First match along the MRO wins.
ERROR_STATUS_CODES = {
    NotFoundError: 404,
    InsufficientStockError: 400,
    InvalidStatusError: 400,
    ForbiddenError: 403,
    DuplicateProductError: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Connecting to MongoDB...")
    try:
        await run_in_threadpool(db_ping)
        await run_in_threadpool(ensure_indexes, db)
        logger.info("Connected to MongoDB successfully")
    except PyMongoError as exc:
        logger.error("Could not connect to MongoDB: %s", exc)
    logger.info("Environment: %s", settings.ENVIRONMENT)
    yield
    db.client.close()
    logger.info("MongoDB connection closed.")


app = FastAPI(
    title=settings.APP_NAME,
    description="Product catalog and ordering API.",
    version=settings.API_VERSION,
    lifespan=lifespan,
)


# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def response_time_header(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Response-Time"] = str(round((time.perf_counter() - start) * 1000))
    return response


# --- Error handling ---
@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    status_code = next(
        (ERROR_STATUS_CODES[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS_CODES),
        500,
    )
    return error_response(exc.message, status_code, details=exc.context)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or "unknown", "message": err["msg"]}
        for err in exc.errors()
    ]
    return error_response("Validation failed", 400, errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    return error_response(str(message), exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return error_response("Database operation failed. Please try again.", 500)


# --- Include Routers ---
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(status_router)


# --- Root Endpoints ---
@app.get("/")
def read_root():
    return {
        "message": "Welcome to the Product Listing API",
        "version": settings.API_VERSION,
        "documentation": "/docs",
        "endpoints": {
            "auth": "/api/auth",
            "products": "/api/products",
            "orders": "/api/orders",
        },
    }


@app.get("/api/health")
def health():
    uptime = time.monotonic() - STARTED_AT
    return success_response(
        {
            "uptime": f"{int(uptime // 60)} minutes",
            "environment": settings.ENVIRONMENT,
            "version": settings.API_VERSION,
            "timestamp": utcnow(),
        },
        "API is running",
    )
