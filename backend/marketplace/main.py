# marketplace/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import DoesNotExist, IntegrityError

from marketplace.config import settings
from marketplace.core.db import init_db, close_db
from marketplace.core.errors import AppError, Conflict, NotFound

from marketplace.api.v1.routers import (
    admins,
    ai_chats,
    auth,
    chats,
    payments,
    products,
    promotions,
    provinces,
    transactions,
)

from marketplace.core.bootstrap import ensure_default_admin
logger = logging.getLogger("uvicorn.error")


def _error_body(message: str, code: str, data=None, errors=None) -> dict:
    body = {"success": False, "message": message, "error": code}
    if errors is not None:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return body


app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# Error envelope
# ------------------------------------------------------------------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.code, data=exc.data))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request data", "VALIDATION_ERROR", errors=errors),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("[db] integrity error on %s %s: %s", request.method, request.url.path, exc)
    err = Conflict("Resource already exists")
    return JSONResponse(status_code=err.status_code, content=_error_body(err.message, err.code))


@app.exception_handler(DoesNotExist)
async def does_not_exist_handler(request: Request, exc: DoesNotExist):
    err = NotFound("Resource not found")
    return JSONResponse(status_code=err.status_code, content=_error_body(err.message, err.code))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "SERVER_ERROR"),
    )


@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's a super admin account on first run
    await ensure_default_admin()

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(admins.router, prefix="/api/v1")
app.include_router(provinces.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(promotions.router, prefix="/api/v1")
app.include_router(chats.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(transactions.router, prefix="/api/v1")
app.include_router(ai_chats.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
