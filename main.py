import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import (
    AppError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

# Routers
from routers.admin import router as admin_router
from routers.attempts import router as attempts_router
from routers.drills import router as drills_router
from routers.health import router as health_router
from routers.user import router as user_router

logger = logging.getLogger("updrill")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
http_logger = logging.getLogger("updrill.http")

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if o.strip()
]

app = FastAPI(title="UpDrill – Interview Practice API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.perf_counter()
    response = await call_next(request)
    http_logger.info(
        "%s %s -> %d in %dms user=%s",
        request.method,
        request.url.path,
        response.status_code,
        int(round((time.perf_counter() - t0) * 1000)),
        getattr(request.state, "user_id", None) or "anonymous",
    )
    return response


# --- Error envelope ----------------------------------------------------------------


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, InternalError):
        logger.error("internal error on %s %s: %r", request.method, request.url.path, exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            # drop the "body"/"query" location prefix
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": {"code": "VALIDATION_ERROR", "message": "Validation failed", "details": details}},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    status = exc.status_code
    err: AppError
    if status in (404, 405):
        # unmatched path or method: same answer as an unknown route
        err = NotFoundError(f"Route {request.method} {request.url.path} not found")
    elif status == 401:
        err = UnauthorizedError()
    elif status == 403:
        err = ForbiddenError()
    elif 400 <= status < 500:
        err = ValidationError([{"field": "request", "message": str(exc.detail)}])
    else:
        logger.error("http %d on %s %s: %s", status, request.method, request.url.path, exc.detail)
        err = InternalError()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=InternalError().to_dict())


@app.get("/")
def health_root():
    return {"ok": True}


# Register routers
app.include_router(health_router)  # /api/health, /health/...
app.include_router(user_router)  # /api/me, /auth/status
app.include_router(drills_router)  # /api/drills/...
app.include_router(attempts_router)  # /api/attempts/...
app.include_router(admin_router)  # /admin/...
