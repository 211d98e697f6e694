from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import DBAPIError

from scorehub.api.router import api_router
from scorehub.api.v1 import health
from scorehub.config import settings
from scorehub.db.models import Base
from scorehub.db.session import engine
from scorehub.utils.error_codes import ERROR_MESSAGES, ErrorCode
from scorehub.utils.exceptions import ScoreHubException, TransportError
from scorehub.utils.metrics import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL, render_metrics
from scorehub.utils.observability import configure_logging
from scorehub.utils.request_id import new_request_id, request_id_var, validate_request_id


logger = logging.getLogger(__name__)


async def _sqlite_create_tables() -> None:
    """Create missing tables for local SQLite files.

    Server databases are managed by Alembic (``alembic upgrade head``).
    """
    if make_url(settings.DATABASE_URL).get_backend_name() != "sqlite":
        return

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("lifespan.sqlite_tables_ready url=%s", settings.DATABASE_URL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    await _sqlite_create_tables()
    logger.info("lifespan.started env=%s", settings.ENV)

    try:
        yield
    finally:
        # Release pooled connections (and aiosqlite worker threads).
        await engine.dispose()
        logger.info("lifespan.stopped")


app = FastAPI(title="ScoreHub Backend", debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming_rid = request.headers.get("X-Request-ID")
    rid = validate_request_id(incoming_rid) or new_request_id()
    token = request_id_var.set(rid)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = rid
    return response


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    if not settings.METRICS_ENABLED:
        return await call_next(request)

    start = time.perf_counter()
    response = await call_next(request)
    elapsed_s = time.perf_counter() - start

    # Label by route template to keep cardinality low.
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    path_label = route_path if isinstance(route_path, str) and route_path else "__unmatched__"
    method = request.method
    status = str(getattr(response, "status_code", 0))

    HTTP_REQUESTS_TOTAL.labels(method=method, path=path_label, status=status).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path_label).observe(elapsed_s)
    return response


@app.exception_handler(ScoreHubException)
async def scorehub_exception_handler(request: Request, exc: ScoreHubException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(DBAPIError)
async def dbapi_exception_handler(request: Request, exc: DBAPIError):
    logger.error("db.unhandled_error path=%s error=%s", request.url.path, type(exc).__name__)
    err = TransportError()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCode.E004.value,
                "message": ERROR_MESSAGES[ErrorCode.E004],
                "details": {"errors": jsonable_encoder(exc.errors())},
            }
        },
    )


app.include_router(api_router, prefix="/api/v1")
app.include_router(health.router, tags=["Health"])


if settings.METRICS_ENABLED:

    @app.get("/metrics")
    async def metrics():
        payload, content_type = render_metrics()
        return Response(content=payload, media_type=content_type)
