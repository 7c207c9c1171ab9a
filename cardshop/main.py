import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardshop.api import (
    admin_router,
    cards_router,
    health_router,
    me_router,
    orders_router,
)
from cardshop.config import settings
from cardshop.db.database import init_db
from cardshop.models.failure import (
    FailureKind,
    KnownError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardshop"),
    lifespan=lifespan,
)

app.include_router(admin_router)
app.include_router(cards_router)
app.include_router(health_router)
app.include_router(me_router)
app.include_router(orders_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    body = finalize_response(exc.to_response())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    reasons = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    body = create_known_failure(FailureKind.VALIDATION_FAILED, reasons)
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("UNHANDLED_EXCEPTION", extra={"path": request.url.path})
    body = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
