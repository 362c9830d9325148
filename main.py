import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.enum import ErrorCode
from config import settings
from database import init_db
from routers import categories, transactions
from schemas import HealthResponse
from validation import field_errors_from_pydantic

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
}


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("server_started app=%s environment=%s", settings.APP_NAME, settings.ENVIRONMENT)
    yield


configure_logging()

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log each completed request with its status code and duration."""
    started = time.perf_counter()
    # Failures are logged by the exception handlers
    response = await call_next(request)

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s duration_ms=%.1f",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


def _server_error_body(message: str, code: ErrorCode, exc: Exception) -> dict:
    if settings.is_production:
        return {"message": "Something went wrong!", "code": code.value}
    return {
        "message": message,
        "code": code.value,
        "error": str(exc),
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = field_errors_from_pydantic(exc.errors())
    logger.info(
        "validation_failed method=%s path=%s fields=%s",
        request.method,
        request.url.path,
        ",".join(e.field for e in errors),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Validation errors",
            "code": ErrorCode.VALIDATION.value,
            "errors": jsonable_encoder(errors),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = exc.detail
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        content = {"message": "Route not found", "code": ErrorCode.NOT_FOUND.value}
    else:
        code = _STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL)
        content = {"message": str(exc.detail), "code": code.value}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(SQLAlchemyError)
async def handle_storage_fault(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(
        "storage_fault method=%s path=%s exception_type=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_server_error_body("Error processing transaction request", ErrorCode.STORAGE_FAULT, exc),
    )


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_server_error_body("Something went wrong!", ErrorCode.INTERNAL, exc),
    )


app.include_router(transactions.router, prefix=f"{settings.API_PREFIX}/transactions", tags=["transactions"])
app.include_router(categories.router, prefix=f"{settings.API_PREFIX}/categories", tags=["categories"])


@app.get(f"{settings.API_PREFIX}/health", response_model=HealthResponse)
def health():
    return {
        "message": "API is running!",
        "timestamp": datetime.now(timezone.utc),
        "environment": settings.ENVIRONMENT,
    }
