from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from pda.api.routes import router as api_router
from pda.core.config import get_settings
from pda.core.log_config import configure_logging
from pda.core.request_meta import extract_client_ip
from pda.db.base import Base
from pda.db.session import engine
from pda.services.rate_limit_service import rate_limit_service

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)


def _rate_limit_scope(method: str, path: str) -> tuple[str, int, int]:
    if "/auth/" in path:
        return "auth", settings.rate_limit_auth_limit, settings.rate_limit_auth_window_seconds
    if method == "POST" and path.rstrip("/").endswith("/messages"):
        return (
            "messages",
            settings.rate_limit_messages_limit,
            settings.rate_limit_messages_window_seconds,
        )
    return "global", settings.rate_limit_global_limit, settings.rate_limit_global_window_seconds


class ApiRateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        if not settings.rate_limit_enabled:
            return await call_next(request)

        path = request.url.path.lower()
        if path.endswith("/health"):
            return await call_next(request)

        client_ip = extract_client_ip(request)
        scope, limit, window_seconds = _rate_limit_scope(request.method, path)
        decision = rate_limit_service.check(
            f"api:{scope}:{client_ip}",
            limit=limit,
            window_seconds=window_seconds,
        )
        if not decision.allowed:
            logger.warning("Rate limit hit for %s on %s scope", client_ip, scope)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Rate limit exceeded"},
                headers=decision.headers(),
            )

        response = await call_next(request)
        for key, value in decision.headers().items():
            response.headers[key] = value
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("%s started, schema ready", settings.app_name)
    yield


def _format_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _format_validation_errors(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(getattr(exc, "orig", None) or exc)},
    )


app.add_middleware(ApiRateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "PUT", "POST", "DELETE", "PATCH"],
    allow_headers=["Accept", "Content-Type", "Authorization", "X-Requested-With"],
)
app.include_router(api_router, prefix=settings.api_prefix)
