"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trufo.config import Settings
from trufo.database import Database
from trufo.errors import TrufoError, ValidationError
from trufo.routers import admin, objects
from trufo.services.access_service import now_ms
from trufo.utils.crypto import ContentCodec

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        if err.get("type") == "missing_fields":
            return err["msg"]
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing" and err.get("loc")]
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    if errors:
        err = errors[0]
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        return f"{field}: {err['msg']}" if field else err["msg"]
    return ValidationError.default_detail


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    _configure_logging(settings)

    database = Database(settings.database_url, echo=settings.sql_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.init()
        if not settings.admin_token:
            logger.info("TRUFO_ADMIN_TOKEN not set; admin endpoints disabled")
        yield
        await database.dispose()

    app = FastAPI(
        title="Trufo",
        description="Expiring, token-guarded objects with encrypted storage",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.codec = ContentCodec(settings.encryption_key)
    app.state.clock = now_ms

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TrufoError)
    async def trufo_error_handler(request: Request, exc: TrufoError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        body = ValidationError(_validation_message(exc)).to_body()
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(objects.router, tags=["objects"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])

    @app.options("/{path:path}")
    async def preflight(path: str):
        return {"message": "OK"}

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "trufo"}

    return app


app = create_app()
