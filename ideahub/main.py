"""
IdeaHub — FastAPI application entry-point.

Run with:
    uvicorn ideahub.main:app --reload
or:
    python -m ideahub.main
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ideahub.config import settings
from ideahub.database import build_engine, build_session_factory, create_schema
from ideahub.errors import IdeaHubError, StoreError

# ── Import routers ──
from ideahub.routers import auth, ideas, roles, users


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Send every logger to stdout with timestamp and level."""
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel((level or settings.LOG_LEVEL).upper())
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return logging.getLogger(__name__)


logger = logging.getLogger(__name__)


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = ".".join(str(part) for part in err.get("loc", ())[1:])
    if err.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    return f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid request")


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the application; ``database_url`` overrides settings.DATABASE_URL."""
    setup_logging()
    url = database_url or settings.DATABASE_URL

    # ── Lifespan: open the store on startup, release it on shutdown ──
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(url)
        await create_schema(engine)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Connected to database")
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("Database connection closed")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Track startup ideas and the people holding a stake in them.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error mapping ──
    @app.exception_handler(IdeaHubError)
    async def ideahub_error_handler(request: Request, exc: IdeaHubError):
        if isinstance(exc, StoreError):
            logger.error(f"Store error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request body on {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content={"error": _first_error(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Unhandled store error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": StoreError.default_message})

    # ── Request logging (no headers or bodies: they carry tokens and passwords) ──
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    # ── Register API routers ──
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(ideas.router)
    app.include_router(roles.router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ideahub.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
