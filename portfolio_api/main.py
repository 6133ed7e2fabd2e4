import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.api.http import auth_router, desktop_router, files_router, health_router
from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.db import Database
from portfolio_api.core.exceptions import AppError, InternalError, StoreError, ValidationError

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Invalid request to {request.url.path}: {exc.errors()}")
        error = ValidationError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        else:
            message = exc.detail
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        error = StoreError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.database_url:
            app.state.db = Database(settings)
            if settings.db_auto_create:
                await app.state.db.create_all()
            logger.info("Database engine created")
        else:
            app.state.db = None
            logger.warning("DATABASE_URL is not set, storage endpoints will fail")

        if not settings.jwt_secret:
            logger.warning("JWT_SECRET is not set, login and token verification are disabled")

        yield

        if app.state.db is not None:
            await app.state.db.dispose()

    app = FastAPI(
        title="Portfolio API",
        description="Бэкенд персонального портфолио: вход, документы, состояние рабочего стола",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    # Любой OPTIONS отвечает 200; CORS-заголовки добавляет внешний CORSMiddleware
    @app.middleware("http")
    async def options_short_circuit(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Подключаем роутеры
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(files_router)
    app.include_router(desktop_router)

    return app


app = create_app()
