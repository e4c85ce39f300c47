from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from auth import MISSING_FIELD_MESSAGES
from auth import router as auth_router
from config import Settings, get_settings
from database import init_db
from errors import AppError, InvalidField, MissingField, ServerError, Unauthorized
from logging_config import configure_logging, get_logger
from security import PasswordHasher, TokenService, bcrypt_context
from transactions import expenses_router, incomes_router

logger = get_logger(__name__)


def error_response(exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


def is_missing(error: dict) -> bool:
    if error.get("type") == "missing":
        return True
    value = error.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


# ===== EXCEPTION HANDLERS =====
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, ServerError):
        logger.error("server_error", path=request.url.path, exc_info=exc.__cause__ or exc)
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(is_missing(e) for e in errors):
        message = MISSING_FIELD_MESSAGES.get(request.url.path, MissingField.default_message)
        return error_response(MissingField(message))

    fields = ", ".join(str(e["loc"][-1]) for e in errors if e.get("loc"))
    return error_response(InvalidField(f"Invalid value for: {fields}" if fields else None))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("server_error", path=request.url.path, exc_info=exc)
    return error_response(ServerError())


def create_app(
    settings: Optional[Settings] = None,
    hasher: Optional[PasswordHasher] = None,
    tokens: Optional[TokenService] = None,
) -> FastAPI:
    """
    Build the application. The store, the hasher and the token service are
    created once here and shared by every request through app.state.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(title="Finance Tracker API")

    engine, session_local = init_db(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_local = session_local
    app.state.hasher = hasher or PasswordHasher(bcrypt_context(settings.bcrypt_rounds))
    app.state.tokens = tokens or TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(hours=settings.token_ttl_hours),
    )

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, unhandled_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(expenses_router)
    app.include_router(incomes_router)

    @app.get("/")
    def home():
        return {"message": "Finance Tracker API running"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("app_created", database=engine.url.render_as_string(hide_password=True))
    return app


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
