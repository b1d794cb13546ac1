import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {
        "code": exc.base_error.code,
        "message": exc.base_error.message,
        **exc.base_error.details,
    }
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    # Upstream failures keep their message, anything else is hidden
    message = exc.base_error.message if exc.is_upstream else "Internal server error"
    error_dict = {"code": exc.base_error.code, "message": message}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error_dict = {
        "code": "VALIDATION_ERROR",
        "message": "Invalid request body",
        "fields": [".".join(str(part) for part in err["loc"]) for err in exc.errors()],
    }
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": error_dict}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.depends import engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    await engine.dispose()


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="PulseCRM Signature API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, signature_request

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(signature_request.router, tags=["Signature Requests"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
