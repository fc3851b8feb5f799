from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from .runtime import AuthRuntime, build_runtime
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig, runtime: Optional[AuthRuntime] = None) -> FastAPI:
    """
    Build the API.

    Without an explicit runtime the app wires one against the configured
    database and creates missing tables on startup.
    """
    owns_database = runtime is None
    if owns_database:
        from src.depends import AsyncSessionLocal

        runtime = build_runtime(ApplicationConfig, AsyncSessionLocal)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_database and ApplicationConfig.AUTO_CREATE_TABLES:
            from src.depends import init_db

            await init_db()
        await app.state.runtime.start()
        yield
        app.state.runtime.stop()

    app = FastAPI(title="OpsPilot Auth API", version="0.1.0", lifespan=lifespan)
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import auth, health_check, session

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(session.router, tags=["Session"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
