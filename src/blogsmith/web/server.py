from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from blogsmith.app import App
from blogsmith.config import Config
from blogsmith.errors import UserError
from blogsmith.web.error_handlers import general_exception_handler, user_error_handler
from blogsmith.web.openapi import set_custom_openapi
from blogsmith.web.routers import (
    admin_router,
    auth_router,
    chat_router,
    generate_router,
    history_router,
    profile_router,
    status_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Blogsmith API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    # Set before startup so requests served without a lifespan (tests) still find them
    app.state.app = app_instance
    app.state.config = config

    app.add_middleware(SessionMiddleware, secret_key=config.session_secret_key)

    # Add CORS middleware for the browser frontend
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (at root level, not versioned)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    # API v1 routes
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(profile_router, prefix="/api/v1")
    app.include_router(history_router, prefix="/api/v1")
    app.include_router(generate_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")
    app.include_router(status_router, prefix="/api/v1")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
