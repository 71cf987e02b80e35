from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from casaconnect.app import App
from casaconnect.config import Config
from casaconnect.errors import UserError
from casaconnect.web.deps import load_session_user
from casaconnect.web.error_handlers import general_exception_handler, user_error_handler, validation_error_handler
from casaconnect.web.openapi import set_custom_openapi
from casaconnect.web.routers import areas_router, auth_router, profile_router
from casaconnect.web.session_middleware import StoreSessionMiddleware


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application.

    The session middleware is bound to the store and session configuration
    that the App resolved at construction; there is no in-memory fallback.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="CasaConnect API",
        lifespan=lifespan,
        openapi_tags=[],
    )

    app.add_middleware(
        StoreSessionMiddleware,
        store=app_instance.session_store,
        session_config=app_instance.session_config,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    session_dependencies = [Depends(load_session_user)]
    app.include_router(auth_router, prefix="/api/v1", dependencies=session_dependencies)
    app.include_router(profile_router, prefix="/api/v1", dependencies=session_dependencies)
    app.include_router(areas_router, prefix="/api/v1", dependencies=session_dependencies)

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app, app_instance.session_config.cookie_name)

    return app
