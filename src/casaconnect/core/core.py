from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from casaconnect.config import Config
from casaconnect.core.modules.session.lifecycle import SessionLifecycle
from casaconnect.core.modules.session.models import SessionConfig

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from casaconnect.core.modules.access.service import AccessService  # noqa: PLC0415
    from casaconnect.core.modules.session.store import MongoSessionStore  # noqa: PLC0415
    from casaconnect.core.modules.user.service import UserService  # noqa: PLC0415

    user: UserService
    session: MongoSessionStore
    access: AccessService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - user must be first
        service_configs = [
            ("user", "casaconnect.core.modules.user.service", "UserService"),
            ("session", "casaconnect.core.modules.session.store", "MongoSessionStore"),
            ("access", "casaconnect.core.modules.access.service", "AccessService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, session configuration, database, and all service instances.

    Construction resolves the session configuration first and raises
    ConfigurationError before any database connection is attempted.
    """

    config: Config
    session_config: SessionConfig
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        self.config = config
        self.session_lifecycle = SessionLifecycle(config)
        self.session_config = self.session_lifecycle.initialize()
        store = self.session_config.store
        if mongo_client is None:
            mongo_client = AsyncMongoClient(store.uri, uuidRepresentation="standard", tz_aware=True)
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(store.database)
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        # Blocks startup until the store answers; a dead store fails the boot
        await self.mongo_client.admin.command("ping")
        await self.services.start_all()
        logger.info("core_started", database=self.session_config.store.database)

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()
