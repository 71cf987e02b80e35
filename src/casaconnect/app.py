from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pymongo import AsyncMongoClient

from casaconnect.config import Config
from casaconnect.core.core import Core
from casaconnect.core.modules.access.service import Session
from casaconnect.core.modules.session.models import SessionConfig
from casaconnect.core.modules.session.store import MongoSessionStore
from casaconnect.core.modules.user.models import User, UserView


class App:
    """Facade for all application operations, delegates to Core services.

    Construction raises ConfigurationError when the session store cannot be
    resolved for the active environment.
    """

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, mongo_client)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    @property
    def session_config(self) -> SessionConfig:
        return self._core.session_config

    @property
    def session_store(self) -> MongoSessionStore:
        return self._core.services.session

    async def login(self, session: Session, email: str, password: str) -> UserView:
        """Authenticate user and bind them to the session."""
        user = await self._core.services.user.authenticate(email, password)
        self._core.services.access.sign_in(session, user)
        return UserView.from_domain(user)

    def logout(self, session: Session) -> None:
        """Clear the session; the middleware then deletes the stored record."""
        self._core.services.access.sign_out(session)

    async def change_password(self, user: User, old_password: str, new_password: str) -> None:
        await self._core.services.user.change_password(user.id, old_password, new_password)

    async def validate_session(self, session: Session) -> User | None:
        """Drop sessions of vanished or deactivated users, refresh cached role."""
        return await self._core.services.access.validate_session(session)

    def ensure_area(self, session: Session, path: str) -> None:
        self._core.services.access.ensure_area(session, path)
