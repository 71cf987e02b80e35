from collections.abc import MutableMapping
from typing import Any
from uuid import UUID

import structlog

from casaconnect.core.core import Service
from casaconnect.core.modules.session.models import SESSION_USER_ID, SESSION_USER_NAME, SESSION_USER_ROLE
from casaconnect.core.modules.user.models import MANAGEMENT_ROLES, User, UserRole
from casaconnect.errors import AccessDeniedError

logger = structlog.get_logger(__name__)

Session = MutableMapping[str, Any]

MANAGER_AREA_PREFIX = "/api/v1/manager"
TENANT_AREA_PREFIX = "/api/v1/tenant"


class AccessService(Service):
    """Binds users to request sessions and checks role areas."""

    def sign_in(self, session: Session, user: User) -> None:
        """Write the user identity into the session, dropping whatever was there."""
        session.clear()
        session[SESSION_USER_ID] = str(user.id)
        session[SESSION_USER_ROLE] = str(user.role)
        session[SESSION_USER_NAME] = user.full_name

    def sign_out(self, session: Session) -> None:
        session.clear()

    async def validate_session(self, session: Session) -> User | None:
        """Re-check the session's user against the database.

        Sessions of deleted or deactivated users are cleared. A changed role or
        name is copied into the session.
        """
        raw_user_id = session.get(SESSION_USER_ID)
        if raw_user_id is None:
            return None

        try:
            user_id = UUID(raw_user_id)
        except ValueError:
            user_id = None
        user = None if user_id is None else await self.core.services.user.find_user(user_id)
        if user is None or not user.is_active:
            logger.warning("session_invalid_user", user_id=raw_user_id)
            session.clear()
            return None

        if session.get(SESSION_USER_ROLE) != str(user.role):
            session[SESSION_USER_ROLE] = str(user.role)
        if session.get(SESSION_USER_NAME) != user.full_name:
            session[SESSION_USER_NAME] = user.full_name
        return user

    def ensure_area(self, session: Session, path: str) -> None:
        """Keep managers out of the tenant area and tenants out of the manager area.

        Uses the role cached in the session; anonymous requests pass through.
        """
        role = session.get(SESSION_USER_ROLE)
        if role is None:
            return
        if path.startswith(MANAGER_AREA_PREFIX) and role not in MANAGEMENT_ROLES:
            logger.warning("role_mismatch", user_id=session.get(SESSION_USER_ID), role=role, path=path)
            raise AccessDeniedError("Manager access required")
        if path.startswith(TENANT_AREA_PREFIX) and role != UserRole.TENANT:
            logger.warning("role_mismatch", user_id=session.get(SESSION_USER_ID), role=role, path=path)
            raise AccessDeniedError("Tenant access required")
