from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from casaconnect.core.core import Service
from casaconnect.core.modules.user.models import User, UserRole
from casaconnect.core.modules.user.validators import normalize_email, validate_password
from casaconnect.errors import AccessDeniedError, AuthenticationError, NotFoundError, ValidationError
from casaconnect.utils import now

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class UserService(Service):
    """Manages user accounts.

    Reads go to the database on every call so that deactivation and role
    changes are visible to the next request.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def find_user(self, user_id: UUID) -> User | None:
        doc = await self._collection.find_one({"_id": user_id})
        return None if doc is None else User.model_validate(doc)

    async def get_user(self, user_id: UUID) -> User:
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def find_user_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": email.strip().lower()})
        return None if doc is None else User.model_validate(doc)

    async def create_user(self, email: str, password: str, first_name: str, last_name: str, role: UserRole) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        if await self.find_user_by_email(email) is not None:
            raise ValidationError(f"User '{email}' already exists")

        validate_password(password)
        user = User(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            password_hash=hash_password(password),
            role=role,
        )
        await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", user_id=str(user.id), role=str(role))
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Verify credentials and record the login time."""
        user = await self.find_user_by_email(email)
        if user is None:
            logger.warning("login_failed", reason="unknown_email")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AccessDeniedError("Your account has been deactivated. Please contact management.")
        if not check_password(password, user.password_hash):
            logger.warning("login_failed", reason="bad_password", user_id=str(user.id))
            raise AuthenticationError("Invalid email or password")

        user.last_login = now()
        await self._collection.update_one({"_id": user.id}, {"$set": {"last_login": user.last_login}})
        return user

    async def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        """Change user password after verifying current password."""
        user = await self.get_user(user_id)
        if not check_password(old_password, user.password_hash):
            raise ValidationError("Invalid current password")

        validate_password(new_password)
        await self._collection.update_one({"_id": user_id}, {"$set": {"password_hash": hash_password(new_password)}})

    async def on_start(self) -> None:
        await self._collection.create_index([("email", 1)], unique=True)
