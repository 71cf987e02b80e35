from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from casaconnect.core.db import MongoModel


class UserRole(StrEnum):
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    ELECTRICIAN = "electrician"
    PLUMBER = "plumber"
    GENERAL_REPAIR = "general_repair"
    TENANT = "tenant"
    BOARDING_MANAGER = "boarding_manager"


MANAGEMENT_ROLES = frozenset({UserRole.MANAGER, UserRole.SUPERVISOR})


class User(MongoModel):
    """User domain model with credentials."""

    email: str
    first_name: str
    last_name: str
    password_hash: str  # bcrypt hash
    role: UserRole
    is_active: bool = True
    last_login: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Login email")
    name: str = Field(..., description="Full name")
    role: UserRole = Field(..., description="Account role")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email, name=user.full_name, role=user.role)
