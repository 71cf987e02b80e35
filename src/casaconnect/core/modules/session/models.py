"""Session management models."""

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SESSION_MAX_AGE_SECONDS = 30 * 24 * 60 * 60  # 30 days, sliding

# Keys written into request.session by login, read by downstream handlers
SESSION_USER_ID = "user_id"
SESSION_USER_ROLE = "user_role"
SESSION_USER_NAME = "user_name"


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class CookiePolicy(BaseModel):
    """Session cookie attributes. Fixed per process, never changed per request."""

    model_config = ConfigDict(frozen=True)

    secure: bool
    http_only: Literal[True] = True
    same_site: Literal["lax"] = "lax"
    max_age_seconds: int = SESSION_MAX_AGE_SECONDS
    rolling: Literal[True] = True

    @classmethod
    def for_environment(cls, environment: Environment) -> "CookiePolicy":
        return cls(secure=environment is Environment.PRODUCTION)


class StoreTarget(BaseModel):
    """Connection string and database name of the session store."""

    model_config = ConfigDict(frozen=True)

    uri: str
    database: str


class SessionConfig(BaseModel):
    """Process-wide session configuration, built once at startup."""

    model_config = ConfigDict(frozen=True)

    environment: Environment
    store: StoreTarget
    cookie: CookiePolicy
    secret: str = Field(repr=False)
    touch_after_seconds: int
    cookie_name: str = "casaconnect.sid"


class SessionRecord(BaseModel):
    """Session document. Indexed on expires_at (TTL); `data` is encrypted in the collection."""

    id: str = Field(alias="_id")
    data: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime
    touched_at: datetime

    model_config = ConfigDict(populate_by_name=True)

    def to_mongo(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
