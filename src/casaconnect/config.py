from pydantic import model_validator
from pydantic_settings import BaseSettings

from casaconnect.core.modules.session.models import Environment


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    environment: Environment = Environment.DEVELOPMENT
    # One (connection base, database name) pair per environment; never mixed
    mongodb_uri_dev: str | None = None
    db_name_dev: str | None = None
    mongodb_uri_prod: str | None = None
    db_name_prod: str | None = None
    session_secret: str | None = None  # Cookie signing key, required in production
    session_touch_after: int = 24 * 3600  # Seconds between lazy expiry rewrites of an unmodified session
    session_cookie_name: str = "casaconnect.sid"
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool | None = None  # Defaults to True in development
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "CASACONNECT_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _default_debug(self) -> "Config":
        if self.debug is None:
            self.debug = self.environment is Environment.DEVELOPMENT
        return self

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION
