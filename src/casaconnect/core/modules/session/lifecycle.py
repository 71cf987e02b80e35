"""Session store selection and startup validation.

The session configuration is resolved exactly once per process. A process
that cannot persist sessions refuses to start instead of falling back to
in-memory sessions, which would log every user out on each redeploy.
"""

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from casaconnect.core.modules.session.models import CookiePolicy, Environment, SessionConfig, StoreTarget
from casaconnect.errors import ConfigurationError

if TYPE_CHECKING:
    from casaconnect.config import Config

logger = structlog.get_logger(__name__)

DEFAULT_SESSION_SECRET = "your-secret-key-change-this-in-production"  # noqa: S105


class LifecycleState(StrEnum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED_FATAL = "failed_fatal"


def resolve_store_target(environment: Environment, config: "Config") -> StoreTarget:
    """Pick the connection pair of the active environment."""
    if environment is Environment.PRODUCTION:
        uri, database = config.mongodb_uri_prod, config.db_name_prod
        uri_var, db_var = "CASACONNECT_MONGODB_URI_PROD", "CASACONNECT_DB_NAME_PROD"
    else:
        uri, database = config.mongodb_uri_dev, config.db_name_dev
        uri_var, db_var = "CASACONNECT_MONGODB_URI_DEV", "CASACONNECT_DB_NAME_DEV"

    if not uri or not uri.strip():
        raise ConfigurationError(f"Session store URI is not defined for {environment}: set {uri_var}")
    if not database or not database.strip():
        raise ConfigurationError(f"Session store database is not defined for {environment}: set {db_var}")
    return StoreTarget(uri=uri.strip(), database=database.strip())


def resolve_secret(environment: Environment, secret: str | None) -> str:
    """Return the signing secret, refusing the built-in default in production."""
    if secret:
        return secret
    if environment is Environment.PRODUCTION:
        raise ConfigurationError("CASACONNECT_SESSION_SECRET must be set in production")
    logger.error("session_secret_missing", environment=str(environment), fallback="built-in default")
    return DEFAULT_SESSION_SECRET


class SessionLifecycle:
    """Uninitialized -> Ready, or Uninitialized -> FailedFatal. Both ends are terminal."""

    def __init__(self, config: "Config") -> None:
        self._config = config
        self._state = LifecycleState.UNINITIALIZED
        self._session_config: SessionConfig | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def session_config(self) -> SessionConfig:
        if self._session_config is None:
            raise RuntimeError(f"Session lifecycle is {self._state}, not ready")
        return self._session_config

    def initialize(self) -> SessionConfig:
        """Resolve store target, secret and cookie policy. Raises ConfigurationError on failure."""
        if self._state is not LifecycleState.UNINITIALIZED:
            raise RuntimeError(f"Session lifecycle already {self._state}")

        environment = self._config.environment
        try:
            store = resolve_store_target(environment, self._config)
            secret = resolve_secret(environment, self._config.session_secret)
        except ConfigurationError:
            self._state = LifecycleState.FAILED_FATAL
            raise

        self._session_config = SessionConfig(
            environment=environment,
            store=store,
            cookie=CookiePolicy.for_environment(environment),
            secret=secret,
            touch_after_seconds=self._config.session_touch_after,
            cookie_name=self._config.session_cookie_name,
        )
        self._state = LifecycleState.READY
        logger.info("session_lifecycle_ready", environment=str(environment), database=store.database)
        return self._session_config
