"""Tests for session configuration resolution and startup fail-fast."""

from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs
from support import FakeMongoClient, make_config

from casaconnect import main as main_module
from casaconnect.app import App
from casaconnect.core.modules.session.lifecycle import (
    DEFAULT_SESSION_SECRET,
    LifecycleState,
    SessionLifecycle,
    resolve_secret,
    resolve_store_target,
)
from casaconnect.core.modules.session.models import CookiePolicy, Environment
from casaconnect.errors import ConfigurationError


class TestResolveStoreTarget:
    """Tests for environment-driven store selection."""

    def test_development_uses_dev_pair(self):
        config = make_config()
        target = resolve_store_target(Environment.DEVELOPMENT, config)
        assert target.uri == "mongodb://localhost:27017"
        assert target.database == "casaconnect_dev"

    def test_production_uses_prod_pair(self):
        config = make_config(environment="production")
        target = resolve_store_target(Environment.PRODUCTION, config)
        assert target.uri == "mongodb+srv://cluster.example.net"
        assert target.database == "casaconnect"

    def test_production_never_falls_back_to_dev_pair(self):
        config = make_config(environment="production", mongodb_uri_prod=None)
        with pytest.raises(ConfigurationError, match="MONGODB_URI_PROD"):
            resolve_store_target(Environment.PRODUCTION, config)

    @pytest.mark.parametrize("uri", [None, "", "   "])
    def test_missing_uri_is_fatal(self, uri):
        config = make_config(mongodb_uri_dev=uri)
        with pytest.raises(ConfigurationError, match="MONGODB_URI_DEV"):
            resolve_store_target(Environment.DEVELOPMENT, config)

    def test_missing_database_name_is_fatal(self):
        config = make_config(db_name_dev="")
        with pytest.raises(ConfigurationError, match="DB_NAME_DEV"):
            resolve_store_target(Environment.DEVELOPMENT, config)


class TestResolveSecret:
    """Tests for the signing secret fallback."""

    def test_configured_secret_is_used(self):
        assert resolve_secret(Environment.PRODUCTION, "s3cret") == "s3cret"

    def test_missing_secret_in_development_logs_error(self):
        with capture_logs() as logs:
            secret = resolve_secret(Environment.DEVELOPMENT, None)
        assert secret == DEFAULT_SESSION_SECRET
        assert logs[0]["event"] == "session_secret_missing"
        assert logs[0]["log_level"] == "error"

    def test_missing_secret_in_production_is_fatal(self):
        with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
            resolve_secret(Environment.PRODUCTION, "")


class TestCookiePolicy:
    """The cookie policy is fixed per environment."""

    def test_development_policy(self):
        policy = CookiePolicy.for_environment(Environment.DEVELOPMENT)
        assert policy.secure is False
        assert policy.http_only is True
        assert policy.same_site == "lax"
        assert policy.max_age_seconds == 30 * 24 * 60 * 60
        assert policy.rolling is True

    def test_production_policy(self):
        policy = CookiePolicy.for_environment(Environment.PRODUCTION)
        assert policy.secure is True
        assert policy.http_only is True
        assert policy.same_site == "lax"
        assert policy.max_age_seconds == 2_592_000
        assert policy.rolling is True


class TestSessionLifecycle:
    """Tests for the Uninitialized -> Ready / FailedFatal state machine."""

    def test_initialize_reaches_ready(self):
        lifecycle = SessionLifecycle(make_config(session_touch_after=600))
        assert lifecycle.state is LifecycleState.UNINITIALIZED

        session_config = lifecycle.initialize()

        assert lifecycle.state is LifecycleState.READY
        assert lifecycle.session_config is session_config
        assert session_config.environment is Environment.DEVELOPMENT
        assert session_config.cookie.secure is False
        assert session_config.touch_after_seconds == 600
        assert session_config.cookie_name == "casaconnect.sid"

    def test_initialize_failure_is_terminal(self):
        lifecycle = SessionLifecycle(make_config(mongodb_uri_dev=None))
        with pytest.raises(ConfigurationError):
            lifecycle.initialize()
        assert lifecycle.state is LifecycleState.FAILED_FATAL
        with pytest.raises(RuntimeError):
            lifecycle.initialize()
        with pytest.raises(RuntimeError):
            _ = lifecycle.session_config

    def test_ready_is_terminal(self):
        lifecycle = SessionLifecycle(make_config())
        lifecycle.initialize()
        with pytest.raises(RuntimeError):
            lifecycle.initialize()

    def test_production_handle_has_secure_cookie(self):
        session_config = SessionLifecycle(make_config(environment="production")).initialize()
        assert session_config.cookie == CookiePolicy(secure=True)
        assert session_config.store.database == "casaconnect"

    def test_app_refuses_to_build_without_store(self):
        client = FakeMongoClient()
        with pytest.raises(ConfigurationError):
            App(make_config(mongodb_uri_dev=None), client)
        assert client.databases == {}


class TestMainFailFast:
    """The process exits before serving when configuration is missing."""

    def test_main_exits_non_zero(self, monkeypatch):
        monkeypatch.setenv("CASACONNECT_ENVIRONMENT", "production")
        monkeypatch.delenv("CASACONNECT_MONGODB_URI_PROD", raising=False)
        monkeypatch.delenv("CASACONNECT_DB_NAME_PROD", raising=False)
        monkeypatch.chdir("/")  # keep a developer's .env out of the way
        run_server = MagicMock()
        monkeypatch.setattr(main_module, "run_server", run_server)
        monkeypatch.setattr(main_module, "setup_logging", MagicMock())

        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

        assert exc_info.value.code == 1
        run_server.assert_not_called()
