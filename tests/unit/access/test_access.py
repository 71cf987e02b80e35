"""Tests for session sign-in, validation and role areas."""

from uuid import uuid4

import pytest

from casaconnect.core.modules.user.models import UserRole
from casaconnect.errors import AccessDeniedError


@pytest.fixture
def access(app):
    return app._core.services.access


class TestSignIn:
    def test_sign_in_replaces_session_contents(self, access, make_user):
        user = make_user(role=UserRole.TENANT, first_name="Tom", last_name="Reyes")
        session = {"stale": True}

        access.sign_in(session, user)

        assert session == {"user_id": str(user.id), "user_role": "tenant", "user_name": "Tom Reyes"}

    def test_sign_out_clears_session(self, access, make_user):
        session = {"user_id": "x", "user_role": "tenant"}
        access.sign_out(session)
        assert session == {}


class TestValidateSession:
    @pytest.mark.asyncio
    async def test_anonymous_session(self, access):
        assert await access.validate_session({}) is None

    @pytest.mark.asyncio
    async def test_valid_session_returns_user(self, access, make_user):
        user = make_user()
        session: dict = {}
        access.sign_in(session, user)

        assert (await access.validate_session(session)).id == user.id
        assert session["user_role"] == "manager"

    @pytest.mark.asyncio
    async def test_unknown_user_clears_session(self, access):
        session = {"user_id": str(uuid4()), "user_role": "manager"}
        assert await access.validate_session(session) is None
        assert session == {}

    @pytest.mark.asyncio
    async def test_malformed_user_id_clears_session(self, access):
        session = {"user_id": "not-a-uuid"}
        assert await access.validate_session(session) is None
        assert session == {}

    @pytest.mark.asyncio
    async def test_name_drift_is_refreshed(self, access, make_user):
        user = make_user()
        session: dict = {}
        access.sign_in(session, user)
        session["user_name"] = "Old Name"

        await access.validate_session(session)

        assert session["user_name"] == "Maria Lopez"


class TestEnsureArea:
    @pytest.mark.parametrize("role", ["manager", "supervisor"])
    def test_management_roles_enter_manager_area(self, access, role):
        access.ensure_area({"user_role": role}, "/api/v1/manager/units")

    def test_tenant_is_kept_out_of_manager_area(self, access):
        with pytest.raises(AccessDeniedError, match="Manager access required"):
            access.ensure_area({"user_id": "t1", "user_role": "tenant"}, "/api/v1/manager/units")

    def test_manager_is_kept_out_of_tenant_area(self, access):
        with pytest.raises(AccessDeniedError, match="Tenant access required"):
            access.ensure_area({"user_id": "m1", "user_role": "manager"}, "/api/v1/tenant/payments")

    def test_tenant_enters_tenant_area(self, access):
        access.ensure_area({"user_role": "tenant"}, "/api/v1/tenant/payments")

    def test_other_paths_are_open(self, access):
        access.ensure_area({"user_role": "plumber"}, "/api/v1/profile")

    def test_anonymous_passes_through(self, access):
        access.ensure_area({}, "/api/v1/manager/units")
