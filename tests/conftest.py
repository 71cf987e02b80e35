"""Shared pytest fixtures."""

from typing import Any

import pytest
from support import TEST_PASSWORD, FakeMongoClient, make_config

from casaconnect.app import App
from casaconnect.core.modules.user.models import User, UserRole
from casaconnect.core.modules.user.service import hash_password


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def mongo_client():
    return FakeMongoClient()


@pytest.fixture
def app(config, mongo_client):
    return App(config, mongo_client)


@pytest.fixture
def database(app, mongo_client):
    return mongo_client.get_database(app.session_config.store.database)


@pytest.fixture
def make_user(database):
    """Insert a user directly into the fake users collection."""

    def _make_user(email: str = "manager@example.com", role: UserRole = UserRole.MANAGER, **kwargs: Any) -> User:
        user = User(
            email=email,
            first_name=kwargs.pop("first_name", "Maria"),
            last_name=kwargs.pop("last_name", "Lopez"),
            password_hash=hash_password(kwargs.pop("password", TEST_PASSWORD)),
            role=role,
            **kwargs,
        )
        database.get_collection("users").docs[user.id] = user.to_mongo()
        return user

    return _make_user
