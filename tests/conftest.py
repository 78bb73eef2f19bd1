"""
Pytest fixtures for the Social API.

Every test gets its own SQLite file under ``tmp_path`` with migrations
applied.  Password hashing uses a low iteration count to keep the suite
fast.
"""
import logging

import pytest
from fastapi.testclient import TestClient

from social_api.app.core.config import Settings
from social_api.app.core.container import build_services
from social_api.app.core.db import init_db
from social_api.app.core.security import PBKDF2Hasher
from social_api.app.main import create_app

USERS = [
    {"username": "alice", "email": "alice@example.com", "password": "alicepassword"},
    {"username": "bob", "email": "bob@example.com", "password": "bobpassword"},
    {"username": "carol", "email": "carol@example.com", "password": "carolpassword"},
]

# Well formed identifier that no document will ever have.
MISSING_ID = "0123456789abcdef01234567"
# Rejected by the store as malformed.
MALFORMED_ID = "12345"


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Only show errors from the application while tests run."""
    logging.getLogger("social_api").setLevel(logging.ERROR)
    yield


@pytest.fixture
def hasher():
    return PBKDF2Hasher(iterations=1_000)


@pytest.fixture
def database_path(tmp_path):
    path = str(tmp_path / "social-test.db")
    init_db(path)
    return path


@pytest.fixture
def services(database_path, hasher):
    return build_services(database_path, hasher)


@pytest.fixture
def user_store(services):
    return services.user_store


@pytest.fixture
def post_store(services):
    return services.post_store


@pytest.fixture
def user_service(services):
    return services.user_service


@pytest.fixture
def post_service(services):
    return services.post_service


@pytest.fixture
def test_client(tmp_path, hasher):
    """FastAPI test client backed by a fresh database."""
    app_settings = Settings(database_url=str(tmp_path / "social-api.db"), log_level="ERROR")
    app = create_app(app_settings, hasher=hasher)
    with TestClient(app) as client:
        yield client
