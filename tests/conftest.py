"""Shared test fixtures for the auth client test suite."""

import pytest
import responses

from auth.config import AuthConfig
from auth.event_bus import EventBus
from auth.security_logger import SecurityLogger
from auth.session import SessionStore
from auth.types import Session, UserRecord
from clients.backend_client import BackendClient
from tests.factories import (
    API_URL,
    ADMIN_PASSWORD,
    EMPLOYEE_EMAIL,
    EMPLOYEE_PASSWORD,
    make_user,
)
from tests.fake_backend import FakeBackend


# =============================================================================
# CONFIG / CORE FIXTURES
# =============================================================================


@pytest.fixture
def config() -> AuthConfig:
    """Config pointing at the mocked backend."""
    return AuthConfig(api_base_url=API_URL, request_timeout_seconds=2)


@pytest.fixture
def backend(config):
    client = BackendClient(config.api_base_url, timeout_seconds=config.request_timeout_seconds)
    yield client
    client.close()


@pytest.fixture
def security_logger() -> SecurityLogger:
    return SecurityLogger()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(event_bus, security_logger) -> SessionStore:
    """In-memory session store (no persistence)."""
    return SessionStore(event_bus=event_bus, security_logger=security_logger)


@pytest.fixture
def admin_user() -> UserRecord:
    return make_user()


@pytest.fixture
def employee_user() -> UserRecord:
    return make_user(user_id=2, email=EMPLOYEE_EMAIL, is_admin=False)


@pytest.fixture
def admin_session(admin_user) -> Session:
    return Session(token="admin-token", user=admin_user)


@pytest.fixture
def employee_session(employee_user) -> Session:
    return Session(token="employee-token", user=employee_user)


# =============================================================================
# HTTP FIXTURES
# =============================================================================


@pytest.fixture
def mocked_http():
    """Activate responses for the duration of a test."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def fake_backend(mocked_http) -> FakeBackend:
    """Stateful fake of the task manager backend with two accounts."""
    fake = FakeBackend(API_URL)
    fake.add_account(make_user(), ADMIN_PASSWORD)
    fake.add_account(make_user(user_id=2, email=EMPLOYEE_EMAIL, is_admin=False), EMPLOYEE_PASSWORD)
    fake.install(mocked_http)
    return fake
