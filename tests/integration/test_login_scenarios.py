"""
End-to-end login and registration against the fake backend.

Flow, store, navigator and event bus are wired the way the application
shell wires them.
"""

import pytest

from auth.flow import AuthFlow
from auth.profile import ProfileService
from auth.storage import FileSessionStorage
from auth.session import SessionStore
from auth.types import AuthState, Credentials, Registration
from routing.navigator import NavigationStatus, Navigator
from routing.routes import default_routes
from tests.factories import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    EMPLOYEE_EMAIL,
    EMPLOYEE_PASSWORD,
    make_user,
)


@pytest.fixture
def navigator(config, store, event_bus, security_logger):
    nav = Navigator(default_routes(), store, config, security_logger)
    nav.attach(event_bus)
    return nav


@pytest.fixture
def login_flow(config, backend, store, security_logger, navigator):
    navigator.navigate("/login")
    return AuthFlow.for_login(
        config,
        backend,
        store,
        security_logger=security_logger,
        navigate=navigator.navigate,
    )


class TestAdminLogin:

    @pytest.mark.asyncio
    async def test_credentials_then_otp_step(self, login_flow, fake_backend):
        assert await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))

        assert login_flow.state is AuthState.AWAITING_OTP
        assert login_flow.email == "a@b.com"

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_otp_step(self, login_flow, fake_backend, navigator):
        await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))

        assert await login_flow.verify("000000") is None

        assert login_flow.state is AuthState.AWAITING_OTP
        assert login_flow.email == "a@b.com"
        assert login_flow.errors.message
        assert navigator.current.path == "/login"

    @pytest.mark.asyncio
    async def test_correct_code_lands_on_admin_dashboard(self, login_flow, fake_backend, store, navigator):
        await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        assert fake_backend.code_for(ADMIN_EMAIL) == "123456"

        await login_flow.verify("123456")

        assert store.read().user.is_admin is True
        assert navigator.current.path == "/admin/dashboard"
        assert navigator.current.status is NavigationStatus.ALLOWED


class TestGuardedNavigation:

    def test_anonymous_user_sent_to_login(self, navigator):
        assert navigator.navigate("/admin/tasks").path == "/login"

    @pytest.mark.asyncio
    async def test_employee_sent_to_own_landing_page(self, login_flow, fake_backend, navigator):
        await login_flow.submit_credentials(Credentials(email=EMPLOYEE_EMAIL, password=EMPLOYEE_PASSWORD))
        await login_flow.verify(fake_backend.code_for(EMPLOYEE_EMAIL))

        result = navigator.navigate("/admin/users")

        assert result.path == "/employe/dashboard"
        assert result.status is NavigationStatus.REDIRECTED

    @pytest.mark.asyncio
    async def test_logout_returns_to_login(self, login_flow, fake_backend, navigator, config, backend, store):
        await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        await login_flow.verify(fake_backend.code_for(ADMIN_EMAIL))

        ProfileService(config, backend, store).logout()

        assert navigator.current.path == "/login"
        assert navigator.navigate("/admin/dashboard").path == "/login"


class TestResend:

    @pytest.mark.asyncio
    async def test_resend_twice_keeps_state_and_input(self, login_flow, fake_backend):
        await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        login_flow.set_otp_code("12345")

        await login_flow.resend()
        await login_flow.resend()

        assert login_flow.state is AuthState.AWAITING_OTP
        assert login_flow.otp_code == "12345"

    @pytest.mark.asyncio
    async def test_previous_code_rejected_after_resend(self, login_flow, fake_backend, store):
        await login_flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        first = fake_backend.code_for(ADMIN_EMAIL)

        await login_flow.resend()

        assert await login_flow.verify(first) is None
        assert store.read() is None


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_verify_then_login(self, config, backend, store, security_logger, fake_backend):
        registration = AuthFlow.for_registration(config, backend, store, security_logger=security_logger)
        await registration.submit_credentials(
            Registration(
                username="newbie",
                email="new@acme.com",
                password="Passw0rd",
                password_confirmation="Passw0rd",
                accept_terms=True,
            )
        )
        assert await registration.verify(fake_backend.code_for("new@acme.com")) == "/login"
        assert store.read() is None

        login = AuthFlow.for_login(config, backend, store, security_logger=security_logger)
        await login.submit_credentials(Credentials(email="new@acme.com", password="Passw0rd"))
        route = await login.verify(fake_backend.code_for("new@acme.com"))

        assert route == "/employe/dashboard"
        assert store.current_user.is_verified is True


class TestPersistence:

    @pytest.mark.asyncio
    async def test_session_survives_restart(self, config, backend, fake_backend, tmp_path):
        storage = FileSessionStorage(tmp_path / "session.json")
        flow = AuthFlow.for_login(config, backend, SessionStore(storage=storage))
        await flow.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        await flow.verify(fake_backend.code_for(ADMIN_EMAIL))

        restored = SessionStore(storage=storage).restore()

        assert restored.user.email == ADMIN_EMAIL
        assert restored.token.startswith("token-")


class TestSpecialUseDomains:

    @pytest.mark.asyncio
    async def test_local_domain_account_logs_in(self, login_flow, fake_backend, store, navigator):
        fake_backend.add_account(make_user(user_id=7, email="ops@corp.local", is_admin=True), "Secret1")
        await login_flow.submit_credentials(Credentials(email="ops@corp.local", password="Secret1"))

        route = await login_flow.verify(fake_backend.code_for("ops@corp.local"))

        assert route == "/admin/dashboard"
        assert login_flow.state is AuthState.AUTHENTICATED
        assert not login_flow.errors
        assert store.current_user.email == "ops@corp.local"
        assert navigator.current.path == "/admin/dashboard"
