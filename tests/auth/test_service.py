"""Tests for AuthService - backend calls of the two-step flow."""

import pytest

from auth.exceptions import AuthenticationError, FieldValidationError, TransportError
from auth.service import AuthService, parse_session
from auth.types import Credentials, OtpAttempt, Registration
from tests.factories import ADMIN_EMAIL, ADMIN_PASSWORD, make_user


@pytest.fixture
def login_service(config, backend):
    return AuthService.for_login(config, backend)


@pytest.fixture
def register_service(config, backend):
    return AuthService.for_registration(config, backend)


def _user_body(**overrides):
    body = make_user().model_dump(mode="json")
    body.update(overrides)
    return body


# =============================================================================
# PARSE SESSION
# =============================================================================


class TestParseSession:

    def test_prefers_tokens_access(self):
        session = parse_session({"token": "legacy", "tokens": {"access": "acc"}, "user": _user_body()})
        assert session.token == "acc"
        assert session.user.email == ADMIN_EMAIL

    def test_falls_back_to_token(self):
        session = parse_session({"token": "legacy", "user": _user_body()})
        assert session.token == "legacy"

    def test_empty_body_returns_none(self):
        assert parse_session({"message": "Account verified"}) is None

    def test_token_without_user_raises(self):
        with pytest.raises(AuthenticationError):
            parse_session({"token": "t"})

    def test_user_without_token_raises(self):
        with pytest.raises(AuthenticationError):
            parse_session({"user": _user_body()})

    def test_invalid_user_raises(self):
        with pytest.raises(AuthenticationError, match="Invalid user"):
            parse_session({"token": "t", "user": {"id": 1, "email": ""}})

    def test_special_use_domain_accepted(self):
        session = parse_session({"token": "t", "user": _user_body(email="ops@corp.local")})
        assert session.user.email == "ops@corp.local"

    def test_keeps_extra_user_fields(self):
        session = parse_session({"token": "t", "user": _user_body(first_name="Ada")})
        assert session.user.first_name == "Ada"


# =============================================================================
# LOGIN ENDPOINTS
# =============================================================================


class TestLoginService:

    def test_submit_credentials_posts_to_login(self, login_service, fake_backend):
        login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))

        assert fake_backend.calls == [("auth/login", {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})]

    def test_wrong_password_raises_with_backend_message(self, login_service, fake_backend):
        with pytest.raises(AuthenticationError) as exc_info:
            login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password="nope"))

        assert str(exc_info.value) == "Invalid credentials"
        assert exc_info.value.status_code == 401

    def test_verify_returns_session(self, login_service, fake_backend):
        login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        code = fake_backend.code_for(ADMIN_EMAIL)

        outcome = login_service.verify_otp(OtpAttempt(email=ADMIN_EMAIL, code=code))

        assert outcome.email == ADMIN_EMAIL
        assert outcome.session.token.startswith("token-")
        assert outcome.session.user.is_admin is True

    def test_verify_wrong_code_raises(self, login_service, fake_backend):
        login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))

        with pytest.raises(AuthenticationError) as exc_info:
            login_service.verify_otp(OtpAttempt(email=ADMIN_EMAIL, code="000000"))

        assert str(exc_info.value) == "Invalid or expired OTP code"

    def test_verify_without_session_payload_raises(self, config, backend, mocked_http):
        mocked_http.post(backend.url("auth/verify-otp"), json={"message": "ok"})
        service = AuthService.for_login(config, backend)

        with pytest.raises(AuthenticationError, match=config.otp_failed_message):
            service.verify_otp(OtpAttempt(email=ADMIN_EMAIL, code="123456"))

    def test_resend_replaces_code(self, login_service, fake_backend):
        login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))
        first = fake_backend.code_for(ADMIN_EMAIL)

        login_service.resend_otp(ADMIN_EMAIL)

        assert fake_backend.code_for(ADMIN_EMAIL) != first
        assert fake_backend.paths_called()[-1] == "auth/resend-otp"

    def test_offline_raises_transport_error(self, login_service, fake_backend):
        fake_backend.offline = True

        with pytest.raises(TransportError):
            login_service.submit_credentials(Credentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD))


# =============================================================================
# REGISTRATION ENDPOINTS
# =============================================================================


class TestRegistrationService:

    def _registration(self, email="new@acme.com"):
        return Registration(
            username="newbie",
            email=email,
            password="Passw0rd",
            password_confirmation="Passw0rd",
            accept_terms=True,
        )

    def test_register_sends_payload_without_terms(self, register_service, fake_backend):
        register_service.submit_credentials(self._registration())

        path, body = fake_backend.calls[0]
        assert path == "register"
        assert "accept_terms" not in body
        assert body["password_confirmation"] == "Passw0rd"

    def test_taken_email_raises_field_errors(self, register_service, fake_backend):
        with pytest.raises(FieldValidationError) as exc_info:
            register_service.submit_credentials(self._registration(email=ADMIN_EMAIL))

        assert "email" in exc_info.value.field_errors

    def test_verify_without_session_is_allowed(self, register_service, fake_backend):
        register_service.submit_credentials(self._registration())
        code = fake_backend.code_for("new@acme.com")

        outcome = register_service.verify_otp(OtpAttempt(email="new@acme.com", code=code))

        assert outcome.session is None
        assert fake_backend.paths_called() == ["register", "verify-otp"]
        assert fake_backend.accounts["new@acme.com"]["verified"] is True
