"""
Tests for the identity provider adapter.

The Stytch client is mocked; every provider failure must surface as one of
the domain errors.
"""

import time
from dataclasses import dataclass
from unittest.mock import MagicMock, patch

import pytest
from stytch.core.response_base import StytchError, StytchErrorDetails

from apps.accounts import identity
from apps.core.exceptions import (
    AuthenticationRequired,
    Conflict,
    InvalidRequest,
    UpstreamUnavailable,
)


@dataclass
class MockPasswordResponse:
    user_id: str
    session_token: str
    session_jwt: str


def stytch_error(status_code: int, error_type: str, message: str = "") -> StytchError:
    return StytchError(
        StytchErrorDetails(
            status_code=status_code,
            request_id="test-request-id",
            error_type=error_type,
            error_message=message or error_type,
        )
    )


@pytest.fixture
def stytch_client():
    client = MagicMock()
    with patch("apps.accounts.identity.get_stytch_client", return_value=client):
        yield client


class TestSignUp:
    """Tests for identity.sign_up."""

    def test_returns_session(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.create.return_value = MockPasswordResponse(
            user_id="user-test-1", session_token="tok", session_jwt="jwt"
        )

        session = identity.sign_up("mary@example.com", "s3cure-Passw0rd", name="Mary")

        assert session == identity.IdentitySession(
            user_id="user-test-1", session_token="tok", session_jwt="jwt"
        )
        kwargs = stytch_client.passwords.create.call_args.kwargs
        assert kwargs["email"] == "mary@example.com"
        assert kwargs["untrusted_metadata"]["full_name"] == "Mary"

    def test_duplicate_email_is_conflict(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.create.side_effect = stytch_error(400, "duplicate_email")

        with pytest.raises(Conflict):
            identity.sign_up("mary@example.com", "s3cure-Passw0rd")

    def test_weak_password_is_invalid(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.create.side_effect = stytch_error(
            400, "weak_password", "Password is too weak."
        )

        with pytest.raises(InvalidRequest) as exc:
            identity.sign_up("mary@example.com", "password")

        assert exc.value.message == "Password is too weak."

    def test_provider_outage_is_unavailable(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.create.side_effect = stytch_error(500, "internal_server_error")

        with pytest.raises(UpstreamUnavailable):
            identity.sign_up("mary@example.com", "s3cure-Passw0rd")


class TestSignIn:
    """Tests for identity.sign_in."""

    def test_returns_session(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.authenticate.return_value = MockPasswordResponse(
            user_id="user-test-1", session_token="tok", session_jwt="jwt"
        )

        assert identity.sign_in("mary@example.com", "pw").session_jwt == "jwt"

    @pytest.mark.parametrize(
        ("status_code", "error_type"),
        [(400, "email_not_found"), (401, "unauthorized_credentials"), (404, "user_not_found")],
    )
    def test_bad_credentials(self, stytch_client: MagicMock, status_code: int, error_type: str) -> None:
        """Unknown email and wrong password both read as bad credentials."""
        stytch_client.passwords.authenticate.side_effect = stytch_error(status_code, error_type)

        with pytest.raises(AuthenticationRequired):
            identity.sign_in("mary@example.com", "wrong")

    def test_rate_limited_is_unavailable(self, stytch_client: MagicMock) -> None:
        stytch_client.passwords.authenticate.side_effect = stytch_error(429, "too_many_requests")

        with pytest.raises(UpstreamUnavailable):
            identity.sign_in("mary@example.com", "pw")

    def test_slow_provider_times_out(self, stytch_client: MagicMock, settings) -> None:
        settings.IDENTITY_TIMEOUT_SECONDS = 0.05
        stytch_client.passwords.authenticate.side_effect = lambda **kwargs: time.sleep(1)

        with pytest.raises(UpstreamUnavailable) as exc:
            identity.sign_in("mary@example.com", "pw")

        assert exc.value.timed_out is True


class TestSignOut:
    """Tests for identity.sign_out."""

    def test_revokes_session(self, stytch_client: MagicMock) -> None:
        identity.sign_out("jwt")

        stytch_client.sessions.revoke.assert_called_once_with(session_jwt="jwt")

    def test_already_invalid_session_is_fine(self, stytch_client: MagicMock) -> None:
        stytch_client.sessions.revoke.side_effect = stytch_error(404, "session_not_found")

        identity.sign_out("jwt")

    def test_provider_outage_is_unavailable(self, stytch_client: MagicMock) -> None:
        stytch_client.sessions.revoke.side_effect = stytch_error(503, "service_unavailable")

        with pytest.raises(UpstreamUnavailable):
            identity.sign_out("jwt")


class TestVerify:
    """Tests for identity.verify."""

    def test_returns_identity_user(self, stytch_client: MagicMock) -> None:
        user = MagicMock(user_id="user-test-1")
        user.emails = [MagicMock(email="mary@example.com")]
        user.name.first_name = "Mary"
        user.name.last_name = "Wanjiku"
        stytch_client.sessions.authenticate.return_value = MagicMock(user=user)

        result = identity.verify("jwt")

        assert result == identity.IdentityUser(
            user_id="user-test-1", email="mary@example.com", name="Mary Wanjiku"
        )

    def test_expired_session(self, stytch_client: MagicMock) -> None:
        stytch_client.sessions.authenticate.side_effect = stytch_error(401, "session_not_found")

        with pytest.raises(AuthenticationRequired):
            identity.verify("jwt")
