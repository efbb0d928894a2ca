"""
Identity provider adapter.

The only module that talks to Stytch. Every call is bounded by
IDENTITY_TIMEOUT_SECONDS and every provider failure is mapped onto the
domain error taxonomy:

- bad credentials / invalid session -> AuthenticationRequired
- duplicate email on sign-up        -> Conflict
- rejected input (weak password)    -> InvalidRequest
- network failure, 5xx, timeout     -> UpstreamUnavailable
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings
from stytch.core.response_base import StytchError

from apps.accounts.stytch_client import get_stytch_client
from apps.core.exceptions import (
    AuthenticationRequired,
    Conflict,
    InvalidRequest,
    UpstreamUnavailable,
)
from apps.core.logging import get_logger
from apps.core.upstream import call_with_timeout

logger = get_logger(__name__)

DUPLICATE_ERROR_TYPES = frozenset({"duplicate_email", "email_already_exists"})


@dataclass(frozen=True)
class IdentitySession:
    """Session issued by the identity provider."""

    user_id: str
    session_token: str
    session_jwt: str


@dataclass(frozen=True)
class IdentityUser:
    """User behind a verified session."""

    user_id: str
    email: str
    name: str = ""


def _error_type(e: StytchError) -> str:
    return (e.details.error_type or "").lower()


def _raise_for_stytch_error(e: StytchError, operation: str) -> None:
    status = e.details.status_code or 0
    logger.warning(
        "identity_provider_error",
        operation=operation,
        status=status,
        error_type=e.details.error_type,
    )
    if status >= 500 or status == 429:
        raise UpstreamUnavailable("The identity service is temporarily unavailable.") from e
    if _error_type(e) in DUPLICATE_ERROR_TYPES:
        raise Conflict("An account with this email already exists.") from e
    if status in (401, 404):
        raise AuthenticationRequired("Invalid email or password.") from e
    raise InvalidRequest(e.details.error_message or "Request rejected by identity service.") from e


def _session_from(response: Any) -> IdentitySession:
    return IdentitySession(
        user_id=response.user_id,
        session_token=response.session_token,
        session_jwt=response.session_jwt,
    )


def _full_name(user: Any) -> str:
    name = getattr(user, "name", None)
    if name is None:
        return ""
    parts = [getattr(name, "first_name", "") or "", getattr(name, "last_name", "") or ""]
    return " ".join(p for p in parts if p)


def sign_up(email: str, password: str, name: str = "", phone: str = "") -> IdentitySession:
    """Create a password user and open a session."""
    client = get_stytch_client()
    try:
        response = call_with_timeout(
            client.passwords.create,
            operation="sign_up",
            email=email,
            password=password,
            session_duration_minutes=settings.STYTCH_SESSION_DURATION_MINUTES,
            untrusted_metadata={"full_name": name, "phone": phone},
        )
    except StytchError as e:
        _raise_for_stytch_error(e, "sign_up")
        raise
    return _session_from(response)


def sign_in(email: str, password: str) -> IdentitySession:
    """Authenticate email and password and open a session."""
    client = get_stytch_client()
    try:
        response = call_with_timeout(
            client.passwords.authenticate,
            operation="sign_in",
            email=email,
            password=password,
            session_duration_minutes=settings.STYTCH_SESSION_DURATION_MINUTES,
        )
    except StytchError as e:
        if e.details.status_code == 400 and _error_type(e) != "weak_password":
            # Stytch reports unknown email/password pairs as 400s
            raise AuthenticationRequired("Invalid email or password.") from e
        _raise_for_stytch_error(e, "sign_in")
        raise
    return _session_from(response)


def sign_out(session_jwt: str) -> None:
    """Revoke a session. An already invalid session is not an error."""
    client = get_stytch_client()
    try:
        call_with_timeout(client.sessions.revoke, operation="sign_out", session_jwt=session_jwt)
    except StytchError as e:
        if (e.details.status_code or 0) >= 500:
            _raise_for_stytch_error(e, "sign_out")
        logger.info("session_already_invalid")


def verify(session_jwt: str) -> IdentityUser:
    """
    Verify a session JWT and return the user behind it.

    Raises:
        AuthenticationRequired: Token expired, revoked or malformed
        UpstreamUnavailable: Provider unreachable or slow
    """
    client = get_stytch_client()
    try:
        response = call_with_timeout(
            client.sessions.authenticate, operation="verify", session_jwt=session_jwt
        )
    except StytchError as e:
        if (e.details.status_code or 0) >= 500:
            _raise_for_stytch_error(e, "verify")
        raise AuthenticationRequired("Invalid or expired session.") from e

    user = response.user
    emails = getattr(user, "emails", None) or []
    email = emails[0].email if emails else ""
    return IdentityUser(user_id=user.user_id, email=email, name=_full_name(user))
