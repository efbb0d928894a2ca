"""
Authentication context for request lifecycle.

Provides a typed container for authentication state that middleware
populates and endpoints consume.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from apps.core.exceptions import AuthenticationRequired, UpstreamUnavailable

if TYPE_CHECKING:
    from apps.access.context import AuthContext
    from apps.accounts.models import User


@dataclass
class RequestAuth:
    """
    Authentication state attached to requests by StytchAuthMiddleware.

    Attributes:
        user: The authenticated local User, or None
        failed: True if a bearer token was presented but rejected
        unavailable: True if the identity provider could not be reached
        timed_out: True if the identity provider call hit its deadline
    """

    user: "User | None" = None
    failed: bool = False
    unavailable: bool = False
    timed_out: bool = False
    _access: "AuthContext | None" = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> "User":
        """
        Get the authenticated user or raise.

        Raises:
            UpstreamUnavailable: If the session could not be verified upstream
            AuthenticationRequired: If there is no valid session
        """
        if self.unavailable:
            raise UpstreamUnavailable(
                "Could not verify your session right now.", timed_out=self.timed_out
            )
        if self.user is None:
            raise AuthenticationRequired("Not logged in.")
        return self.user

    def access(self) -> "AuthContext":
        """
        Resolve the user's AuthContext once per request.

        The result is cached on this object only, so every new request
        (and every session refresh) sees current memberships.
        """
        user = self.require_user()
        if self._access is None:
            from apps.access.resolver import resolve

            self._access = resolve(user.pk)
        return self._access
