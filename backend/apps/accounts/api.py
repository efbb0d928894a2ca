"""
Auth API endpoints.

Handles Stytch password authentication flows:
- Registration and login
- Logout (session revocation)
- Current user, memberships and profile
"""

from django.http import HttpRequest
from ninja import Router

from apps.access.services import is_platform_admin, list_memberships_for
from apps.accounts import identity
from apps.accounts.schemas import (
    LoginRequest,
    MembershipInfo,
    MeResponse,
    RegisterRequest,
    SessionResponse,
    UpdateProfileRequest,
    UserInfo,
)
from apps.accounts.services import register_user, sign_in_user, update_profile
from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse, MessageResponse
from apps.core.security import BearerAuth, get_bearer_token, get_request_auth
from apps.core.upstream import store_call

logger = get_logger(__name__)

router = Router(tags=["auth"])
bearer_auth = BearerAuth()


@router.post(
    "/register",
    response={
        201: SessionResponse,
        400: ErrorResponse,
        409: ErrorResponse,
        503: ErrorResponse,
    },
    operation_id="register",
    summary="Create an account",
)
def register(request: HttpRequest, payload: RegisterRequest) -> tuple[int, SessionResponse]:
    """
    Register with email and password.

    The new user is signed in but not yet approved; they join a church by
    submitting an access request.
    """
    user, session = register_user(
        email=payload.email,
        password=payload.password,
        name=payload.name.strip(),
        phone=payload.phone.strip(),
    )
    logger.info("user_registered", user_id=user.pk)
    return 201, SessionResponse(
        session_token=session.session_token,
        session_jwt=session.session_jwt,
        user=UserInfo.from_user(user),
    )


@router.post(
    "/login",
    response={200: SessionResponse, 401: ErrorResponse, 503: ErrorResponse},
    operation_id="login",
    summary="Sign in",
)
def login(request: HttpRequest, payload: LoginRequest) -> SessionResponse:
    """Sign in with email and password."""
    user, session = sign_in_user(email=payload.email, password=payload.password)
    logger.info("user_logged_in", user_id=user.pk)
    return SessionResponse(
        session_token=session.session_token,
        session_jwt=session.session_jwt,
        user=UserInfo.from_user(user),
    )


@router.post(
    "/logout",
    response={200: MessageResponse, 503: ErrorResponse},
    operation_id="logout",
    summary="Sign out",
)
def logout(request: HttpRequest) -> MessageResponse:
    """
    Revoke the bearer session.

    Succeeds for missing or already invalid sessions.
    """
    token = get_bearer_token(request)
    if token:
        identity.sign_out(token)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response={200: MeResponse, 401: ErrorResponse, 503: ErrorResponse},
    auth=bearer_auth,
    operation_id="getCurrentUser",
    summary="Get current user info",
)
def get_current_user(request: HttpRequest) -> MeResponse:
    """
    Get the current user, platform admin flag and church memberships.

    Memberships of every status are listed so onboarding can show pending
    and disabled ones.
    """
    user = get_request_auth(request).require_user()
    with store_call("get_current_user"):
        memberships = list_memberships_for(user.pk)
        platform_admin = is_platform_admin(user.pk)
        infos = [
            MembershipInfo(
                organization_id=m.organization_id,
                organization_name=m.organization.name,
                branch_id=m.branch_id,
                branch_name=m.branch.name if m.branch else None,
                role=m.role,
                status=m.status,
            )
            for m in memberships
        ]
    return MeResponse(
        user=UserInfo.from_user(user),
        is_platform_admin=platform_admin,
        memberships=infos,
    )


@router.patch(
    "/me/profile",
    response={200: UserInfo, 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="updateProfile",
    summary="Update user profile",
)
def update_my_profile(request: HttpRequest, payload: UpdateProfileRequest) -> UserInfo:
    """Update the current user's name and phone."""
    user = get_request_auth(request).require_user()
    user = update_profile(
        user,
        name=payload.name.strip() if payload.name is not None else None,
        phone=payload.phone.strip() if payload.phone is not None else None,
    )
    return UserInfo.from_user(user)
