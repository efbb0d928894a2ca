"""
Account services - keep local users in step with the identity provider.
"""

from django.db import IntegrityError, transaction

from apps.accounts import identity
from apps.accounts.identity import IdentitySession, IdentityUser
from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.core.upstream import store_call

logger = get_logger(__name__)


def get_or_create_user_from_identity(
    identity_user: IdentityUser,
    name: str = "",
    phone: str = "",
) -> User:
    """
    Get or create the local User for a verified identity.

    Matches on stytch_user_id first, then links a pre-existing user with the
    same email (e.g. one created by an admin or the createsuperuser command).
    Profile fields are only filled when empty, so local edits win.
    """
    with store_call("sync_user"):
        user = User.objects.filter(stytch_user_id=identity_user.user_id).first()
        if user is not None:
            return user

        with transaction.atomic():
            user = User.objects.select_for_update().filter(email__iexact=identity_user.email).first()
            if user is not None:
                user.stytch_user_id = identity_user.user_id
                user.name = user.name or name or identity_user.name
                user.phone = user.phone or phone
                user.save(update_fields=["stytch_user_id", "name", "phone", "updated_at"])
                logger.info("user_linked_to_identity", user_id=user.pk)
                return user

            try:
                with transaction.atomic():
                    user = User.objects.create_user(
                        email=identity_user.email,
                        stytch_user_id=identity_user.user_id,
                        name=name or identity_user.name,
                        phone=phone,
                    )
            except IntegrityError:
                # Concurrent first request won the race, fetch the winner
                return User.objects.get(stytch_user_id=identity_user.user_id)

    logger.info("user_created", user_id=user.pk)
    return user


def register_user(
    email: str,
    password: str,
    name: str,
    phone: str = "",
) -> tuple[User, IdentitySession]:
    """
    Register with the identity provider and create the local user.

    New users start unapproved; they join a church through an access request.
    """
    session = identity.sign_up(email=email, password=password, name=name, phone=phone)
    user = get_or_create_user_from_identity(
        IdentityUser(user_id=session.user_id, email=email, name=name),
        name=name,
        phone=phone,
    )
    return user, session


def sign_in_user(email: str, password: str) -> tuple[User, IdentitySession]:
    """Authenticate credentials and return the local user with the new session."""
    session = identity.sign_in(email=email, password=password)
    user = get_or_create_user_from_identity(IdentityUser(user_id=session.user_id, email=email))
    return user, session


def update_profile(user: User, name: str | None = None, phone: str | None = None) -> User:
    """Update the user's display name and phone."""
    update_fields = ["updated_at"]
    if name is not None:
        user.name = name
        update_fields.append("name")
    if phone is not None:
        user.phone = phone
        update_fields.append("phone")
    with store_call("update_profile"):
        user.save(update_fields=update_fields)
    return user
