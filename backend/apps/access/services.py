"""
Membership store - reads and writes of memberships and platform admins.

Callers that need several writes to land together wrap these in
transaction.atomic(); nothing here opens its own transaction except
upsert_membership's conflict retry.
"""

from django.db import IntegrityError, transaction

from apps.access.models import Membership, PlatformAdmin
from apps.access.roles import MembershipStatus, Role
from apps.accounts.models import User
from apps.core.logging import get_logger

logger = get_logger(__name__)


def list_memberships_for(user_id: int, status: MembershipStatus | None = None) -> list[Membership]:
    """All memberships held by a user, optionally filtered by status."""
    queryset = Membership.objects.select_related("organization", "branch").filter(user_id=user_id)
    if status is not None:
        queryset = queryset.filter(status=status)
    return list(queryset.order_by("created_at"))


def upsert_membership(
    user_id: int,
    organization_id: int,
    role: Role,
    status: MembershipStatus,
    branch_id: int | None = None,
) -> Membership:
    """
    Create or update the membership keyed on (user, organization, role).

    Re-running with the same arguments leaves exactly one row.
    """
    defaults = {"branch_id": branch_id, "status": status}
    try:
        with transaction.atomic():
            membership, created = Membership.objects.update_or_create(
                user_id=user_id,
                organization_id=organization_id,
                role=role,
                defaults=defaults,
            )
    except IntegrityError:
        # Concurrent insert won the race; apply our values to the winner
        membership = Membership.objects.get(
            user_id=user_id, organization_id=organization_id, role=role
        )
        Membership.objects.filter(pk=membership.pk).update(**defaults)
        membership.refresh_from_db()
        created = False

    logger.info(
        "membership_upserted",
        user_id=user_id,
        organization_id=organization_id,
        branch_id=branch_id,
        role=str(role),
        status=str(status),
        created=created,
    )
    return membership


def is_platform_admin(user_id: int) -> bool:
    return PlatformAdmin.objects.filter(user_id=user_id).exists()


def grant_platform_admin(user: User, granted_by: User | None = None) -> PlatformAdmin:
    """Flag a user as platform admin. Idempotent."""
    admin, created = PlatformAdmin.objects.get_or_create(
        user=user, defaults={"granted_by": granted_by}
    )
    if created:
        logger.info("platform_admin_granted", user_id=user.pk)
    return admin


def revoke_platform_admin(user: User) -> bool:
    """Remove the platform admin flag. Returns True if one was removed."""
    deleted, _ = PlatformAdmin.objects.filter(user=user).delete()
    if deleted:
        logger.info("platform_admin_revoked", user_id=user.pk)
    return bool(deleted)
