"""
Tests for permission predicates.

Predicates are pure functions of the AuthContext, so these tests build
contexts directly and need no database.
"""

import pytest

from apps.access.context import AuthContext
from apps.access.permissions import (
    can_approve,
    can_manage_organization,
    can_manage_sub_unit,
    can_record,
    can_view_organization_reports,
    can_view_platform_reports,
    require_permission,
)
from apps.access.roles import Role
from apps.core.exceptions import PermissionDenied, UpstreamUnavailable
from tests.conftest import make_context

CHURCH = 1
OTHER_CHURCH = 2
RUIRU = 10
THIKA = 11


class TestEmptyContext:
    """A user with no memberships and no platform admin row."""

    def test_satisfies_no_predicate(self) -> None:
        """Should be denied everything."""
        ctx = make_context(is_approved=True)

        assert can_view_platform_reports(ctx) is False
        assert can_manage_organization(ctx, CHURCH) is False
        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is False
        assert can_record(ctx, CHURCH) is False
        assert can_approve(ctx, CHURCH) is False
        assert can_view_organization_reports(ctx, CHURCH) is False


class TestPastorAdmin:
    """Active pastor_admin in one church."""

    def test_manages_own_church_only(self) -> None:
        """Should manage the church the membership names and no other."""
        ctx = make_context(grants=[(CHURCH, None, Role.PASTOR_ADMIN)])

        assert can_manage_organization(ctx, CHURCH) is True
        assert can_manage_organization(ctx, OTHER_CHURCH) is False

    def test_approves_and_views_reports_for_own_church(self) -> None:
        """Should approve and read reports in the church only."""
        ctx = make_context(grants=[(CHURCH, None, Role.PASTOR_ADMIN)])

        assert can_approve(ctx, CHURCH) is True
        assert can_view_organization_reports(ctx, CHURCH) is True
        assert can_approve(ctx, OTHER_CHURCH) is False
        assert can_view_platform_reports(ctx) is False

    def test_manages_every_branch(self) -> None:
        """Should manage any branch of the church."""
        ctx = make_context(grants=[(CHURCH, None, Role.PASTOR_ADMIN)])

        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is True
        assert can_manage_sub_unit(ctx, CHURCH, THIKA) is True

    def test_super_admin_counts_as_church_admin(self) -> None:
        """Should treat super_admin like pastor_admin within the church."""
        ctx = make_context(grants=[(CHURCH, None, Role.SUPER_ADMIN)])

        assert can_manage_organization(ctx, CHURCH) is True
        assert can_view_platform_reports(ctx) is False


class TestBranchAdmin:
    """Branch admins are scoped to their branch."""

    def test_manages_only_granted_branch(self) -> None:
        """Should manage the branch on the grant and not its siblings."""
        ctx = make_context(grants=[(CHURCH, RUIRU, Role.BRANCH_ADMIN)])

        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is True
        assert can_manage_sub_unit(ctx, CHURCH, THIKA) is False

    def test_grant_without_branch_covers_church(self) -> None:
        """Should manage every branch when the grant names none."""
        ctx = make_context(grants=[(CHURCH, None, Role.BRANCH_ADMIN)])

        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is True
        assert can_manage_sub_unit(ctx, CHURCH, THIKA) is True

    def test_cannot_manage_church_or_approve(self) -> None:
        """Should not get church-wide admin rights."""
        ctx = make_context(grants=[(CHURCH, RUIRU, Role.BRANCH_ADMIN)])

        assert can_manage_organization(ctx, CHURCH) is False
        assert can_approve(ctx, CHURCH) is False
        assert can_manage_sub_unit(ctx, OTHER_CHURCH, RUIRU) is False


class TestEvangelist:
    """can_record needs an active evangelist grant and profile approval."""

    def test_approved_evangelist_can_record(self) -> None:
        """Should allow recording in the church of the grant."""
        ctx = make_context(grants=[(CHURCH, RUIRU, Role.EVANGELIST)], is_approved=True)

        assert can_record(ctx, CHURCH) is True
        assert can_record(ctx, OTHER_CHURCH) is False

    def test_unapproved_evangelist_cannot_record(self) -> None:
        """Should deny recording until the profile is approved."""
        ctx = make_context(grants=[(CHURCH, RUIRU, Role.EVANGELIST)], is_approved=False)

        assert can_record(ctx, CHURCH) is False

    def test_evangelist_cannot_manage(self) -> None:
        """Should not manage, approve or read church reports."""
        ctx = make_context(grants=[(CHURCH, RUIRU, Role.EVANGELIST)], is_approved=True)

        assert can_manage_organization(ctx, CHURCH) is False
        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is False
        assert can_approve(ctx, CHURCH) is False

    def test_senior_role_wins_in_same_church(self) -> None:
        """Should judge by the most senior role held in the church."""
        ctx = make_context(
            grants=[(CHURCH, None, Role.EVANGELIST), (CHURCH, None, Role.PASTOR_ADMIN)],
            is_approved=True,
        )

        assert ctx.highest_org_role(CHURCH) == Role.PASTOR_ADMIN
        assert can_manage_organization(ctx, CHURCH) is True
        assert can_record(ctx, CHURCH) is False


class TestPlatformAdmin:
    """Platform admin status is independent of and senior to memberships."""

    def test_without_memberships_sees_everything(self) -> None:
        """Should view platform reports and manage any church."""
        ctx = make_context(is_platform_admin=True)

        assert can_view_platform_reports(ctx) is True
        assert can_manage_organization(ctx, CHURCH) is True
        assert can_manage_organization(ctx, OTHER_CHURCH) is True
        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is True
        assert can_approve(ctx, OTHER_CHURCH) is True

    def test_does_not_record_without_evangelist_grant(self) -> None:
        """Should not record souls just by being a platform admin."""
        ctx = make_context(is_platform_admin=True, is_approved=True)

        assert can_record(ctx, CHURCH) is False


class TestDegradedContext:
    """A context that could not be resolved denies everything."""

    def test_every_predicate_is_false(self) -> None:
        """Should deny even with grants that would otherwise allow."""
        ctx = AuthContext(
            user_id=1,
            is_platform_admin=True,
            grants=make_context(grants=[(CHURCH, None, Role.PASTOR_ADMIN)]).grants,
            is_approved=True,
            degraded=True,
        )

        assert can_view_platform_reports(ctx) is False
        assert can_manage_organization(ctx, CHURCH) is False
        assert can_manage_sub_unit(ctx, CHURCH, RUIRU) is False
        assert can_record(ctx, CHURCH) is False
        assert can_approve(ctx, CHURCH) is False

    def test_unavailable_constructor(self) -> None:
        """Should build an empty degraded context carrying the timeout flag."""
        ctx = AuthContext.unavailable(7, timed_out=True)

        assert ctx.degraded is True
        assert ctx.timed_out is True
        assert ctx.grants == frozenset()


class TestRequirePermission:
    """Tests for require_permission."""

    def test_allowed_passes(self) -> None:
        """Should return without raising."""
        require_permission(make_context(), True)

    def test_denied_raises_permission_denied(self) -> None:
        """Should raise PermissionDenied with the given message."""
        with pytest.raises(PermissionDenied, match="Admins only"):
            require_permission(make_context(), False, "Admins only")

    def test_degraded_raises_unavailable(self) -> None:
        """Should report an unknown answer as unavailable, not denied."""
        with pytest.raises(UpstreamUnavailable) as exc_info:
            require_permission(AuthContext.unavailable(1, timed_out=True), False)

        assert exc_info.value.reason == "timed_out"
        assert exc_info.value.status_code == 503
