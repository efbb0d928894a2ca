"""
Reports - leaderboard and totals over recorded souls.
"""

from dataclasses import dataclass
from datetime import date

from django.db.models import Count, QuerySet

from apps.access.context import AuthContext
from apps.access.permissions import (
    can_view_organization_reports,
    can_view_platform_reports,
    require_permission,
)
from apps.core.exceptions import InvalidRequest
from apps.core.upstream import store_call
from apps.souls.models import Soul

UNKNOWN_EVANGELIST = "Unknown"


@dataclass
class LeaderboardRow:
    evangelist_id: int
    evangelist: str
    souls_count: int


@dataclass
class ReportSummary:
    total_souls: int
    unique_evangelists: int
    won_from: date
    won_to: date


def _souls_in_range(
    ctx: AuthContext,
    won_from: date,
    won_to: date,
    organization_id: int | None,
) -> "QuerySet[Soul]":
    """
    Souls won in the inclusive range, after the report permission check.

    Church-wide reports need church admin rights; reports across every
    church are for platform admins.
    """
    if won_from > won_to:
        raise InvalidRequest("The start date must not be after the end date.")
    if organization_id is None:
        require_permission(ctx, can_view_platform_reports(ctx), "Platform admins only.")
    else:
        require_permission(
            ctx,
            can_view_organization_reports(ctx, organization_id),
            "Only church admins can view this church's reports.",
        )

    queryset = Soul.objects.filter(won_on__gte=won_from, won_on__lte=won_to)
    if organization_id is not None:
        queryset = queryset.filter(organization_id=organization_id)
    return queryset


def leaderboard(
    ctx: AuthContext,
    won_from: date,
    won_to: date,
    organization_id: int | None = None,
) -> list[LeaderboardRow]:
    """Souls per evangelist in the range, most first, ties by name."""
    rows = (
        _souls_in_range(ctx, won_from, won_to, organization_id)
        .values("evangelist_id", "evangelist__name", "evangelist__email")
        .annotate(souls_count=Count("id"))
        .order_by("-souls_count", "evangelist__name", "evangelist__email")
    )
    with store_call("leaderboard"):
        return [
            LeaderboardRow(
                evangelist_id=row["evangelist_id"],
                evangelist=row["evangelist__name"] or row["evangelist__email"] or UNKNOWN_EVANGELIST,
                souls_count=row["souls_count"],
            )
            for row in rows
        ]


def summary(
    ctx: AuthContext,
    won_from: date,
    won_to: date,
    organization_id: int | None = None,
) -> ReportSummary:
    """Total souls and distinct evangelists in the range."""
    queryset = _souls_in_range(ctx, won_from, won_to, organization_id)
    with store_call("report_summary"):
        totals = queryset.aggregate(
            total_souls=Count("id"),
            unique_evangelists=Count("evangelist_id", distinct=True),
        )
    return ReportSummary(
        total_souls=totals["total_souls"],
        unique_evangelists=totals["unique_evangelists"],
        won_from=won_from,
        won_to=won_to,
    )


def souls_report(
    ctx: AuthContext,
    won_from: date,
    won_to: date,
    organization_id: int | None = None,
) -> list[Soul]:
    """Every soul in the range, newest first, for the souls export."""
    queryset = _souls_in_range(ctx, won_from, won_to, organization_id).select_related("evangelist")
    with store_call("souls_report"):
        return list(queryset.order_by("-won_on", "-created_at", "-id"))
