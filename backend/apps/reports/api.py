"""
Reports API endpoints.

JSON endpoints for dashboards and CSV downloads for the same data. Every
range defaults to the first of the current month through today.
"""

from datetime import date

from django.http import HttpRequest, HttpResponse
from ninja import Router

from apps.approvals.services import list_approval_log
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context
from apps.core.utils import default_date_range
from apps.reports.exports import (
    approval_audit_csv,
    export_filename,
    leaderboard_csv,
    souls_csv,
)
from apps.reports.schemas import LeaderboardEntry, LeaderboardResponse, SummaryResponse
from apps.reports.services import leaderboard, souls_report, summary

router = Router(tags=["reports"])
bearer_auth = BearerAuth()

REPORT_ERRORS = {400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse}


def _csv_response(content: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@router.get(
    "/leaderboard",
    response={200: LeaderboardResponse, **REPORT_ERRORS},
    auth=bearer_auth,
    operation_id="getLeaderboard",
    summary="Souls per evangelist",
)
def get_leaderboard(
    request: HttpRequest,
    start: date | None = None,
    end: date | None = None,
    organization_id: int | None = None,
) -> LeaderboardResponse:
    """
    Leaderboard for a date range.

    Across every church for platform admins; pass organization_id for one
    church (church admins).
    """
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    rows = leaderboard(ctx, start, end, organization_id)
    return LeaderboardResponse(
        won_from=start,
        won_to=end,
        organization_id=organization_id,
        entries=[
            LeaderboardEntry(
                rank=index,
                evangelist_id=row.evangelist_id,
                evangelist=row.evangelist,
                souls_count=row.souls_count,
            )
            for index, row in enumerate(rows, start=1)
        ],
    )


@router.get(
    "/leaderboard.csv",
    response=REPORT_ERRORS,
    auth=bearer_auth,
    operation_id="exportLeaderboard",
    summary="Download leaderboard CSV",
)
def export_leaderboard(
    request: HttpRequest,
    start: date | None = None,
    end: date | None = None,
    organization_id: int | None = None,
) -> HttpResponse:
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    rows = leaderboard(ctx, start, end, organization_id)
    return _csv_response(leaderboard_csv(rows, start, end), export_filename("leaderboard", start, end))


@router.get(
    "/summary",
    response={200: SummaryResponse, **REPORT_ERRORS},
    auth=bearer_auth,
    operation_id="getReportSummary",
    summary="Totals for a date range",
)
def get_summary(
    request: HttpRequest,
    start: date | None = None,
    end: date | None = None,
    organization_id: int | None = None,
) -> SummaryResponse:
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    totals = summary(ctx, start, end, organization_id)
    return SummaryResponse(
        won_from=totals.won_from,
        won_to=totals.won_to,
        total_souls=totals.total_souls,
        unique_evangelists=totals.unique_evangelists,
    )


@router.get(
    "/souls.csv",
    response=REPORT_ERRORS,
    auth=bearer_auth,
    operation_id="exportSoulsReport",
    summary="Download souls CSV",
)
def export_souls(
    request: HttpRequest,
    start: date | None = None,
    end: date | None = None,
    organization_id: int | None = None,
) -> HttpResponse:
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    souls = souls_report(ctx, start, end, organization_id)
    return _csv_response(souls_csv(souls), export_filename("report", start, end))


@router.get(
    "/approval-audit.csv",
    response={401: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="exportApprovalAudit",
    summary="Download approval audit CSV",
)
def export_approval_audit(
    request: HttpRequest,
    start: date | None = None,
    end: date | None = None,
) -> HttpResponse:
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    entries = list_approval_log(ctx, start, end)
    return _csv_response(
        approval_audit_csv(entries), export_filename("approval-audit", start, end)
    )
