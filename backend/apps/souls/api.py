"""
Souls API endpoints.

Evangelists record souls; everyone reads the souls their role lets them see.
"""

from django.http import HttpRequest
from ninja import Query, Router

from apps.core.exceptions import NotFound
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context
from apps.souls.schemas import SoulCreateRequest, SoulFilterParams, SoulResponse
from apps.souls.services import RecordFilter, SoulFields, insert_record, list_records

router = Router(tags=["souls"])
bearer_auth = BearerAuth()


@router.post(
    "/",
    response={201: SoulResponse, 400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="recordSoul",
    summary="Record a soul",
)
def record_soul(request: HttpRequest, payload: SoulCreateRequest) -> tuple[int, SoulResponse]:
    """Record a soul won by the calling evangelist."""
    user, ctx = get_auth_context(request)
    soul = insert_record(
        ctx,
        user,
        payload.organization_id,
        SoulFields(
            name=payload.name,
            phone=payload.phone,
            email=payload.email or "",
            residence=payload.residence,
            notes=payload.notes,
            won_on=payload.won_on,
        ),
    )
    # Re-read through the visibility filter so the response has relations loaded
    stored = list_records(ctx, RecordFilter(record_id=soul.pk))
    return 201, SoulResponse.from_soul(stored[0] if stored else soul)


@router.get(
    "/",
    response={200: list[SoulResponse], 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="listSouls",
    summary="List souls",
)
def list_souls(request: HttpRequest, filters: Query[SoulFilterParams]) -> list[SoulResponse]:
    """List souls visible to the caller, newest first."""
    _, ctx = get_auth_context(request)
    souls = list_records(
        ctx,
        RecordFilter(
            organization_id=filters.organization_id,
            branch_id=filters.branch_id,
            evangelist_id=filters.evangelist_id,
            won_from=filters.won_from,
            won_to=filters.won_to,
        ),
    )
    return [SoulResponse.from_soul(soul) for soul in souls]


@router.get(
    "/{soul_id}",
    response={200: SoulResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="getSoul",
    summary="Get a soul",
)
def get_soul(request: HttpRequest, soul_id: int) -> SoulResponse:
    """Get one soul. Souls outside the caller's view are reported as not found."""
    _, ctx = get_auth_context(request)
    souls = list_records(ctx, RecordFilter(record_id=soul_id))
    if not souls:
        raise NotFound("Soul not found.")
    return SoulResponse.from_soul(souls[0])
