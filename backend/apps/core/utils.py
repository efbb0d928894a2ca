"""
Core utility functions.
"""

from datetime import date
from typing import cast, overload

from django.http import HttpRequest
from django.utils import timezone
from django.utils.text import slugify


@overload
def get_client_ip(request: HttpRequest) -> str | None: ...


@overload
def get_client_ip(request: HttpRequest, default: str) -> str: ...


def get_client_ip(request: HttpRequest, default: str | None = None) -> str | None:
    """
    Extract client IP from X-Forwarded-For or REMOTE_ADDR.

    Handles the case where X-Forwarded-For contains multiple IPs
    (from proxy chain) by taking the first (original client).
    """
    x_forwarded_for: str | None = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    remote_addr = cast(str | None, request.META.get("REMOTE_ADDR"))
    if remote_addr is not None:
        return remote_addr
    return default


def make_slug(name: str, slug: str | None = None) -> str:
    """Use the given slug, or derive one from the name, always lowercase."""
    return slugify((slug or "").strip() or name).lower()


def default_date_range(
    start: date | None = None, end: date | None = None
) -> tuple[date, date]:
    """Fill a missing report range: first day of the current month through today."""
    today = timezone.localdate()
    return start or today.replace(day=1), end or today
