"""
Stytch client wrapper.

Provides a singleton client instance configured from Django settings.
"""

from functools import lru_cache

import stytch
from django.conf import settings


@lru_cache(maxsize=1)
def get_stytch_client() -> stytch.Client:
    """
    Get configured Stytch consumer client (singleton).

    HarvestLog users sign in with email and password before they belong to
    any church, so the consumer (not B2B) API is used.
    """
    kwargs = {}
    if settings.STYTCH_ENVIRONMENT:
        kwargs["environment"] = settings.STYTCH_ENVIRONMENT
    return stytch.Client(
        project_id=settings.STYTCH_PROJECT_ID,
        secret=settings.STYTCH_SECRET,
        **kwargs,
    )
