"""
Bounded calls to external collaborators.

Two helpers turn store and identity-provider failures into
UpstreamUnavailable, flagging timeouts so callers can tell
"timed out" apart from "failed":

    with store_call("approve_request"):
        ...ORM work...

    session = call_with_timeout(client.passwords.authenticate, email=..., operation="sign_in")
"""

from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import contextmanager
from typing import Any, TypeVar

from django.conf import settings
from django.db import InterfaceError, OperationalError

from apps.core.exceptions import UpstreamUnavailable
from apps.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATE for query_canceled (raised by statement_timeout)
QUERY_CANCELED_SQLSTATE = "57014"

_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="upstream")


def is_statement_timeout(exc: BaseException) -> bool:
    """Check whether a database error was caused by statement_timeout."""
    cause = exc.__cause__ or exc
    if getattr(cause, "sqlstate", None) == QUERY_CANCELED_SQLSTATE:
        return True
    return "statement timeout" in str(exc).lower()


@contextmanager
def store_call(operation: str) -> Generator[None, None, None]:
    """
    Translate connection-level database failures into UpstreamUnavailable.

    Integrity errors are left alone; services handle those as conflicts.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        timed_out = is_statement_timeout(e)
        logger.warning("store_call_failed", operation=operation, timed_out=timed_out, error=str(e))
        raise UpstreamUnavailable(
            "The data store is temporarily unavailable.", timed_out=timed_out
        ) from e


def call_with_timeout(
    func: Callable[..., T],
    *args: Any,
    operation: str,
    timeout: float | None = None,
    **kwargs: Any,
) -> T:
    """
    Run a blocking network call with a deadline.

    A call that misses the deadline is abandoned (its worker finishes in the
    background) and UpstreamUnavailable(timed_out=True) is raised. Network-level
    failures (OSError, which includes requests' exceptions) become
    UpstreamUnavailable. Provider API errors propagate unchanged.
    """
    deadline = timeout if timeout is not None else settings.IDENTITY_TIMEOUT_SECONDS
    future = _executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=deadline)
    except FutureTimeoutError:
        logger.warning("upstream_call_timed_out", operation=operation, timeout=deadline)
        raise UpstreamUnavailable(
            "The identity service did not respond in time.", timed_out=True
        ) from None
    except OSError as e:
        logger.warning("upstream_call_failed", operation=operation, error=str(e))
        raise UpstreamUnavailable("The identity service is unreachable.") from e
