"""
CSV exports for reports.

Every cell is quoted; rows end with a bare newline. Text that a
spreadsheet would read as a formula gets a leading apostrophe.
"""

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date

from apps.approvals.models import ApprovalLogEntry
from apps.reports.services import UNKNOWN_EVANGELIST, LeaderboardRow
from apps.souls.models import Soul

SOULS_HEADERS = ["won_on", "name", "phone", "email", "residence", "notes", "evangelist"]
LEADERBOARD_HEADERS = ["evangelist", "souls_count", "from", "to"]
APPROVAL_AUDIT_HEADERS = ["action_at", "evangelist", "action", "by_admin"]

CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")


def export_filename(kind: str, won_from: date, won_to: date) -> str:
    """e.g. harvestlog-leaderboard-2026-01-01-to-2026-01-31.csv"""
    return f"harvestlog-{kind}-{won_from.isoformat()}-to-{won_to.isoformat()}.csv"


def _csv_safe(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, str) and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def _render(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_safe(value) for value in row])
    return buffer.getvalue()


def _name(user) -> str:
    if user is None:
        return UNKNOWN_EVANGELIST
    return user.name or user.email or UNKNOWN_EVANGELIST


def souls_csv(souls: Iterable[Soul]) -> str:
    return _render(
        SOULS_HEADERS,
        (
            [
                soul.won_on.isoformat(),
                soul.name,
                soul.phone,
                soul.email,
                soul.residence,
                soul.notes,
                _name(soul.evangelist),
            ]
            for soul in souls
        ),
    )


def leaderboard_csv(rows: Iterable[LeaderboardRow], won_from: date, won_to: date) -> str:
    return _render(
        LEADERBOARD_HEADERS,
        (
            [row.evangelist, row.souls_count, won_from.isoformat(), won_to.isoformat()]
            for row in rows
        ),
    )


def approval_audit_csv(entries: Iterable[ApprovalLogEntry]) -> str:
    return _render(
        APPROVAL_AUDIT_HEADERS,
        (
            [
                entry.action_at.isoformat(),
                _name(entry.evangelist),
                "APPROVED" if entry.approved else "UNAPPROVED",
                _name(entry.action_by),
            ]
            for entry in entries
        ),
    )
