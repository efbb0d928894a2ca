"""
Tests for core utility functions.
"""

from datetime import date
from unittest.mock import patch

from apps.core.utils import default_date_range, get_client_ip, make_slug


class TestGetClientIp:
    """Tests for get_client_ip."""

    def test_first_forwarded_address(self, request_factory) -> None:
        request = request_factory.get("/", HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1")

        assert get_client_ip(request) == "203.0.113.7"

    def test_remote_addr(self, request_factory) -> None:
        request = request_factory.get("/", REMOTE_ADDR="198.51.100.4")

        assert get_client_ip(request) == "198.51.100.4"


class TestMakeSlug:
    """Tests for make_slug."""

    def test_derived_from_name(self) -> None:
        assert make_slug("Grace Chapel Ruiru") == "grace-chapel-ruiru"

    def test_explicit_slug_lowercased(self) -> None:
        assert make_slug("Grace Chapel", "Grace-HQ") == "grace-hq"

    def test_blank_slug_falls_back_to_name(self) -> None:
        assert make_slug("Grace Chapel", "   ") == "grace-chapel"


class TestDefaultDateRange:
    """Tests for default_date_range."""

    @patch("apps.core.utils.timezone.localdate", return_value=date(2026, 3, 18))
    def test_month_to_date(self, _localdate) -> None:
        assert default_date_range() == (date(2026, 3, 1), date(2026, 3, 18))

    @patch("apps.core.utils.timezone.localdate", return_value=date(2026, 3, 18))
    def test_keeps_given_bounds(self, _localdate) -> None:
        assert default_date_range(date(2026, 1, 1), None) == (date(2026, 1, 1), date(2026, 3, 18))
