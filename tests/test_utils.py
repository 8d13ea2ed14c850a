"""Tests for amount, date and account parsing helpers."""

import pytest
from datetime import date
from decimal import Decimal

from finledger.domain.errors import NotFoundError
from finledger.utils.account_resolver import resolve_account
from finledger.utils.amount_parser import parse_amount, parse_positive_amount
from finledger.utils.date_parser import get_date_range, parse_date

TODAY = date(2024, 3, 15)


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("123.45", Decimal("123.45")),
            ("$1,234.56", Decimal("1234.56")),
            ("-50", Decimal("-50")),
            ("(50.00)", Decimal("-50.00")),
            (" € 7 ", Decimal("7")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "1.2.3", "NaN"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)

    def test_positive_amount(self):
        assert parse_positive_amount("0.01") == Decimal("0.01")
        with pytest.raises(ValueError):
            parse_positive_amount("0")


class TestParseDate:
    def test_absolute(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)
        assert parse_date("January 15, 2024") == date(2024, 1, 15)

    def test_fixed_relative(self):
        assert parse_date("today", TODAY) == TODAY
        assert parse_date("Yesterday", TODAY) == date(2024, 3, 14)
        assert parse_date("next month", TODAY) == date(2024, 4, 1)
        assert parse_date("this year", TODAY) == date(2024, 1, 1)

    def test_offsets(self):
        assert parse_date("in 30 days", TODAY) == date(2024, 4, 14)
        assert parse_date("in 3 months", TODAY) == date(2024, 6, 15)
        assert parse_date("2 weeks ago", TODAY) == date(2024, 3, 1)
        assert parse_date("1 year ago", TODAY) == date(2023, 3, 15)

    def test_ambiguous_offset(self):
        with pytest.raises(ValueError):
            parse_date("in 3 days ago", TODAY)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("not a date")

    def test_ranges(self):
        assert get_date_range("this-month", TODAY) == (date(2024, 3, 1), TODAY)
        assert get_date_range("last-month", TODAY) == (date(2024, 2, 1), date(2024, 2, 29))
        assert get_date_range("last-year", TODAY) == (date(2023, 1, 1), date(2023, 12, 31))
        with pytest.raises(ValueError):
            get_date_range("fortnight", TODAY)


class TestResolveAccount:
    def test_by_id_and_name(self, account_service, checking):
        assert resolve_account(account_service, checking.id) == checking.id
        assert resolve_account(account_service, str(checking.id)) == checking.id
        assert resolve_account(account_service, "Checking") == checking.id

    def test_closed_account_by_name(self, account_service, checking):
        account_service.close_account(checking.id)
        assert resolve_account(account_service, "Checking") == checking.id

    def test_missing(self, account_service):
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "Nope")
        with pytest.raises(NotFoundError):
            resolve_account(account_service, 77)
