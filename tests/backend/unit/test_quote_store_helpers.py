"""
Unit tests for the pure helpers in services.quote_store.
"""
import datetime as dt

import pytest

from quotes_api.schemas.quote import ProductIn
from quotes_api.services.quote_store import (
    build_line_items,
    derive_total_amount,
    format_quote_number,
    monthly_buckets,
    months_ago,
    resolve_status,
)

UTC = dt.timezone.utc


def _product(fee, qty):
    return ProductIn(name="Water Purifier", model="CHP-242R", rentalFee=fee, usagePeriod=36, contractPeriod=36, quantity=qty)


def test_line_items_carry_server_totals():
    items = build_line_items([_product(50000, 2), _product(32000, 1)])
    assert [i["total"] for i in items] == [100000, 32000]
    assert derive_total_amount(items) == 132000


def test_total_of_no_items_is_zero():
    assert derive_total_amount([]) == 0


@pytest.mark.parametrize(
    "sequence, expected",
    [(1, "CQ-20240315-001"), (42, "CQ-20240315-042"), (999, "CQ-20240315-999"), (1000, "CQ-20240315-1000")],
)
def test_format_quote_number(sequence, expected):
    assert format_quote_number("20240315", sequence) == expected


class TestResolveStatus:
    now = dt.datetime(2024, 3, 15, 12, 0, tzinfo=UTC)

    def test_expired_before_validity_ends_becomes_sent(self):
        assert resolve_status("expired", self.now + dt.timedelta(days=1), now=self.now) == "sent"

    def test_expired_after_validity_is_kept(self):
        assert resolve_status("expired", self.now - dt.timedelta(seconds=1), now=self.now) == "expired"

    def test_naive_valid_until_is_treated_as_utc(self):
        naive = dt.datetime(2024, 3, 16)
        assert resolve_status("expired", naive, now=self.now) == "sent"

    @pytest.mark.parametrize("status", ["draft", "sent", "accepted", "rejected"])
    def test_other_statuses_pass_through(self, status):
        assert resolve_status(status, self.now + dt.timedelta(days=1), now=self.now) == status


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (dt.datetime(2024, 8, 15, tzinfo=UTC), 6, dt.datetime(2024, 2, 15, tzinfo=UTC)),
        (dt.datetime(2024, 3, 10, tzinfo=UTC), 6, dt.datetime(2023, 9, 10, tzinfo=UTC)),
        (dt.datetime(2024, 8, 31, tzinfo=UTC), 6, dt.datetime(2024, 2, 29, tzinfo=UTC)),
    ],
)
def test_months_ago(moment, months, expected):
    assert months_ago(moment, months) == expected


def test_monthly_buckets_are_sorted_and_summed():
    rows = [
        (dt.datetime(2024, 3, 2, tzinfo=UTC), 100.0),
        (dt.datetime(2024, 1, 20, tzinfo=UTC), 50.0),
        (dt.datetime(2024, 3, 28, tzinfo=UTC), 25.0),
        (dt.datetime(2023, 12, 31, tzinfo=UTC), None),
    ]
    assert monthly_buckets(rows) == [
        {"year": 2023, "month": 12, "count": 1, "totalAmount": 0},
        {"year": 2024, "month": 1, "count": 1, "totalAmount": 50.0},
        {"year": 2024, "month": 3, "count": 2, "totalAmount": 125.0},
    ]
