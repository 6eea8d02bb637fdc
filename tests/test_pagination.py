"""Tests for core.pagination.fetch_all_pages against a stable mock provider."""

import math

import pytest

from core.pagination import fetch_all_pages


class FakeProvider:
    """Serves `total` records in pages and records every request."""

    def __init__(self, total):
        self.records = [{"user_id": f"auth0|{i}"} for i in range(total)]
        self.calls = []

    def __call__(self, page, per_page):
        self.calls.append((page, per_page))
        start = page * per_page
        return {
            "users": self.records[start:start + per_page],
            "total": len(self.records),
            "start": start,
            "limit": per_page,
        }


@pytest.mark.parametrize(
    "total,per_page",
    [(0, 100), (1, 100), (99, 100), (100, 100), (101, 100), (150, 100), (200, 100), (250, 50), (7, 3)],
)
def test_fetches_ceil_pages_and_all_records(total, per_page):
    provider = FakeProvider(total)
    records = fetch_all_pages(provider, per_page)

    assert len(provider.calls) == max(1, math.ceil(total / per_page))
    assert len(records) == total
    assert records == provider.records


def test_empty_result_fires_exactly_one_request():
    provider = FakeProvider(0)
    assert fetch_all_pages(provider, 100) == []
    assert provider.calls == [(0, 100)]


def test_pages_requested_in_order():
    provider = FakeProvider(250)
    fetch_all_pages(provider, 100)
    assert provider.calls == [(0, 100), (1, 100), (2, 100)]


def test_stops_on_empty_page_when_total_over_reported():
    calls = []

    def fetch_page(page, per_page):
        calls.append(page)
        users = [{"user_id": "auth0|1"}] if page == 0 else []
        return {"users": users, "total": 500}

    records = fetch_all_pages(fetch_page, 1)
    assert len(records) == 1
    assert calls == [0, 1]


def test_no_deduplication_across_pages():
    def fetch_page(page, per_page):
        return {"users": [{"user_id": "auth0|same"}], "total": 2}

    records = fetch_all_pages(fetch_page, 1)
    assert records == [{"user_id": "auth0|same"}, {"user_id": "auth0|same"}]


def test_custom_items_key():
    def fetch_page(page, per_page):
        return {"items": [{"id": page}], "total": 2}

    assert fetch_all_pages(fetch_page, 1, items_key="items") == [{"id": 0}, {"id": 1}]


def test_invalid_page_size():
    with pytest.raises(ValueError):
        fetch_all_pages(lambda page, per_page: {}, 0)
