from datetime import timedelta

import pytest

from tenantstats.errors import InvariantViolationError
from tenantstats.services.statistics.aggregate_counter import count_platform_totals


class _FakeCountsSource:
    def __init__(self, counts):
        self.counts = counts
        self.calls = []

    def fetch_summary_counts(self, since_7d, since_30d):
        self.calls.append((since_7d, since_30d))
        return self.counts


@pytest.mark.unit
def test_count_platform_totals_uses_windows_relative_to_now(mock_time) -> None:
    now = mock_time.now()
    source = _FakeCountsSource(
        {
            "total_customers": 12,
            "active_customers": 10,
            "total_users": 40,
            "active_users_7d": 5,
            "active_users_30d": 17,
        },
    )

    summary = count_platform_totals(source, now=now)

    assert source.calls == [(now - timedelta(days=7), now - timedelta(days=30))]
    assert summary.total_customers == 12
    assert summary.active_customers == 10
    assert summary.total_users == 40
    assert summary.active_users_7d == 5
    assert summary.active_users_30d == 17
    assert summary.generated_at_utc == now


@pytest.mark.unit
def test_count_platform_totals_treats_null_counts_as_zero(mock_time) -> None:
    summary = count_platform_totals(_FakeCountsSource({"total_customers": None}), now=mock_time.now())

    assert summary.total_customers == 0
    assert summary.active_users_30d == 0


@pytest.mark.unit
def test_count_platform_totals_raises_when_query_returns_no_row(mock_time) -> None:
    with pytest.raises(InvariantViolationError) as exc_info:
        count_platform_totals(_FakeCountsSource(None), now=mock_time.now())

    assert exc_info.value.extra == {"query": "summary_counts"}
    assert exc_info.value.status_code == 500
