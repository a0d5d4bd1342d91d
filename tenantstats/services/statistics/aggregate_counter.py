"""平台级计数."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from tenantstats.constants.stats_constants import ACTIVE_WINDOW_LONG_DAYS, ACTIVE_WINDOW_SHORT_DAYS
from tenantstats.errors import InvariantViolationError
from tenantstats.types.stats import StatsSummary
from tenantstats.utils.time_utils import time_utils

if TYPE_CHECKING:
    from datetime import datetime


class SummaryCountsSource(Protocol):
    def fetch_summary_counts(self, since_7d: datetime, since_30d: datetime) -> dict[str, int] | None: ...


def count_platform_totals(repository: SummaryCountsSource, *, now: datetime) -> StatsSummary:
    """计算客户数、用户数与 7/30 日活跃用户数.

    活跃窗口以 `now` 为基准在应用侧计算,作为绑定参数传入查询.

    Args:
        repository: 提供 `fetch_summary_counts` 的数据源.
        now: 当前 UTC 时间,同时作为快照生成时间.

    Returns:
        StatsSummary: 平台计数快照.

    Raises:
        InvariantViolationError: 聚合查询未返回任何行时抛出.

    """
    counts = repository.fetch_summary_counts(
        time_utils.days_ago(ACTIVE_WINDOW_SHORT_DAYS, reference=now),
        time_utils.days_ago(ACTIVE_WINDOW_LONG_DAYS, reference=now),
    )
    if counts is None:
        raise InvariantViolationError(extra={"query": "summary_counts"})

    return StatsSummary(
        total_customers=int(counts.get("total_customers") or 0),
        active_customers=int(counts.get("active_customers") or 0),
        total_users=int(counts.get("total_users") or 0),
        active_users_7d=int(counts.get("active_users_7d") or 0),
        active_users_30d=int(counts.get("active_users_30d") or 0),
        generated_at_utc=now,
    )


__all__ = ["SummaryCountsSource", "count_platform_totals"]
