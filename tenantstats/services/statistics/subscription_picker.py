"""订阅名称挑选.

每个账户取一条代表性订阅,再为该订阅挑选一种语言的显示名称.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from tenantstats.types.stats import SubscriptionHistoryRow, SubscriptionTextRow


def _desc_nulls_last(value: datetime | None) -> tuple[int, float]:
    if value is None:
        return (1, 0.0)
    return (0, -value.timestamp())


def _history_rank(row: SubscriptionHistoryRow) -> tuple[int, tuple[int, float], tuple[int, float]]:
    return (
        0 if row.is_active is True else 1,
        _desc_nulls_last(row.end_date),
        _desc_nulls_last(row.start_date),
    )


def pick_account_subscriptions(rows: Iterable[SubscriptionHistoryRow]) -> dict[str, str]:
    """按账户挑选订阅:启用优先,其次结束日期最晚,再次开始日期最晚.

    日期为空时排在最后;完全相同时保留先出现的行.

    Returns:
        账户标识到订阅标识的映射.

    """
    best: dict[str, SubscriptionHistoryRow] = {}
    for row in rows:
        if not row.account_id or not row.subscription_id:
            continue
        current = best.get(row.account_id)
        if current is None or _history_rank(row) < _history_rank(current):
            best[row.account_id] = row
    return {account_id: row.subscription_id for account_id, row in best.items()}


def pick_subscription_names(
    rows: Iterable[SubscriptionTextRow],
    preferred_languages: Sequence[str],
) -> dict[str, str | None]:
    """按订阅挑选显示名称.

    首选语言同属一档,档内与档外都按语言编码字典序取最小的一条.

    Args:
        rows: 订阅多语言名称行.
        preferred_languages: 首选语言编码集合.

    Returns:
        订阅标识到显示名称的映射.

    """
    preferred = {language.lower() for language in preferred_languages}

    def rank(row: SubscriptionTextRow) -> tuple[int, str]:
        language = (row.language_id or "").lower()
        return (0 if language in preferred else 1, language)

    best: dict[str, SubscriptionTextRow] = {}
    for row in rows:
        if not row.subscription_id:
            continue
        current = best.get(row.subscription_id)
        if current is None or rank(row) < rank(current):
            best[row.subscription_id] = row
    return {subscription_id: row.name for subscription_id, row in best.items()}


def resolve_subscription_names(
    history: Iterable[SubscriptionHistoryRow],
    texts: Iterable[SubscriptionTextRow],
    preferred_languages: Sequence[str],
) -> dict[str, str | None]:
    """组合上面两步,得到账户标识到订阅显示名称的映射."""
    subscription_by_account = pick_account_subscriptions(history)
    names = pick_subscription_names(texts, preferred_languages)
    return {
        account_id: names.get(subscription_id)
        for account_id, subscription_id in subscription_by_account.items()
    }


__all__ = ["pick_account_subscriptions", "pick_subscription_names", "resolve_subscription_names"]
