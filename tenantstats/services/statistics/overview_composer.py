"""客户概览组装.

将账户行、归并后的用户、同步状态与订阅名称合并为 CustomerOverview.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tenantstats.services.statistics.identity_resolver import latest_timestamp
from tenantstats.services.statistics.status_derivation import derive_status_flags
from tenantstats.types.stats import CustomerOverview

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from tenantstats.services.statistics.sync_status_merger import SyncLookup
    from tenantstats.types.stats import AccountRow, CustomerUser


def _latest_login(users: Iterable[CustomerUser]) -> datetime | None:
    latest: datetime | None = None
    for user in users:
        latest = latest_timestamp(latest, user.last_login_utc)
    return latest


def _overview_sort_key(overview: CustomerOverview) -> tuple[str, str, str]:
    return (overview.customer_name.casefold(), overview.customer_name, overview.account_id)


def compose_customer_overviews(
    accounts: Iterable[AccountRow],
    users_by_account: Mapping[str, tuple[CustomerUser, ...]],
    sync_lookup: SyncLookup,
    subscription_names: Mapping[str, str | None],
) -> list[CustomerOverview]:
    """为每个未归档账户生成客户概览.

    Args:
        accounts: 账户行,归档账户即使出现也会被跳过.
        users_by_account: 身份归并结果.
        sync_lookup: 同步状态合并结果,降级时所有账户同步字段为空.
        subscription_names: 账户标识到订阅显示名称的映射.

    Returns:
        按客户名称排序的概览列表.

    """
    overviews: list[CustomerOverview] = []
    for account in accounts:
        if account.is_archived is True:
            continue

        users = users_by_account.get(account.account_id, ())
        flags = derive_status_flags(
            account.is_archived,
            account.is_active,
            account.registration_status,
            account.registration_status_id,
        )
        sync_record = sync_lookup.get(account.account_id)

        overviews.append(
            CustomerOverview(
                account_id=account.account_id,
                customer_name=account.name,
                organization_number=account.organization_number,
                subscription_name=subscription_names.get(account.account_id),
                users_count=len(users),
                last_login_utc=_latest_login(users),
                primary_user_email=account.primary_user_email,
                primary_user_name=account.primary_user_name,
                is_deleted=flags.is_deleted,
                is_disabled=flags.is_disabled,
                is_active=flags.is_active,
                registration_status_id=flags.registration_status_id,
                registration_status=flags.registration_status,
                last_sync_status=sync_record.sync_status if sync_record else None,
                last_sync_end_utc=sync_record.sync_end_utc if sync_record else None,
                users=tuple(users),
            ),
        )

    overviews.sort(key=_overview_sort_key)
    return overviews


__all__ = ["compose_customer_overviews"]
