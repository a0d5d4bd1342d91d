"""成员关系身份归并.

两张角色表归一化后的 MembershipRow 在此按账户折叠为逻辑用户:
- 有稳定用户标识的行按标识归并
- 无标识的行按规范化邮箱生成合成身份,邮箱与同账户已归并用户一致时并入该用户
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from tenantstats.services.statistics.role_labels import build_role_label
from tenantstats.types.stats import CustomerUser
from tenantstats.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from tenantstats.types.stats import MembershipRow

SYNTHETIC_KEY_PREFIX = "email:"


@dataclass(frozen=True, slots=True)
class UserAccumulator:
    """单个逻辑用户的折叠状态."""

    user_id: str | None = None
    email: str | None = None
    full_name: str | None = None
    last_login_utc: datetime | None = None
    roles: tuple[str, ...] = ()


@dataclass(slots=True)
class _AccountFold:
    users: dict[str, UserAccumulator] = field(default_factory=dict)
    keys_by_email: dict[str, str] = field(default_factory=dict)


def normalize_email(value: str | None) -> str | None:
    """去空白并转小写,空串视为缺失."""
    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def first_non_null(current: object, candidate: object) -> object:
    return current if current is not None else candidate


def latest_timestamp(current: datetime | None, candidate: datetime | None) -> datetime | None:
    if current is None:
        return candidate
    if candidate is None:
        return current
    return max(current, candidate)


def add_role(roles: tuple[str, ...], label: str) -> tuple[str, ...]:
    """按大小写不敏感去重追加角色标签."""
    folded = label.casefold()
    if any(existing.casefold() == folded for existing in roles):
        return roles
    return (*roles, label)


def row_email(row: MembershipRow) -> str | None:
    """成员关系行的邮箱,优先取用户资料,其次取角色表自带邮箱."""
    profile_email = row.profile.email if row.profile is not None else None
    return profile_email or row.role_email


def fold_row(accumulator: UserAccumulator | None, row: MembershipRow) -> UserAccumulator:
    """将一行成员关系并入累加器,返回新的累加器."""
    current = accumulator or UserAccumulator()
    profile = row.profile
    label = build_role_label(row.source, row.role_id, row.is_default_account, row.registered_as)
    return replace(
        current,
        user_id=first_non_null(current.user_id, row.user_id),
        email=first_non_null(current.email, row_email(row)),
        full_name=first_non_null(current.full_name, profile.full_name if profile else None),
        last_login_utc=latest_timestamp(current.last_login_utc, profile.last_login_utc if profile else None),
        roles=add_role(current.roles, label),
    )


def _user_sort_key(user: CustomerUser) -> tuple[str, str, str]:
    display = user.email or user.full_name or ""
    return (display.casefold(), display, user.user_id or "")


def _to_customer_user(accumulator: UserAccumulator) -> CustomerUser:
    return CustomerUser(
        user_id=accumulator.user_id,
        email=accumulator.email,
        full_name=accumulator.full_name,
        last_login_utc=accumulator.last_login_utc,
        roles=tuple(sorted(accumulator.roles, key=lambda role: (role.casefold(), role))),
    )


def resolve_users_by_account(rows: Iterable[MembershipRow]) -> dict[str, tuple[CustomerUser, ...]]:
    """按账户归并成员关系行,输出去重后的逻辑用户.

    Args:
        rows: 两张角色表归一化后的成员关系行,顺序任意.

    Returns:
        账户标识到用户元组的映射,用户按邮箱(缺失时按姓名)大小写不敏感排序.

    """
    stable_rows: list[MembershipRow] = []
    synthetic_rows: list[MembershipRow] = []
    skipped = 0
    archived = 0

    for row in rows:
        if not row.account_id:
            skipped += 1
            continue
        if row.profile is not None and row.profile.is_archived is True:
            archived += 1
            continue
        if row.user_id:
            stable_rows.append(row)
        else:
            synthetic_rows.append(row)

    folds: dict[str, _AccountFold] = {}

    for row in stable_rows:
        fold = folds.setdefault(row.account_id, _AccountFold())
        key = row.user_id.lower()  # type: ignore[union-attr]
        updated = fold_row(fold.users.get(key), row)
        fold.users[key] = updated
        email_key = normalize_email(updated.email)
        if email_key is not None:
            fold.keys_by_email.setdefault(email_key, key)

    for row in synthetic_rows:
        email_key = normalize_email(row_email(row))
        if email_key is None:
            skipped += 1
            continue
        fold = folds.setdefault(row.account_id, _AccountFold())
        key = fold.keys_by_email.get(email_key, f"{SYNTHETIC_KEY_PREFIX}{email_key}")
        fold.users[key] = fold_row(fold.users.get(key), row)
        fold.keys_by_email.setdefault(email_key, key)

    if skipped or archived:
        log_debug("成员关系行已跳过", module="stats", skipped_rows=skipped, archived_rows=archived)

    return {
        account_id: tuple(sorted((_to_customer_user(acc) for acc in fold.users.values()), key=_user_sort_key))
        for account_id, fold in folds.items()
    }


__all__ = [
    "UserAccumulator",
    "add_role",
    "first_non_null",
    "fold_row",
    "latest_timestamp",
    "normalize_email",
    "resolve_users_by_account",
    "row_email",
]
