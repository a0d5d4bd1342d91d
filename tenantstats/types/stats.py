"""统计模块相关类型定义.

行记录(Row)由 repository 产出,结果记录由 service 组装,均为不可变 dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tenantstats.constants.stats_constants import MembershipSource
    from tenantstats.types.structures import JsonDict


def _isoformat(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True, slots=True)
class AccountRow:
    """注册库中未归档账户的一行基础信息."""

    account_id: str
    name: str
    organization_number: int | None = None
    is_archived: bool | None = None
    is_active: bool | None = None
    registration_status_id: int | None = None
    registration_status: str | None = None
    primary_user_email: str | None = None
    primary_user_name: str | None = None


@dataclass(frozen=True, slots=True)
class UserProfile:
    """成员关系关联到的用户资料,来自 Registration_User 与登录历史."""

    email: str | None = None
    full_name: str | None = None
    last_login_utc: datetime | None = None
    is_archived: bool | None = None


@dataclass(frozen=True, slots=True)
class MembershipRow:
    """两张角色表归一化后的成员关系行.

    Attributes:
        source: 来源角色表标签.
        account_id: 账户标识.
        user_id: 稳定用户标识,次级角色表中可能缺失.
        role_email: 角色表自带的邮箱,仅次级角色表提供.
        role_id: 角色编码(数字或 GUID 文本).
        is_default_account: 是否为用户默认账户.
        registered_as: 是否以该身份注册.
        profile: 关联的用户资料,用户表中不存在时为 None.

    """

    source: MembershipSource
    account_id: str
    user_id: str | None = None
    role_email: str | None = None
    role_id: str | None = None
    is_default_account: bool | None = None
    registered_as: bool | None = None
    profile: UserProfile | None = None


@dataclass(frozen=True, slots=True)
class SubscriptionHistoryRow:
    """账户订阅历史行."""

    account_id: str
    subscription_id: str
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class SubscriptionTextRow:
    """订阅的多语言名称行."""

    subscription_id: str
    language_id: str | None
    name: str | None


@dataclass(frozen=True, slots=True)
class SyncRecord:
    """财务库中一次会计系统同步的状态."""

    account_id: str
    sync_status: int | None = None
    sync_end_utc: datetime | None = None


@dataclass(frozen=True, slots=True)
class AccountStatusFlags:
    """由归档/启用/注册状态推导出的账户状态标记."""

    is_deleted: bool
    is_disabled: bool
    is_active: bool | None = None
    registration_status_id: int | None = None
    registration_status: str | None = None


@dataclass(frozen=True, slots=True)
class CustomerUser:
    """客户概览中的单个用户."""

    user_id: str | None
    email: str | None
    full_name: str | None
    last_login_utc: datetime | None
    roles: tuple[str, ...] = ()

    def to_payload(self) -> JsonDict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "last_login_utc": _isoformat(self.last_login_utc),
            "roles": list(self.roles),
        }


@dataclass(frozen=True, slots=True)
class CustomerOverview:
    """单个未归档账户的完整概览."""

    account_id: str
    customer_name: str
    organization_number: int | None
    subscription_name: str | None
    users_count: int
    last_login_utc: datetime | None
    primary_user_email: str | None
    primary_user_name: str | None
    is_deleted: bool
    is_disabled: bool
    is_active: bool | None
    registration_status_id: int | None
    registration_status: str | None
    last_sync_status: int | None
    last_sync_end_utc: datetime | None
    users: tuple[CustomerUser, ...] = field(default_factory=tuple)

    def to_payload(self) -> JsonDict:
        return {
            "account_id": self.account_id,
            "customer_name": self.customer_name,
            "organization_number": self.organization_number,
            "subscription_name": self.subscription_name,
            "users_count": self.users_count,
            "last_login_utc": _isoformat(self.last_login_utc),
            "primary_user_email": self.primary_user_email,
            "primary_user_name": self.primary_user_name,
            "is_deleted": self.is_deleted,
            "is_disabled": self.is_disabled,
            "is_active": self.is_active,
            "registration_status_id": self.registration_status_id,
            "registration_status": self.registration_status,
            "last_sync_status": self.last_sync_status,
            "last_sync_end_utc": _isoformat(self.last_sync_end_utc),
            "users": [user.to_payload() for user in self.users],
        }


@dataclass(frozen=True, slots=True)
class StatsSummary:
    """平台级计数快照,每次请求重新生成."""

    total_customers: int
    active_customers: int
    total_users: int
    active_users_7d: int
    active_users_30d: int
    generated_at_utc: datetime

    def to_payload(self) -> JsonDict:
        return {
            "total_customers": self.total_customers,
            "active_customers": self.active_customers,
            "total_users": self.total_users,
            "active_users_7d": self.active_users_7d,
            "active_users_30d": self.active_users_30d,
            "generated_at_utc": self.generated_at_utc.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class OrganizationLookupResult:
    """按组织编号查到的账户."""

    account_id: str
    customer_name: str | None
    organization_number: int
    is_archived: bool | None
    is_active: bool | None

    def to_payload(self) -> JsonDict:
        return {
            "account_id": self.account_id,
            "customer_name": self.customer_name,
            "organization_number": self.organization_number,
            "is_archived": self.is_archived,
            "is_active": self.is_active,
        }


@dataclass(frozen=True, slots=True)
class DeletedCustomerFlagSummary:
    """按(归档, 启用, 注册状态)分组的账户数量."""

    is_archived: bool | None
    is_active: bool | None
    registration_status_id: int | None
    registration_status: str | None
    count: int

    def to_payload(self) -> JsonDict:
        return {
            "is_archived": self.is_archived,
            "is_active": self.is_active,
            "registration_status_id": self.registration_status_id,
            "registration_status": self.registration_status,
            "count": self.count,
        }


__all__ = [
    "AccountRow",
    "AccountStatusFlags",
    "CustomerOverview",
    "CustomerUser",
    "DeletedCustomerFlagSummary",
    "MembershipRow",
    "OrganizationLookupResult",
    "StatsSummary",
    "SubscriptionHistoryRow",
    "SubscriptionTextRow",
    "SyncRecord",
    "UserProfile",
]
