"""注册库统计 Repository.

职责:
- 仅负责 SQL 组装与数据库读取,调用方传入的值一律通过命名绑定参数传递
- 不做业务合并、不返回 Response
- 行记录在此处归一化为 types.stats 中的 dataclass
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, bindparam, text

from tenantstats.constants.stats_constants import MembershipSource
from tenantstats.types.stats import (
    AccountRow,
    DeletedCustomerFlagSummary,
    MembershipRow,
    OrganizationLookupResult,
    SubscriptionHistoryRow,
    SubscriptionTextRow,
    UserProfile,
)
from tenantstats.utils.time_utils import time_utils

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

LIKE_ESCAPE_CHAR = "\\"

SUMMARY_COUNTS_SQL = text(
    """
    SELECT
        (SELECT COUNT(*) FROM Registration_Account
            WHERE COALESCE(IsArchived, 0) = 0) AS total_customers,
        (SELECT COUNT(*) FROM Registration_Account
            WHERE COALESCE(IsArchived, 0) = 0 AND IsActive = 1) AS active_customers,
        (SELECT COUNT(*) FROM Registration_User
            WHERE COALESCE(IsArchived, 0) = 0) AS total_users,
        (SELECT COUNT(DISTINCT RegistrationUserId) FROM User_Login_History
            WHERE Date >= :since_7d) AS active_users_7d,
        (SELECT COUNT(DISTINCT RegistrationUserId) FROM User_Login_History
            WHERE Date >= :since_30d) AS active_users_30d
    """,
).bindparams(
    bindparam("since_7d", type_=DateTime()),
    bindparam("since_30d", type_=DateTime()),
)

ACCOUNTS_SQL = text(
    """
    SELECT
        a.Id AS account_id,
        a.Name AS name,
        a.OrganizationNumber AS organization_number,
        a.IsArchived AS is_archived,
        a.IsActive AS is_active,
        a.RegistrationStatusId AS registration_status_id,
        ras.Status AS registration_status,
        pu.Email AS primary_user_email,
        pu.First_Name AS primary_user_first_name,
        pu.Last_Name AS primary_user_last_name
    FROM Registration_Account a
    LEFT JOIN Registration_User pu ON pu.Id = a.Primary_User_Id
    LEFT JOIN Registration_Account_Status ras ON ras.Id = a.RegistrationStatusId
    WHERE COALESCE(a.IsArchived, 0) = 0
    """,
).columns(
    organization_number=BigInteger(),
    is_archived=Boolean(),
    is_active=Boolean(),
    registration_status_id=Integer(),
    registration_status=String(),
)

_MEMBERSHIP_SQL_TEMPLATE = """
    SELECT
        r.AccountId AS account_id,
        r.UserId AS user_id,
        {role_email_column} AS role_email,
        r.RoleId AS role_id,
        r.Is_Default_Account AS is_default_account,
        r.RegisteredAs AS registered_as,
        u.Id AS profile_user_id,
        u.Email AS profile_email,
        u.First_Name AS profile_first_name,
        u.Last_Name AS profile_last_name,
        u.IsArchived AS profile_is_archived,
        ull.last_login_utc AS last_login_utc
    FROM {role_table} r
    INNER JOIN Registration_Account a ON a.Id = r.AccountId
    LEFT JOIN Registration_User u ON u.Id = r.UserId
    LEFT JOIN (
        SELECT RegistrationUserId, MAX(Date) AS last_login_utc
        FROM User_Login_History
        GROUP BY RegistrationUserId
    ) ull ON ull.RegistrationUserId = r.UserId
    WHERE COALESCE(a.IsArchived, 0) = 0
"""

_MEMBERSHIP_COLUMN_TYPES = {
    "is_default_account": Boolean(),
    "registered_as": Boolean(),
    "profile_is_archived": Boolean(),
    "last_login_utc": DateTime(),
}

# 表名为固定常量,不接受调用方输入
REGISTRATION_MEMBERSHIPS_SQL = text(
    _MEMBERSHIP_SQL_TEMPLATE.format(
        role_table="Registration_Account_User_Role",
        role_email_column="CAST(NULL AS VARCHAR(256))",
    ),
).columns(**_MEMBERSHIP_COLUMN_TYPES)

CAPASSA_MEMBERSHIPS_SQL = text(
    _MEMBERSHIP_SQL_TEMPLATE.format(
        role_table="Capassa_Account_User_Role",
        role_email_column="r.Email",
    ),
).columns(**_MEMBERSHIP_COLUMN_TYPES)

SUBSCRIPTION_HISTORY_SQL = text(
    """
    SELECT
        ash.AccountId AS account_id,
        ash.SbscriptionId AS subscription_id,
        ash.IsActive AS is_active,
        ash.StartDate AS start_date,
        ash.EndDate AS end_date
    FROM Account_Subscription_History ash
    """,
).columns(is_active=Boolean(), start_date=DateTime(), end_date=DateTime())

SUBSCRIPTION_TEXTS_SQL = text(
    """
    SELECT
        st.SbscriptionId AS subscription_id,
        st.LanguageId AS language_id,
        st.Name AS name
    FROM Capassa_Subscription_Text st
    """,
)

ORGANIZATION_LOOKUP_SQL = text(
    """
    SELECT
        a.Id AS account_id,
        a.Name AS name,
        a.OrganizationNumber AS organization_number,
        a.IsArchived AS is_archived,
        a.IsActive AS is_active
    FROM Registration_Account a
    WHERE a.OrganizationNumber = :organization_number
    ORDER BY a.Id
    """,
).bindparams(
    bindparam("organization_number", type_=BigInteger()),
).columns(organization_number=BigInteger(), is_archived=Boolean(), is_active=Boolean())

ACCOUNT_FLAG_GROUPS_SQL = text(
    """
    SELECT
        a.IsArchived AS is_archived,
        a.IsActive AS is_active,
        a.RegistrationStatusId AS registration_status_id,
        ras.Status AS registration_status,
        COUNT(*) AS account_count
    FROM Registration_Account a
    LEFT JOIN Registration_Account_Status ras ON ras.Id = a.RegistrationStatusId
    WHERE a.Name LIKE :name_pattern ESCAPE '\\'
    GROUP BY a.IsArchived, a.IsActive, a.RegistrationStatusId, ras.Status
    ORDER BY account_count DESC
    """,
).bindparams(
    bindparam("name_pattern", type_=String()),
).columns(
    is_archived=Boolean(),
    is_active=Boolean(),
    registration_status_id=Integer(),
    registration_status=String(),
    account_count=Integer(),
)


def normalize_identifier(value: object) -> str | None:
    """将 GUID/数字/文本标识统一为去空白的小写字符串,空值返回 None."""
    if value is None:
        return None
    text_value = str(value) if isinstance(value, UUID) else str(value).strip()
    return text_value.lower() or None


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _role_code(value: object) -> str | None:
    # GUID 角色编码按 SQL Server 的文本形式输出为大写
    if isinstance(value, UUID):
        return str(value).upper()
    return _clean_text(value)


def _join_name(first_name: object, last_name: object) -> str | None:
    parts = [part for part in (_clean_text(first_name), _clean_text(last_name)) if part]
    return " ".join(parts) if parts else None


def _to_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)  # type: ignore[arg-type]


def escape_like_prefix(prefix: str) -> str:
    """转义 LIKE 通配符并追加 `%`,生成前缀匹配模式.

    Args:
        prefix: 名称前缀,按字面量匹配.

    Returns:
        可直接绑定到 `LIKE ... ESCAPE '\\'` 的模式字符串.

    """
    escaped = prefix.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
    for wildcard in ("%", "_", "["):
        escaped = escaped.replace(wildcard, f"{LIKE_ESCAPE_CHAR}{wildcard}")
    return f"{escaped}%"


def _map_profile(row: Mapping[str, Any]) -> UserProfile | None:
    last_login = row.get("last_login_utc")
    if row.get("profile_user_id") is None and last_login is None:
        return None
    return UserProfile(
        email=_clean_text(row.get("profile_email")),
        full_name=_join_name(row.get("profile_first_name"), row.get("profile_last_name")),
        last_login_utc=time_utils.to_utc(last_login) if isinstance(last_login, datetime) else None,
        is_archived=row.get("profile_is_archived"),
    )


def map_registration_role_row(row: Mapping[str, Any]) -> MembershipRow:
    """将 Registration_Account_User_Role 查询行映射为 MembershipRow.

    该表的用户标识稳定存在,不携带邮箱.
    """
    return MembershipRow(
        source=MembershipSource.REGISTRATION,
        account_id=normalize_identifier(row["account_id"]) or "",
        user_id=normalize_identifier(row.get("user_id")),
        role_email=None,
        role_id=_role_code(row.get("role_id")),
        is_default_account=row.get("is_default_account"),
        registered_as=row.get("registered_as"),
        profile=_map_profile(row),
    )


def map_capassa_role_row(row: Mapping[str, Any]) -> MembershipRow:
    """将 Capassa_Account_User_Role 查询行映射为 MembershipRow.

    该表的用户标识可能缺失,此时依赖表内自带的 Email 作为身份来源.
    """
    return MembershipRow(
        source=MembershipSource.CAPASSA,
        account_id=normalize_identifier(row["account_id"]) or "",
        user_id=normalize_identifier(row.get("user_id")),
        role_email=_clean_text(row.get("role_email")),
        role_id=_role_code(row.get("role_id")),
        is_default_account=row.get("is_default_account"),
        registered_as=row.get("registered_as"),
        profile=_map_profile(row),
    )


class RegistrationStatsRepository:
    """注册库统计读模型 Repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def fetch_summary_counts(self, since_7d: datetime, since_30d: datetime) -> dict[str, int] | None:
        """一次往返读取平台级计数.

        Args:
            since_7d: 7 日活跃窗口起点(UTC).
            since_30d: 30 日活跃窗口起点(UTC).

        Returns:
            计数字典,查询未返回任何行时为 None.

        """
        params = {
            "since_7d": time_utils.to_naive_utc(since_7d),
            "since_30d": time_utils.to_naive_utc(since_30d),
        }
        with self._engine.connect() as connection:
            row = connection.execute(SUMMARY_COUNTS_SQL, params).mappings().first()
        if row is None:
            return None
        return {key: int(value or 0) for key, value in row.items()}

    def fetch_accounts(self) -> list[AccountRow]:
        with self._engine.connect() as connection:
            rows = connection.execute(ACCOUNTS_SQL).mappings().all()
        return [
            AccountRow(
                account_id=normalize_identifier(row["account_id"]) or "",
                name=str(row["name"] or ""),
                organization_number=_to_int(row["organization_number"]),
                is_archived=row["is_archived"],
                is_active=row["is_active"],
                registration_status_id=_to_int(row["registration_status_id"]),
                registration_status=row["registration_status"],
                primary_user_email=_clean_text(row["primary_user_email"]),
                primary_user_name=_join_name(row["primary_user_first_name"], row["primary_user_last_name"]),
            )
            for row in rows
        ]

    def fetch_registration_memberships(self) -> list[MembershipRow]:
        with self._engine.connect() as connection:
            rows = connection.execute(REGISTRATION_MEMBERSHIPS_SQL).mappings().all()
        return [map_registration_role_row(row) for row in rows]

    def fetch_capassa_memberships(self) -> list[MembershipRow]:
        with self._engine.connect() as connection:
            rows = connection.execute(CAPASSA_MEMBERSHIPS_SQL).mappings().all()
        return [map_capassa_role_row(row) for row in rows]

    def fetch_subscription_history(self) -> list[SubscriptionHistoryRow]:
        with self._engine.connect() as connection:
            rows = connection.execute(SUBSCRIPTION_HISTORY_SQL).mappings().all()
        return [
            SubscriptionHistoryRow(
                account_id=normalize_identifier(row["account_id"]) or "",
                subscription_id=normalize_identifier(row["subscription_id"]) or "",
                is_active=row["is_active"],
                start_date=time_utils.to_utc(row["start_date"]),
                end_date=time_utils.to_utc(row["end_date"]),
            )
            for row in rows
        ]

    def fetch_subscription_texts(self) -> list[SubscriptionTextRow]:
        with self._engine.connect() as connection:
            rows = connection.execute(SUBSCRIPTION_TEXTS_SQL).mappings().all()
        return [
            SubscriptionTextRow(
                subscription_id=normalize_identifier(row["subscription_id"]) or "",
                language_id=_clean_text(row["language_id"]),
                name=row["name"],
            )
            for row in rows
        ]

    def find_account_by_organization_number(self, organization_number: int) -> OrganizationLookupResult | None:
        """按组织编号查找首个账户,不区分是否归档."""
        with self._engine.connect() as connection:
            row = (
                connection.execute(ORGANIZATION_LOOKUP_SQL, {"organization_number": organization_number})
                .mappings()
                .first()
            )
        if row is None:
            return None
        return OrganizationLookupResult(
            account_id=normalize_identifier(row["account_id"]) or "",
            customer_name=row["name"],
            organization_number=int(row["organization_number"]),
            is_archived=row["is_archived"],
            is_active=row["is_active"],
        )

    def fetch_account_flag_groups(self, name_pattern: str) -> list[DeletedCustomerFlagSummary]:
        """按(归档, 启用, 注册状态)分组统计名称匹配的账户数量.

        Args:
            name_pattern: 已转义的 LIKE 模式,见 `escape_like_prefix`.

        Returns:
            按数量降序排列的分组列表.

        """
        with self._engine.connect() as connection:
            rows = connection.execute(ACCOUNT_FLAG_GROUPS_SQL, {"name_pattern": name_pattern}).mappings().all()
        return [
            DeletedCustomerFlagSummary(
                is_archived=row["is_archived"],
                is_active=row["is_active"],
                registration_status_id=_to_int(row["registration_status_id"]),
                registration_status=row["registration_status"],
                count=int(row["account_count"] or 0),
            )
            for row in rows
        ]


__all__ = [
    "RegistrationStatsRepository",
    "escape_like_prefix",
    "map_capassa_role_row",
    "map_registration_role_row",
    "normalize_identifier",
]
