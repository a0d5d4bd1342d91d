"""统计口径常量.

数据源名称、角色编码映射与活跃窗口等固定取值集中在此处维护.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Final

DEFAULT_REGISTRATION_DATABASE: Final[str] = "capassa-registration-db"
DEFAULT_FINANCE_DATABASE: Final[str] = "capassa-financedata-db"

ACTIVE_WINDOW_SHORT_DAYS: Final[int] = 7
ACTIVE_WINDOW_LONG_DAYS: Final[int] = 30

DEFAULT_DELETED_FLAGS_NAME_PREFIX: Final[str] = "XXXX"
DEFAULT_SUBSCRIPTION_LANGUAGES: Final[tuple[str, ...]] = ("nb", "no", "en")

DISABLED_REGISTRATION_STATUS: Final[str] = "DISABLED"


class MembershipSource(str, Enum):
    """成员关系来源表标签."""

    REGISTRATION = "Registration"
    CAPASSA = "Capassa"


UNKNOWN_ROLE_SOURCE: Final[str] = "Unknown"
UNKNOWN_ROLE_CODE: Final[str] = "ukjent"
ROLE_FLAG_DEFAULT: Final[str] = "Default"
ROLE_FLAG_REGISTERED_AS: Final[str] = "RegisteredAs"

# 键为去空白并转大写后的角色编码
ROLE_NAMES: Final = MappingProxyType(
    {
        "1": "Eier",
        "2": "Medlem",
        "3": "Investor",
        "302C99E3-E66C-4BCA-B2C9-47D70D8D55C8": "Eier",
        "BA2C54D5-AE5E-46B5-89E0-B2DECA879879": "Medlem",
        "7DCE6E4E-C17E-43EF-9E73-3A780D52C927": "Regnskapsfører",
        "8EAF290D-1ED8-4199-857A-18EAC7DC4711": "Styremedlem",
    },
)


__all__ = [
    "ACTIVE_WINDOW_LONG_DAYS",
    "ACTIVE_WINDOW_SHORT_DAYS",
    "DEFAULT_DELETED_FLAGS_NAME_PREFIX",
    "DEFAULT_FINANCE_DATABASE",
    "DEFAULT_REGISTRATION_DATABASE",
    "DEFAULT_SUBSCRIPTION_LANGUAGES",
    "DISABLED_REGISTRATION_STATUS",
    "ROLE_FLAG_DEFAULT",
    "ROLE_FLAG_REGISTERED_AS",
    "ROLE_NAMES",
    "UNKNOWN_ROLE_CODE",
    "UNKNOWN_ROLE_SOURCE",
    "MembershipSource",
]
