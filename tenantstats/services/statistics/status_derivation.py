"""账户状态标记推导."""

from __future__ import annotations

from tenantstats.constants.stats_constants import DISABLED_REGISTRATION_STATUS
from tenantstats.types.stats import AccountStatusFlags


def derive_status_flags(
    is_archived: bool | None,
    is_active: bool | None,
    registration_status: str | None,
    registration_status_id: int | None = None,
) -> AccountStatusFlags:
    """由归档/启用/注册状态推导删除与停用标记.

    - 删除: 归档标记为 True
    - 停用: 启用标记为 False,或注册状态(忽略尾部空格,不区分大小写)为 DISABLED
    - 输入为空时两者均为 False,原始字段原样透传

    Args:
        is_archived: 归档标记.
        is_active: 启用标记.
        registration_status: 注册状态文本.
        registration_status_id: 注册状态编号.

    Returns:
        AccountStatusFlags: 推导后的状态标记.

    """
    status_text = (registration_status or "").rstrip(" ").upper()
    return AccountStatusFlags(
        is_deleted=is_archived is True,
        is_disabled=is_active is False or status_text == DISABLED_REGISTRATION_STATUS,
        is_active=is_active,
        registration_status_id=registration_status_id,
        registration_status=registration_status,
    )


__all__ = ["derive_status_flags"]
