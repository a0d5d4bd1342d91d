"""角色标签构建.

标签格式: "{来源}: {角色名}{标记}",例如 "Registration: Eier [Default]".
"""

from __future__ import annotations

from tenantstats.constants.stats_constants import (
    ROLE_FLAG_DEFAULT,
    ROLE_FLAG_REGISTERED_AS,
    ROLE_NAMES,
    UNKNOWN_ROLE_CODE,
    UNKNOWN_ROLE_SOURCE,
    MembershipSource,
)


def resolve_role_name(role_id: str | None) -> str:
    """将角色编码映射为显示名称,未知编码回退为 "RoleId <code>"."""
    code = (role_id or "").strip()
    if not code:
        return f"RoleId {UNKNOWN_ROLE_CODE}"
    known = ROLE_NAMES.get(code.upper())
    if known is not None:
        return known
    return f"RoleId {code}"


def build_role_label(
    source: MembershipSource | str | None,
    role_id: str | None,
    is_default_account: bool | None,
    registered_as: bool | None,
) -> str:
    """生成单条成员关系的角色标签.

    Args:
        source: 来源角色表标签,为空时记为 "Unknown".
        role_id: 角色编码,数字或 GUID 文本.
        is_default_account: 是否默认账户.
        registered_as: 是否以该身份注册.

    Returns:
        角色标签字符串.

    """
    source_text = source.value if isinstance(source, MembershipSource) else (source or "").strip()
    source_text = source_text or UNKNOWN_ROLE_SOURCE

    flags = []
    if is_default_account is True:
        flags.append(ROLE_FLAG_DEFAULT)
    if registered_as is True:
        flags.append(ROLE_FLAG_REGISTERED_AS)
    suffix = f" [{', '.join(flags)}]" if flags else ""

    return f"{source_text}: {resolve_role_name(role_id)}{suffix}"


__all__ = ["build_role_label", "resolve_role_name"]
