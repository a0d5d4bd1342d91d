"""会计系统同步状态合并.

同一账户可能存在多条同步记录,取同步结束时间最新的一条.
财务库不可用时以 SyncDegraded 表示降级,由调用方决定如何呈现.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from tenantstats.types.stats import SyncRecord


def _prefer(current: SyncRecord, candidate: SyncRecord) -> SyncRecord:
    """比较两条同一账户的记录,结束时间相同时保留先出现的一条."""
    if candidate.sync_end_utc is None:
        return current
    if current.sync_end_utc is None or candidate.sync_end_utc > current.sync_end_utc:
        return candidate
    return current


def merge_latest_sync(records: Iterable[SyncRecord]) -> dict[str, SyncRecord]:
    """按账户挑选同步结束时间最大的记录.

    结束时间为空的记录仅在该账户没有任何带时间的记录时入选.

    Args:
        records: 财务库读取的同步记录.

    Returns:
        账户标识到最新同步记录的映射.

    """
    latest: dict[str, SyncRecord] = {}
    for record in records:
        current = latest.get(record.account_id)
        latest[record.account_id] = record if current is None else _prefer(current, record)
    return latest


@dataclass(frozen=True, slots=True)
class SyncAvailable:
    """财务库读取成功时的合并结果."""

    records: Mapping[str, SyncRecord] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_degraded(self) -> bool:
        return False

    def get(self, account_id: str) -> SyncRecord | None:
        return self.records.get(account_id)


@dataclass(frozen=True, slots=True)
class SyncDegraded:
    """财务库不可用、未配置或查询失败时的降级结果,不含任何记录."""

    reason: str

    @property
    def is_degraded(self) -> bool:
        return True

    def get(self, _account_id: str) -> SyncRecord | None:
        return None


SyncLookup = SyncAvailable | SyncDegraded


def build_sync_lookup(records: Iterable[SyncRecord]) -> SyncAvailable:
    """合并同步记录并包装为 SyncAvailable."""
    return SyncAvailable(records=MappingProxyType(merge_latest_sync(records)))


__all__ = [
    "SyncAvailable",
    "SyncDegraded",
    "SyncLookup",
    "build_sync_lookup",
    "merge_latest_sync",
]
