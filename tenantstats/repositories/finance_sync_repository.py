"""财务库同步状态 Repository.

职责:
- 读取会计系统凭据表中的同步状态行
- 不做"最新一条"的挑选,合并规则由 service 层负责
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, text

from tenantstats.repositories.registration_stats_repository import normalize_identifier
from tenantstats.types.stats import SyncRecord
from tenantstats.utils.time_utils import time_utils

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SYNC_RECORDS_SQL = text(
    """
    SELECT
        c.AccountId AS account_id,
        c.SyncStatus AS sync_status,
        c.SyncEndDatetime AS sync_end_utc
    FROM AccountingSystemCredential c
    WHERE c.AccountId IS NOT NULL
    """,
).columns(sync_status=Integer(), sync_end_utc=DateTime())


class FinanceSyncRepository:
    """财务库同步状态读模型 Repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def fetch_sync_records(self) -> list[SyncRecord]:
        with self._engine.connect() as connection:
            rows = connection.execute(SYNC_RECORDS_SQL).mappings().all()
        records: list[SyncRecord] = []
        for row in rows:
            account_id = normalize_identifier(row["account_id"])
            if account_id is None:
                continue
            records.append(
                SyncRecord(
                    account_id=account_id,
                    sync_status=row["sync_status"],
                    sync_end_utc=time_utils.to_utc(row["sync_end_utc"]),
                ),
            )
        return records


__all__ = ["FinanceSyncRepository"]
