from datetime import UTC, datetime

import pytest

from tenantstats.repositories.finance_sync_repository import FinanceSyncRepository


@pytest.mark.unit
def test_fetch_sync_records_normalizes_ids_and_treats_naive_times_as_utc(finance_engine, finance_tables) -> None:
    with finance_engine.begin() as connection:
        connection.execute(
            finance_tables["AccountingSystemCredential"].insert(),
            [
                {"AccountId": "A1", "SyncStatus": 1, "SyncEndDatetime": datetime(2025, 1, 20, 6, 0)},
                {"AccountId": "A1", "SyncStatus": 2, "SyncEndDatetime": None},
                {"AccountId": None, "SyncStatus": 3, "SyncEndDatetime": datetime(2025, 1, 21)},
            ],
        )

    records = FinanceSyncRepository(finance_engine).fetch_sync_records()

    assert [(record.account_id, record.sync_status) for record in records] == [("a1", 1), ("a1", 2)]
    assert records[0].sync_end_utc == datetime(2025, 1, 20, 6, 0, tzinfo=UTC)
    assert records[1].sync_end_utc is None


@pytest.mark.unit
def test_fetch_sync_records_returns_empty_list_for_empty_table(finance_engine) -> None:
    assert FinanceSyncRepository(finance_engine).fetch_sync_records() == []
