from datetime import UTC, datetime
from types import MappingProxyType

import pytest

from tenantstats.services.statistics.overview_composer import compose_customer_overviews
from tenantstats.services.statistics.sync_status_merger import SyncAvailable, SyncDegraded
from tenantstats.types.stats import AccountRow, CustomerUser, SyncRecord

SYNC_END = datetime(2025, 1, 20, 6, 30, tzinfo=UTC)


def _user(user_id: str, email: str, last_login: datetime | None) -> CustomerUser:
    return CustomerUser(user_id=user_id, email=email, full_name=None, last_login_utc=last_login, roles=())


@pytest.mark.unit
def test_compose_joins_users_sync_and_subscription() -> None:
    accounts = [
        AccountRow(
            account_id="x",
            name="Acme AS",
            organization_number=912345678,
            is_archived=False,
            is_active=True,
            registration_status_id=1,
            registration_status="Active",
            primary_user_email="owner@acme.no",
            primary_user_name="Ola Nordmann",
        ),
    ]
    users = (
        _user("u1", "a@acme.no", datetime(2025, 1, 2, tzinfo=UTC)),
        _user("u2", "b@acme.no", datetime(2025, 1, 9, tzinfo=UTC)),
        _user("u3", "c@acme.no", None),
    )
    sync = SyncAvailable(records=MappingProxyType({"x": SyncRecord("x", sync_status=2, sync_end_utc=SYNC_END)}))

    overviews = compose_customer_overviews(accounts, {"x": users}, sync, {"x": "Premium"})

    assert len(overviews) == 1
    overview = overviews[0]
    assert overview.customer_name == "Acme AS"
    assert overview.users_count == 3
    assert overview.last_login_utc == datetime(2025, 1, 9, tzinfo=UTC)
    assert overview.subscription_name == "Premium"
    assert overview.last_sync_status == 2
    assert overview.last_sync_end_utc == SYNC_END
    assert overview.is_deleted is False
    assert overview.is_disabled is False
    assert overview.users == users


@pytest.mark.unit
def test_missing_join_targets_default_to_empty_values() -> None:
    accounts = [AccountRow(account_id="y", name="Lonely AS", is_active=True, registration_status="Active")]

    overviews = compose_customer_overviews(accounts, {}, SyncAvailable(), {})

    overview = overviews[0]
    assert overview.users_count == 0
    assert overview.users == ()
    assert overview.last_login_utc is None
    assert overview.subscription_name is None
    assert overview.last_sync_status is None
    assert overview.last_sync_end_utc is None


@pytest.mark.unit
def test_archived_accounts_skipped_and_degraded_sync_nulls_all_accounts() -> None:
    accounts = [
        AccountRow(account_id="b", name="beta", is_archived=False, is_active=False),
        AccountRow(account_id="z", name="Zeta", is_archived=True),
        AccountRow(account_id="a", name="Alpha", is_archived=None, registration_status="disabled  "),
    ]

    overviews = compose_customer_overviews(accounts, {}, SyncDegraded(reason="OperationalError"), {})

    assert [overview.account_id for overview in overviews] == ["a", "b"]
    assert all(overview.last_sync_status is None for overview in overviews)
    assert overviews[0].is_disabled is True
    assert overviews[1].is_disabled is True


@pytest.mark.unit
def test_overview_payload_serializes_timestamps_as_iso8601() -> None:
    accounts = [AccountRow(account_id="x", name="Acme AS")]
    users = (_user("u1", "a@acme.no", datetime(2025, 1, 2, 8, 0, tzinfo=UTC)),)

    payload = compose_customer_overviews(accounts, {"x": users}, SyncAvailable(), {})[0].to_payload()

    assert payload["last_login_utc"] == "2025-01-02T08:00:00+00:00"
    assert payload["users"][0]["email"] == "a@acme.no"
    assert payload["last_sync_end_utc"] is None
