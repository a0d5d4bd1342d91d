from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError

from tenantstats.constants.stats_constants import MembershipSource
from tenantstats.errors import DatabaseError, InvariantViolationError
from tenantstats.services.statistics import stats_service as stats_service_module
from tenantstats.services.statistics.stats_service import StatsService
from tenantstats.types.stats import (
    AccountRow,
    DeletedCustomerFlagSummary,
    MembershipRow,
    OrganizationLookupResult,
    SubscriptionHistoryRow,
    SubscriptionTextRow,
    SyncRecord,
    UserProfile,
)

NOW = datetime(2025, 1, 31, 12, 0, tzinfo=UTC)
SYNC_END = datetime(2025, 1, 30, 23, 0, tzinfo=UTC)


class _FakeRegistrationRepository:
    def __init__(self) -> None:
        self.summary_counts: dict[str, int] | None = {
            "total_customers": 2,
            "active_customers": 1,
            "total_users": 3,
            "active_users_7d": 1,
            "active_users_30d": 2,
        }
        self.flag_patterns: list[str] = []
        self.lookup_result: OrganizationLookupResult | None = None
        self.fail_with: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def fetch_summary_counts(self, since_7d, since_30d):
        self._maybe_fail()
        return self.summary_counts

    def fetch_accounts(self):
        self._maybe_fail()
        return [
            AccountRow(account_id="x", name="Acme AS", is_archived=False, is_active=True, registration_status="Active"),
            AccountRow(account_id="y", name="Bygg AS", is_archived=False, is_active=True, registration_status="Active"),
        ]

    def fetch_registration_memberships(self):
        return [
            MembershipRow(
                source=MembershipSource.REGISTRATION,
                account_id="x",
                user_id="u1",
                role_id="1",
                profile=UserProfile(email="a@x.com", full_name="Ada"),
            ),
        ]

    def fetch_capassa_memberships(self):
        return [
            MembershipRow(source=MembershipSource.CAPASSA, account_id="x", user_id=None, role_email="a@x.com", role_id="2"),
        ]

    def fetch_subscription_history(self):
        return [SubscriptionHistoryRow("x", "s1", is_active=True)]

    def fetch_subscription_texts(self):
        return [SubscriptionTextRow("s1", "en", "Premium"), SubscriptionTextRow("s1", "nb", "Premium NB")]

    def find_account_by_organization_number(self, organization_number):
        self._maybe_fail()
        return self.lookup_result

    def fetch_account_flag_groups(self, name_pattern):
        self.flag_patterns.append(name_pattern)
        return [
            DeletedCustomerFlagSummary(True, False, 3, "Disabled", 2),
            DeletedCustomerFlagSummary(False, True, 1, "Active", 5),
        ]


class _FakeFinanceRepository:
    def __init__(self, records=None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error

    def fetch_sync_records(self):
        if self.error is not None:
            raise self.error
        return self.records


def _build_service(registration, finance, *, workers: int = 4) -> StatsService:
    return StatsService(
        registration_repository=lambda: registration,
        finance_repository=lambda: finance,
        subscription_languages=("nb", "no", "en"),
        acquisition_workers=workers,
        clock=lambda: NOW,
    )


@pytest.mark.unit
@pytest.mark.parametrize("workers", [1, 4])
def test_get_customers_composes_overviews(workers: int) -> None:
    finance = _FakeFinanceRepository([SyncRecord("x", sync_status=1, sync_end_utc=SYNC_END)])
    service = _build_service(_FakeRegistrationRepository(), finance, workers=workers)

    overviews = service.get_customers()

    assert [overview.account_id for overview in overviews] == ["x", "y"]
    acme, bygg = overviews
    assert acme.users_count == 1
    assert acme.users[0].roles == ("Capassa: Medlem", "Registration: Eier")
    assert acme.subscription_name == "Premium"
    assert acme.last_sync_status == 1
    assert acme.last_sync_end_utc == SYNC_END
    assert bygg.users_count == 0
    assert bygg.last_sync_status is None
    assert bygg.last_sync_end_utc is None


@pytest.mark.unit
def test_get_customers_degrades_sync_fields_when_finance_source_fails(monkeypatch) -> None:
    warnings: list[tuple[str, dict[str, object]]] = []

    def _fake_log_warning(message: str, **kwargs: object) -> None:
        warnings.append((message, dict(kwargs)))

    monkeypatch.setattr(stats_service_module, "log_warning", _fake_log_warning)

    finance = _FakeFinanceRepository(error=OperationalError("SELECT 1", {}, Exception("login timeout")))
    service = _build_service(_FakeRegistrationRepository(), finance)

    overviews = service.get_customers()

    assert len(overviews) == 2
    assert all(overview.last_sync_status is None for overview in overviews)
    assert all(overview.last_sync_end_utc is None for overview in overviews)
    assert warnings
    assert warnings[0][1].get("error_type") == "OperationalError"


@pytest.mark.unit
def test_get_customers_degrades_when_finance_engine_cannot_be_created() -> None:
    registration = _FakeRegistrationRepository()

    def _broken_finance_factory():
        raise RuntimeError("finance database not configured")

    service = StatsService(
        registration_repository=lambda: registration,
        finance_repository=_broken_finance_factory,
        clock=lambda: NOW,
    )

    overviews = service.get_customers()

    assert all(overview.last_sync_status is None for overview in overviews)


@pytest.mark.unit
@pytest.mark.parametrize("workers", [1, 3])
def test_get_customers_wraps_registration_failure_as_database_error(workers: int) -> None:
    registration = _FakeRegistrationRepository()
    registration.fail_with = OperationalError("SELECT 1", {}, Exception("connection reset"))
    service = _build_service(registration, _FakeFinanceRepository(), workers=workers)

    with pytest.raises(DatabaseError) as exc_info:
        service.get_customers()

    assert exc_info.value.extra.get("error_type") == "OperationalError"


@pytest.mark.unit
def test_get_summary_returns_snapshot_generated_now() -> None:
    service = _build_service(_FakeRegistrationRepository(), _FakeFinanceRepository())

    summary = service.get_summary()

    assert summary.total_customers == 2
    assert summary.active_users_30d == 2
    assert summary.generated_at_utc == NOW


@pytest.mark.unit
def test_get_summary_raises_invariant_violation_when_no_row() -> None:
    registration = _FakeRegistrationRepository()
    registration.summary_counts = None
    service = _build_service(registration, _FakeFinanceRepository())

    with pytest.raises(InvariantViolationError):
        service.get_summary()


@pytest.mark.unit
def test_lookup_organization_returns_result_or_none() -> None:
    registration = _FakeRegistrationRepository()
    service = _build_service(registration, _FakeFinanceRepository())

    assert service.lookup_organization(999) is None

    registration.lookup_result = OrganizationLookupResult("x", "Acme AS", 912345678, False, True)
    result = service.lookup_organization(912345678)
    assert result is not None
    assert result.account_id == "x"


@pytest.mark.unit
def test_lookup_organization_wraps_sqlalchemy_errors() -> None:
    registration = _FakeRegistrationRepository()
    registration.fail_with = OperationalError("SELECT 1", {}, Exception("boom"))
    service = _build_service(registration, _FakeFinanceRepository())

    with pytest.raises(DatabaseError):
        service.lookup_organization(1)


@pytest.mark.unit
def test_deleted_flag_summaries_escape_prefix_and_sort_by_count() -> None:
    registration = _FakeRegistrationRepository()
    service = _build_service(registration, _FakeFinanceRepository())

    groups = service.get_deleted_customer_flag_summaries("50%_off")

    assert registration.flag_patterns == ["50\\%\\_off%"]
    assert [group.count for group in groups] == [5, 2]


@pytest.mark.unit
def test_deleted_flag_summaries_default_prefix() -> None:
    registration = _FakeRegistrationRepository()
    service = _build_service(registration, _FakeFinanceRepository())

    service.get_deleted_customer_flag_summaries()

    assert registration.flag_patterns == ["XXXX%"]


@pytest.mark.unit
def test_close_disposes_owned_databases() -> None:
    class _FakeDatabases:
        disposed = 0

        def dispose(self) -> None:
            self.disposed += 1

    databases = _FakeDatabases()
    service = StatsService(
        registration_repository=_FakeRegistrationRepository,
        finance_repository=_FakeFinanceRepository,
        databases=databases,
    )

    service.close()

    assert databases.disposed == 1
