# tests/unit/routes/conftest.py
"""API 契约测试专用 fixtures.

提供 test_client 与可替换的统计服务桩。
"""

from datetime import UTC, datetime

import pytest

from tenantstats import create_app
from tenantstats.settings import Settings
from tenantstats.types.stats import (
    CustomerOverview,
    CustomerUser,
    DeletedCustomerFlagSummary,
    OrganizationLookupResult,
    StatsSummary,
)

GENERATED_AT = datetime(2025, 1, 31, 12, 0, tzinfo=UTC)


class StubStatsService:
    """按测试需要返回固定数据的统计服务桩."""

    def __init__(self) -> None:
        self.lookup_result: OrganizationLookupResult | None = None
        self.lookup_calls: list[int] = []
        self.flag_prefixes: list[str] = []
        self.error: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    def get_summary(self) -> StatsSummary:
        self._maybe_fail()
        return StatsSummary(
            total_customers=12,
            active_customers=10,
            total_users=40,
            active_users_7d=5,
            active_users_30d=17,
            generated_at_utc=GENERATED_AT,
        )

    def get_customers(self) -> list[CustomerOverview]:
        self._maybe_fail()
        user = CustomerUser(
            user_id="u1",
            email="a@x.com",
            full_name="Ada Lovelace",
            last_login_utc=datetime(2025, 1, 30, 8, 0, tzinfo=UTC),
            roles=("Capassa: Medlem", "Registration: Eier [Default]"),
        )
        return [
            CustomerOverview(
                account_id="x",
                customer_name="Acme AS",
                organization_number=912345678,
                subscription_name="Premium",
                users_count=1,
                last_login_utc=user.last_login_utc,
                primary_user_email="a@x.com",
                primary_user_name="Ada Lovelace",
                is_deleted=False,
                is_disabled=False,
                is_active=True,
                registration_status_id=1,
                registration_status="Active",
                last_sync_status=None,
                last_sync_end_utc=None,
                users=(user,),
            ),
        ]

    def lookup_organization(self, organization_number: int) -> OrganizationLookupResult | None:
        self._maybe_fail()
        self.lookup_calls.append(organization_number)
        return self.lookup_result

    def get_deleted_customer_flag_summaries(self, name_prefix: str = "XXXX") -> list[DeletedCustomerFlagSummary]:
        self._maybe_fail()
        self.flag_prefixes.append(name_prefix)
        return [DeletedCustomerFlagSummary(True, False, 3, "Disabled", 2)]


@pytest.fixture
def stats_service():
    return StubStatsService()


@pytest.fixture(scope="function")
def app(monkeypatch, stats_service):
    """创建测试应用实例."""
    monkeypatch.setenv("FLASK_ENV", "testing")

    settings = Settings.load()
    app = create_app(settings=settings, stats_service=stats_service)
    app.config["TESTING"] = True
    return app


@pytest.fixture(scope="function")
def client(app):
    """创建测试客户端."""
    return app.test_client()
