"""统计服务.

编排注册库与财务库的读取,并调用各统计组件生成结果:
- 平台计数: 单次查询完成
- 客户概览: 多个数据集并发读取,全部完成后再组装
- 财务库故障只会降级同步字段,不影响客户列表
"""

from __future__ import annotations

import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from tenantstats.constants.stats_constants import DEFAULT_DELETED_FLAGS_NAME_PREFIX, DEFAULT_SUBSCRIPTION_LANGUAGES
from tenantstats.errors import DatabaseError
from tenantstats.infra.stats_databases import StatsDatabases
from tenantstats.repositories.finance_sync_repository import FinanceSyncRepository
from tenantstats.repositories.registration_stats_repository import RegistrationStatsRepository, escape_like_prefix
from tenantstats.services.statistics.aggregate_counter import count_platform_totals
from tenantstats.services.statistics.identity_resolver import resolve_users_by_account
from tenantstats.services.statistics.overview_composer import compose_customer_overviews
from tenantstats.services.statistics.subscription_picker import resolve_subscription_names
from tenantstats.services.statistics.sync_status_merger import SyncDegraded, SyncLookup, build_sync_lookup
from tenantstats.utils.structlog_config import log_error, log_info, log_warning
from tenantstats.utils.time_utils import time_utils

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from datetime import datetime

    from tenantstats.settings import Settings
    from tenantstats.types.stats import (
        AccountRow,
        CustomerOverview,
        DeletedCustomerFlagSummary,
        MembershipRow,
        OrganizationLookupResult,
        StatsSummary,
        SubscriptionHistoryRow,
        SubscriptionTextRow,
        SyncRecord,
    )


class RegistrationSource(Protocol):
    def fetch_summary_counts(self, since_7d: datetime, since_30d: datetime) -> dict[str, int] | None: ...

    def fetch_accounts(self) -> list[AccountRow]: ...

    def fetch_registration_memberships(self) -> list[MembershipRow]: ...

    def fetch_capassa_memberships(self) -> list[MembershipRow]: ...

    def fetch_subscription_history(self) -> list[SubscriptionHistoryRow]: ...

    def fetch_subscription_texts(self) -> list[SubscriptionTextRow]: ...

    def find_account_by_organization_number(self, organization_number: int) -> OrganizationLookupResult | None: ...

    def fetch_account_flag_groups(self, name_pattern: str) -> list[DeletedCustomerFlagSummary]: ...


class SyncSource(Protocol):
    def fetch_sync_records(self) -> list[SyncRecord]: ...


@contextmanager
def _database_errors(action: str, **context: object) -> Iterator[None]:
    """将 SQLAlchemy 异常记录后转换为 DatabaseError."""
    try:
        yield
    except SQLAlchemyError as exc:
        log_error(f"{action}失败", module="stats", exception=exc, **context)
        raise DatabaseError(extra={"action": action, "error_type": exc.__class__.__name__}) from exc


class StatsService:
    """统计读服务,供 API 层调用."""

    def __init__(
        self,
        *,
        registration_repository: Callable[[], RegistrationSource],
        finance_repository: Callable[[], SyncSource],
        subscription_languages: Sequence[str] = DEFAULT_SUBSCRIPTION_LANGUAGES,
        acquisition_workers: int = 4,
        clock: Callable[[], datetime] = time_utils.now,
        databases: StatsDatabases | None = None,
    ) -> None:
        """初始化统计服务.

        Args:
            registration_repository: 返回注册库数据源的工厂,每次读取时调用.
            finance_repository: 返回财务库数据源的工厂.
            subscription_languages: 订阅名称的首选语言集合.
            acquisition_workers: 客户概览并发读取的线程数,1 表示顺序读取.
            clock: 当前 UTC 时间来源.
            databases: 持有的 Engine 工厂,用于关闭时释放连接池.

        """
        self._registration_repository = registration_repository
        self._finance_repository = finance_repository
        self._subscription_languages = tuple(subscription_languages)
        self._acquisition_workers = max(1, acquisition_workers)
        self._clock = clock
        self._databases = databases

    @classmethod
    def from_settings(cls, settings: Settings) -> StatsService:
        """基于应用配置构建服务,Engine 在首次读取时创建."""
        databases = StatsDatabases(settings)
        return cls(
            registration_repository=lambda: RegistrationStatsRepository(databases.registration_engine()),
            finance_repository=lambda: FinanceSyncRepository(databases.finance_engine()),
            subscription_languages=settings.subscription_languages,
            acquisition_workers=settings.acquisition_workers,
            databases=databases,
        )

    def close(self) -> None:
        if self._databases is not None:
            self._databases.dispose()

    def get_summary(self) -> StatsSummary:
        """获取平台级计数快照."""
        repository = self._registration_repository()
        with _database_errors("获取平台统计"):
            return count_platform_totals(repository, now=self._clock())

    def get_customers(self) -> list[CustomerOverview]:
        """获取所有未归档账户的客户概览."""
        started_at = time.perf_counter()
        repository = self._registration_repository()

        with _database_errors("获取客户概览"):
            results = self._gather(
                {
                    "accounts": repository.fetch_accounts,
                    "registration_memberships": repository.fetch_registration_memberships,
                    "capassa_memberships": repository.fetch_capassa_memberships,
                    "subscription_history": repository.fetch_subscription_history,
                    "subscription_texts": repository.fetch_subscription_texts,
                    "sync": self._acquire_sync,
                },
            )

        sync_lookup: SyncLookup = results["sync"]
        users_by_account = resolve_users_by_account(
            [*results["registration_memberships"], *results["capassa_memberships"]],
        )
        subscription_names = resolve_subscription_names(
            results["subscription_history"],
            results["subscription_texts"],
            self._subscription_languages,
        )
        overviews = compose_customer_overviews(
            results["accounts"],
            users_by_account,
            sync_lookup,
            subscription_names,
        )

        log_info(
            "客户概览生成完成",
            module="stats",
            customers=len(overviews),
            sync_degraded=sync_lookup.is_degraded,
            duration_ms=round((time.perf_counter() - started_at) * 1000),
        )
        return overviews

    def lookup_organization(self, organization_number: int) -> OrganizationLookupResult | None:
        """按组织编号查找账户,不存在时返回 None."""
        repository = self._registration_repository()
        with _database_errors("按组织编号查询账户", organization_number=organization_number):
            return repository.find_account_by_organization_number(organization_number)

    def get_deleted_customer_flag_summaries(
        self,
        name_prefix: str = DEFAULT_DELETED_FLAGS_NAME_PREFIX,
    ) -> list[DeletedCustomerFlagSummary]:
        """统计名称以指定前缀开头的账户在各状态组合下的数量.

        Args:
            name_prefix: 名称前缀,按字面量匹配,通配符会被转义.

        Returns:
            按数量降序排列的分组列表.

        """
        repository = self._registration_repository()
        with _database_errors("获取客户状态分组", name_prefix=name_prefix):
            groups = repository.fetch_account_flag_groups(escape_like_prefix(name_prefix))
        return sorted(groups, key=lambda group: group.count, reverse=True)

    def _acquire_sync(self) -> SyncLookup:
        """读取并合并财务库同步状态,任何故障均降级为空结果."""
        try:
            records = self._finance_repository().fetch_sync_records()
        except Exception as exc:  # noqa: BLE001
            log_warning(
                "财务库同步状态读取失败,已降级为空同步信息",
                module="stats",
                exception=exc,
                error_type=exc.__class__.__name__,
            )
            return SyncDegraded(reason=exc.__class__.__name__)
        return build_sync_lookup(records)

    def _gather(self, tasks: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        """执行互不依赖的读取任务.

        任一任务失败时取消尚未开始的任务并抛出该异常.
        """
        if self._acquisition_workers == 1:
            return {name: task() for name, task in tasks.items()}

        executor = ThreadPoolExecutor(
            max_workers=min(self._acquisition_workers, len(tasks)),
            thread_name_prefix="stats-acquisition",
        )
        try:
            futures = {executor.submit(task): name for name, task in tasks.items()}
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                error = future.exception()
                if error is not None:
                    for waiting in pending:
                        waiting.cancel()
                    raise error
            return {name: future.result() for future, name in futures.items()}
        finally:
            executor.shutdown(wait=True, cancel_futures=True)


__all__ = ["RegistrationSource", "StatsService", "SyncSource"]
