"""统计数据源 Engine 工厂.

注册库与财务库位于同一 SQL Server 实例,共享基础连接串,仅数据库名不同.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from tenantstats.errors import ConfigurationError
from tenantstats.utils.structlog_config import get_db_logger

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from tenantstats.settings import Settings

PYMSSQL_DRIVERNAME = "mssql+pymssql"


class StatsDatabases:
    """按数据库名懒加载并复用 SQLAlchemy Engine."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()
        self._logger = get_db_logger()

    @property
    def registration_database(self) -> str:
        return self._settings.registration_database

    @property
    def finance_database(self) -> str:
        return self._settings.finance_database

    def registration_engine(self) -> Engine:
        """返回注册库 Engine."""
        return self.engine_for(self.registration_database)

    def finance_engine(self) -> Engine:
        """返回财务库 Engine."""
        return self.engine_for(self.finance_database)

    def engine_for(self, database_name: str) -> Engine:
        """获取指定数据库的 Engine,首次访问时创建.

        Args:
            database_name: 目标数据库名,替换基础连接串中的数据库部分.

        Returns:
            Engine: 可复用的 SQLAlchemy Engine.

        Raises:
            ConfigurationError: 基础连接串缺失或无法解析时抛出.

        """
        with self._lock:
            engine = self._engines.get(database_name)
            if engine is None:
                engine = self._create_engine(database_name)
                self._engines[database_name] = engine
            return engine

    def _create_engine(self, database_name: str) -> Engine:
        base_url = self._settings.stats_db_url
        if not base_url:
            raise ConfigurationError("未配置统计库连接串 STATS_DB_URL", extra={"database": database_name})

        try:
            url = make_url(base_url).set(database=database_name)
        except ArgumentError as exc:
            raise ConfigurationError("统计库连接串 STATS_DB_URL 格式无效", extra={"database": database_name}) from exc

        connect_args: dict[str, object] = {}
        if url.drivername == PYMSSQL_DRIVERNAME:
            connect_args = {
                "login_timeout": self._settings.db_connect_timeout_seconds,
                "timeout": self._settings.db_connect_timeout_seconds,
            }

        engine = create_engine(url, connect_args=connect_args, **self._settings.stats_engine_options)
        self._logger.info(
            "统计库 Engine 已创建",
            module="stats",
            database=database_name,
            driver=url.drivername,
            host=url.host,
        )
        return engine

    def dispose(self) -> None:
        """释放所有连接池."""
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()


__all__ = ["StatsDatabases"]
