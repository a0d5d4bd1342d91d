# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供 monkeypatch 与固定时钟相关的通用 fixtures。
"""

import pytest


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不依赖外部 SQL Server
    - 避免开发者本机环境变量影响测试稳定性
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("STATS_DB_URL", "")
    monkeypatch.setenv("SUBSCRIPTION_LANGUAGES", "nb,no,en")
    monkeypatch.delenv("STATS_REGISTRATION_DATABASE", raising=False)
    monkeypatch.delenv("STATS_FINANCE_DATABASE", raising=False)


@pytest.fixture
def mock_time():
    """固定时钟,用于测试活跃窗口等时间敏感的逻辑."""
    import datetime

    fixed_time = datetime.datetime(2025, 1, 31, 12, 0, 0, tzinfo=datetime.UTC)

    def _set_time(new_time: datetime.datetime):
        nonlocal fixed_time
        fixed_time = new_time

    class MockTime:
        @staticmethod
        def now():
            return fixed_time

        @staticmethod
        def set(new_time: datetime.datetime):
            _set_time(new_time)

    return MockTime
