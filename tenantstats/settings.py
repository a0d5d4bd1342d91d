"""TenantStats - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 统计库基础连接串缺失时不阻止启动,而是在首次访问数据源时抛出 ConfigurationError.
"""

from __future__ import annotations

import json
import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tenantstats.constants.stats_constants import (
    DEFAULT_FINANCE_DATABASE,
    DEFAULT_REGISTRATION_DATABASE,
    DEFAULT_SUBSCRIPTION_LANGUAGES,
)
from tenantstats.constants.system_constants import LogLevel

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "0.3.0"

DEFAULT_DB_CONNECT_TIMEOUT_SECONDS = 30
DEFAULT_DB_POOL_SIZE = 5
DEFAULT_DB_POOL_RECYCLE_SECONDS = 300
DEFAULT_ACQUISITION_WORKERS = 4

DEFAULT_LOG_LEVEL = "INFO"


def _parse_csv(raw: str) -> tuple[str, ...]:
    parts = [item.strip() for item in raw.split(",")]
    return tuple(item for item in parts if item)


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        # `SUBSCRIPTION_LANGUAGES` 约定使用逗号分隔,由 field_validator 统一解析.
        enable_decoding=False,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")

    app_name: str = Field(default="TenantStats", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")

    stats_db_url: str = Field(default="", validation_alias="STATS_DB_URL")
    registration_database: str = Field(
        default=DEFAULT_REGISTRATION_DATABASE,
        validation_alias="STATS_REGISTRATION_DATABASE",
    )
    finance_database: str = Field(default=DEFAULT_FINANCE_DATABASE, validation_alias="STATS_FINANCE_DATABASE")
    db_connect_timeout_seconds: int = Field(
        default=DEFAULT_DB_CONNECT_TIMEOUT_SECONDS,
        validation_alias="STATS_DB_CONNECT_TIMEOUT",
    )
    db_pool_size: int = Field(default=DEFAULT_DB_POOL_SIZE, validation_alias="STATS_DB_POOL_SIZE")
    acquisition_workers: int = Field(default=DEFAULT_ACQUISITION_WORKERS, validation_alias="STATS_ACQUISITION_WORKERS")

    subscription_languages: tuple[str, ...] = Field(
        default=DEFAULT_SUBSCRIPTION_LANGUAGES,
        validation_alias="SUBSCRIPTION_LANGUAGES",
    )

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    enable_debug_log: bool = Field(default=False, validation_alias="ENABLE_DEBUG_LOG")

    api_v1_docs_enabled: bool = Field(default=True, validation_alias="API_V1_DOCS_ENABLED")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("subscription_languages", mode="before")
    @classmethod
    def _parse_languages(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return ()
            if raw.startswith("["):
                parsed = json.loads(raw)
                if not isinstance(parsed, list):
                    raise ValueError("must be a JSON array or a comma-separated string")
                return tuple(item for item in (str(v).strip().lower() for v in parsed) if item)
            return tuple(item.lower() for item in _parse_csv(raw))
        if isinstance(value, (list, tuple)):
            return tuple(text for text in (str(item).strip().lower() for item in value) if text)
        return value

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    @property
    def stats_engine_options(self) -> dict[str, object]:
        """生成统计库 SQLAlchemy Engine 配置选项."""
        if self.stats_db_url.startswith("sqlite"):
            return {"pool_pre_ping": True}
        return {
            "pool_pre_ping": True,
            "pool_recycle": DEFAULT_DB_POOL_RECYCLE_SECONDS,
            "pool_timeout": self.db_connect_timeout_seconds,
            "pool_size": self.db_pool_size,
        }

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        return {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "STATS_REGISTRATION_DATABASE": self.registration_database,
            "STATS_FINANCE_DATABASE": self.finance_database,
            "STATS_ACQUISITION_WORKERS": self.acquisition_workers,
            "SUBSCRIPTION_LANGUAGES": ",".join(self.subscription_languages),
            "LOG_LEVEL": self.log_level,
            "ENABLE_DEBUG_LOG": self.enable_debug_log,
            "API_V1_DOCS_ENABLED": self.api_v1_docs_enabled,
        }

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()

        debug = self._resolve_debug(environment_normalized)
        self._ensure_secret_key(debug)
        self._apply_api_docs_default(environment_normalized)

        self._validate()
        return self

    def _resolve_debug(self, environment_normalized: str) -> bool:
        if "debug" in self.model_fields_set:
            return bool(self.debug)
        debug = environment_normalized != "production"
        object.__setattr__(self, "debug", debug)
        return debug

    def _ensure_secret_key(self, debug: bool) -> None:
        if self.secret_key:
            return
        if not debug:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
        logger.warning("开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

    def _apply_api_docs_default(self, environment_normalized: str) -> None:
        if "api_v1_docs_enabled" in self.model_fields_set:
            return
        object.__setattr__(self, "api_v1_docs_enabled", environment_normalized != "production")

    def _validate(self) -> None:
        errors: list[str] = []
        if self.acquisition_workers < 1:
            errors.append("STATS_ACQUISITION_WORKERS 必须大于等于 1")
        if self.db_pool_size < 1:
            errors.append("STATS_DB_POOL_SIZE 必须大于等于 1")
        if self.db_connect_timeout_seconds < 1:
            errors.append("STATS_DB_CONNECT_TIMEOUT 必须大于等于 1")
        if not self.registration_database:
            errors.append("STATS_REGISTRATION_DATABASE 不能为空")
        if not self.finance_database:
            errors.append("STATS_FINANCE_DATABASE 不能为空")
        if self.log_level not in {level.value for level in LogLevel}:
            errors.append(f"LOG_LEVEL 不支持: {self.log_level}")
        if errors:
            raise ValueError("; ".join(errors))
        if not self.stats_db_url:
            logger.warning("未配置 STATS_DB_URL,统计接口将在访问数据源时失败")


__all__ = ["APP_VERSION", "Settings"]
