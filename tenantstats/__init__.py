"""TenantStats - Flask 应用初始化.

多租户平台的只读统计服务,数据来自注册库与财务库.
"""

from __future__ import annotations

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue

from tenantstats.api import register_api_blueprints
from tenantstats.api.v1.resources.base import STATS_SERVICE_EXTENSION_KEY
from tenantstats.constants import HttpHeaders
from tenantstats.infra.logging.request_middleware import register_request_logging
from tenantstats.services.statistics.stats_service import StatsService
from tenantstats.settings import Settings
from tenantstats.utils.response_utils import unified_error_response
from tenantstats.utils.structlog_config import ErrorContext, configure_structlog, get_system_logger


def create_app(
    *,
    settings: Settings | None = None,
    stats_service: StatsService | None = None,
) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        stats_service: 可选的统计服务实例,默认按 settings 构建.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 配置统一日志系统
    configure_structlog(app)
    register_request_logging(app)

    # 初始化统计服务
    initialize_stats_service(app, resolved_settings, stats_service)

    # 注册蓝图
    register_api_blueprints(app, resolved_settings)

    # 注册全局错误处理器
    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        payload, status_code = unified_error_response(error, context=ErrorContext(error, request))
        return jsonify(payload), status_code

    get_system_logger().info(
        "应用初始化完成",
        module="system",
        app_name=resolved_settings.app_name,
        environment=resolved_settings.environment,
        registration_database=resolved_settings.registration_database,
        finance_database=resolved_settings.finance_database,
        stats_db_configured=bool(resolved_settings.stats_db_url),
    )
    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置并注册基础钩子.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,包含环境变量解析、默认值与校验结果.

    """
    app.config.from_mapping(settings.to_flask_config())
    app.config.setdefault("APPLICATION_ROOT", "/")
    app.json.sort_keys = False
    _register_protocol_detector(app)


def _register_protocol_detector(app: Flask) -> None:
    """注册请求协议检测钩子,适配代理或直连模式."""

    @app.before_request
    def detect_protocol() -> None:
        """动态检测请求协议."""
        if request.headers.get(HttpHeaders.X_FORWARDED_PROTO) == "https":
            app.config["PREFERRED_URL_SCHEME"] = "https"
            return

        if request.is_secure or request.headers.get(HttpHeaders.X_FORWARDED_SSL) == "on":
            app.config["PREFERRED_URL_SCHEME"] = "https"


def initialize_stats_service(app: Flask, settings: Settings, stats_service: StatsService | None = None) -> None:
    """将统计服务挂到 `app.extensions`,数据库连接在首次请求时建立."""
    app.extensions[STATS_SERVICE_EXTENSION_KEY] = stats_service or StatsService.from_settings(settings)


__all__ = ["create_app"]
