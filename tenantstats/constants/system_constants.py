"""TenantStats - 常量定义模块

统一管理错误分类、严重度与对外文案.
"""

from enum import Enum


class LogLevel(Enum):
    """日志级别枚举."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    NETWORK = "network"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 错误消息常量
class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    RESOURCE_NOT_FOUND = "资源不存在"
    INVALID_REQUEST = "无效的请求"

    # 配置错误
    CONFIGURATION_ERROR = "服务配置缺失或无效"

    # 数据库错误
    DATABASE_CONNECTION_ERROR = "数据库连接失败"
    DATABASE_QUERY_ERROR = "数据库查询错误"
    DATABASE_TIMEOUT = "数据库操作超时"

    # 业务错误
    ORGANIZATION_NOT_FOUND = "组织编号不存在"
    INVARIANT_VIOLATION = "统计数据不一致"


# 成功消息常量
class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "操作成功"
    SUMMARY_LOADED = "获取平台统计成功"
    CUSTOMERS_LOADED = "获取客户概览成功"
    ORGANIZATION_FOUND = "组织查询成功"
    FLAG_SUMMARIES_LOADED = "获取客户状态分组成功"


__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "LogLevel",
    "SuccessMessages",
]
