"""日志系统使用的增强错误处理辅助方法."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import has_request_context, request
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from tenantstats.constants import HttpStatus
from tenantstats.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity
from tenantstats.errors import AppError
from tenantstats.utils.logging.context_vars import request_id_var


@dataclass(slots=True)
class ErrorContext:
    """异常发生时采集的上下文信息.

    Attributes:
        error: 捕获的异常对象.
        request: Flask 请求对象,可选.
        error_id: 唯一错误标识符,自动生成.
        timestamp: 错误发生时间戳.
        request_id: 请求 ID,从上下文变量获取.
        url: 请求 URL.
        method: HTTP 方法.
        extra: 额外的上下文信息字典.

    """

    error: Exception
    request: Any | None = None
    error_id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    request_id: str | None = field(default_factory=lambda: request_id_var.get())
    url: str | None = None
    method: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def ensure_request(self) -> None:
        """确保请求上下文信息已填充."""
        if self.request is None and has_request_context():
            self.request = request

        if self.request is not None:
            self.url = getattr(self.request, "path", self.url)
            self.method = getattr(self.request, "method", self.method)
            user_agent = getattr(self.request, "user_agent", None)
            if user_agent:
                self.extra.setdefault("user_agent", getattr(user_agent, "string", user_agent))


@dataclass(slots=True)
class ErrorMetadata:
    """用于判定错误分类的元数据."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    message_key: str
    message: str
    recoverable: bool


def derive_error_metadata(error: Exception) -> ErrorMetadata:
    """从异常对象推导错误元数据.

    支持 AppError、HTTPException、SQLAlchemy 异常与通用异常的识别.

    Args:
        error: 异常对象.

    Returns:
        包含完整错误元数据的 ErrorMetadata 对象.

    """
    if isinstance(error, AppError):
        return ErrorMetadata(
            status_code=error.status_code,
            category=error.category,
            severity=error.severity,
            message_key=error.message_key,
            message=error.message,
            recoverable=error.recoverable,
        )

    if isinstance(error, HTTPException):
        status_code = int(getattr(error, "code", HttpStatus.INTERNAL_SERVER_ERROR) or HttpStatus.INTERNAL_SERVER_ERROR)
        message = getattr(error, "description", ErrorMessages.INTERNAL_ERROR)
        server_side = status_code >= HttpStatus.INTERNAL_SERVER_ERROR
        severity = ErrorSeverity.HIGH if server_side else ErrorSeverity.MEDIUM
        return ErrorMetadata(
            status_code=status_code,
            category=ErrorCategory.SYSTEM if server_side else ErrorCategory.BUSINESS,
            severity=severity,
            message_key="INTERNAL_ERROR" if server_side else "INVALID_REQUEST",
            message=message,
            recoverable=severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM),
        )

    if isinstance(error, SQLAlchemyError):
        connection_lost = isinstance(error, DBAPIError) and error.connection_invalidated
        message_key = "DATABASE_CONNECTION_ERROR" if connection_lost else "DATABASE_QUERY_ERROR"
        return ErrorMetadata(
            status_code=HttpStatus.INTERNAL_SERVER_ERROR,
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            message_key=message_key,
            message=getattr(ErrorMessages, message_key),
            recoverable=False,
        )

    message_lower = str(error).lower()
    if "timeout" in message_lower or "connection" in message_lower:
        return ErrorMetadata(
            status_code=HttpStatus.GATEWAY_TIMEOUT,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.HIGH,
            message_key="DATABASE_TIMEOUT",
            message=ErrorMessages.DATABASE_TIMEOUT,
            recoverable=False,
        )

    return ErrorMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        message_key="INTERNAL_ERROR",
        message=ErrorMessages.INTERNAL_ERROR,
        recoverable=False,
    )


def build_public_context(context: ErrorContext) -> dict[str, Any]:
    """构建可对外暴露的错误上下文信息.

    Args:
        context: 错误上下文对象.

    Returns:
        包含 request_id、url、method 等公开字段的字典.

    """
    context.ensure_request()
    payload: dict[str, Any] = {"request_id": context.request_id}
    if context.url:
        payload["url"] = context.url
    if context.method:
        payload["method"] = context.method
    if context.extra:
        payload["meta"] = {key: value for key, value in context.extra.items() if value is not None}
    return payload


def get_error_suggestions(category: ErrorCategory) -> list[str]:
    """根据错误类别获取建议的解决方案."""
    suggestions_map = {
        ErrorCategory.VALIDATION: ["检查输入数据", "根据提示修正请求参数"],
        ErrorCategory.BUSINESS: ["确认组织编号或查询条件", "联系管理员核对数据"],
        ErrorCategory.CONFIGURATION: ["检查 STATS_DB_URL 等环境变量", "联系管理员"],
        ErrorCategory.DATABASE: ["检查数据库连接", "联系数据库管理员"],
        ErrorCategory.NETWORK: ["检查网络连接", "稍后重试"],
        ErrorCategory.SYSTEM: ["联系管理员", "查看错误日志"],
    }
    return suggestions_map.get(category, ["联系管理员", "查看错误日志"])


__all__ = [
    "ErrorContext",
    "ErrorMetadata",
    "build_public_context",
    "derive_error_metadata",
    "get_error_suggestions",
]
