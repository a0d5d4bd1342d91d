"""常量模块。

集中管理系统常量，包括错误消息、HTTP 相关常量与统计口径常量。
"""

from http import HTTPStatus as HttpStatus

from .http_headers import HttpHeaders
from .stats_constants import MembershipSource
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    LogLevel,
    SuccessMessages,
)

__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpHeaders",
    "HttpStatus",
    "LogLevel",
    "MembershipSource",
    "SuccessMessages",
]
