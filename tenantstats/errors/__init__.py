"""TenantStats - 统一异常定义.

集中维护业务异常类型、严重度与 HTTP 状态码映射.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, TypedDict, Unpack, cast

from werkzeug.exceptions import HTTPException

from tenantstats.constants import HttpStatus
from tenantstats.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

if TYPE_CHECKING:
    from tenantstats.types.structures import LoggerExtra


class AppErrorKwargs(TypedDict, total=False):
    """AppError 关键字参数结构."""

    message_key: str | None
    extra: LoggerExtra | None
    severity: ErrorSeverity | None
    category: ErrorCategory | None
    status_code: int | None


@dataclass(slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str

    @property
    def default_message(self) -> str:
        """根据 message key 获取默认文案."""
        return getattr(ErrorMessages, self.default_message_key, ErrorMessages.INTERNAL_ERROR)


@dataclass(slots=True)
class AppErrorOptions:
    """AppError 初始化的可选配置."""

    message_key: str | None = None
    extra: LoggerExtra | None = None
    severity: ErrorSeverity | None = None
    category: ErrorCategory | None = None
    status_code: int | None = None


class AppError(Exception):
    """统一的基础业务异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        options: 额外配置对象,可覆盖 message_key、extra、severity、category、status_code.
        **overrides: 与 ``options`` 中字段一致的关键字参数,优先级更高.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    _OPTION_FIELD_NAMES: ClassVar[set[str]] = set(AppErrorOptions.__annotations__.keys())

    def __init__(
        self,
        message: str | None = None,
        *,
        options: AppErrorOptions | None = None,
        **overrides: Unpack[AppErrorKwargs],
    ) -> None:
        resolved_options = self._build_options(options, overrides)
        self.message_key = resolved_options.message_key or self.metadata.default_message_key
        self.message = self._resolve_message(message, self.message_key)
        self.extra = dict(resolved_options.extra or {})
        self._severity = resolved_options.severity or self.metadata.severity
        self._category = resolved_options.category or self.metadata.category
        self._status_code = resolved_options.status_code or self.metadata.status_code
        super().__init__(self.message)

    @property
    def severity(self) -> ErrorSeverity:
        """返回异常实例对应的严重度."""
        return self._severity

    @property
    def category(self) -> ErrorCategory:
        """返回异常所属的业务分类."""
        return self._category

    @property
    def status_code(self) -> int:
        """返回异常对应的 HTTP 状态码."""
        return self._status_code

    @property
    def recoverable(self) -> bool:
        """严重度为 LOW 或 MEDIUM 时视为可恢复."""
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)

    @classmethod
    def _build_options(
        cls,
        options: AppErrorOptions | None,
        overrides: AppErrorKwargs,
    ) -> AppErrorOptions:
        """合并 dataclass 配置与关键字参数.

        Raises:
            ValueError: 当存在未定义的关键字参数时抛出.

        """
        overrides_dict = cast(AppErrorKwargs, dict(overrides))
        unexpected = set(overrides_dict) - cls._OPTION_FIELD_NAMES
        if unexpected:
            invalid = ", ".join(sorted(unexpected))
            msg = f"AppError 不支持的参数: {invalid}"
            raise ValueError(msg)

        base_data: AppErrorKwargs = {
            "message_key": options.message_key if options else None,
            "extra": options.extra if options else None,
            "severity": options.severity if options else None,
            "category": options.category if options else None,
            "status_code": options.status_code if options else None,
        }
        base_data.update(overrides_dict)
        return AppErrorOptions(**base_data)

    @staticmethod
    def _resolve_message(message: str | None, message_key: str) -> str:
        if message:
            return message
        return getattr(ErrorMessages, message_key, ErrorMessages.INTERNAL_ERROR)


class ValidationError(AppError):
    """表示输入参数验证失败.

    常用于 query 参数缺失或格式错误,默认返回 400.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class NotFoundError(AppError):
    """表示客户端请求的资源不存在,默认返回 404."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


class ConfigurationError(AppError):
    """表示运行所需的配置缺失或无效.

    例如未配置统计库的基础连接串,请求会直接失败,默认返回 500.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="CONFIGURATION_ERROR",
    )


class DatabaseError(AppError):
    """表示数据库连接或查询失败,默认返回 500."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.DATABASE,
        severity=ErrorSeverity.HIGH,
        default_message_key="DATABASE_QUERY_ERROR",
    )


class SystemError(AppError):
    """表示系统级未知错误或底层故障,默认返回 500."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )


class InvariantViolationError(SystemError):
    """表示数据源返回了不应出现的结果.

    例如聚合查询未返回任何行.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INVARIANT_VIOLATION",
    )


EXCEPTION_STATUS_MAP: dict[type[BaseException], int] = {
    ValidationError: ValidationError.metadata.status_code,
    NotFoundError: NotFoundError.metadata.status_code,
    ConfigurationError: ConfigurationError.metadata.status_code,
    DatabaseError: DatabaseError.metadata.status_code,
    SystemError: SystemError.metadata.status_code,
}


def map_exception_to_status(error: Exception, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常类型推导 HTTP 状态码.

    Args:
        error: 捕获到的异常对象.
        default: 无法匹配时的默认状态码.

    Returns:
        int: 与异常对应的 HTTP 状态码.

    """
    if isinstance(error, AppError):
        return error.status_code

    if isinstance(error, HTTPException):
        code = getattr(error, "code", None)
        if code is not None:
            return int(code)

    for exc_type, status in EXCEPTION_STATUS_MAP.items():
        if isinstance(error, exc_type):
            return status

    return default


__all__ = [
    "EXCEPTION_STATUS_MAP",
    "AppError",
    "AppErrorOptions",
    "ConfigurationError",
    "DatabaseError",
    "ExceptionMetadata",
    "InvariantViolationError",
    "NotFoundError",
    "SystemError",
    "ValidationError",
    "map_exception_to_status",
]
