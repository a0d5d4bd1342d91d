"""统一时间处理工具模块.

统计库中的时间字段均按 UTC 存储且不带时区信息,读取后统一补齐为带时区的 UTC 时间.
"""

from datetime import UTC, date, datetime, timedelta

from tenantstats.utils.structlog_config import get_system_logger


class TimeUtils:
    """统一时间处理工具类."""

    @staticmethod
    def now() -> datetime:
        """获取当前 UTC 时间.

        Returns:
            带 UTC 时区信息的当前时间.

        """
        return datetime.now(UTC)

    @staticmethod
    def days_ago(days: int, *, reference: datetime | None = None) -> datetime:
        """计算距参考时间 N 天前的 UTC 时间点.

        Args:
            days: 天数.
            reference: 参考时间,默认为当前时间.

        Returns:
            带 UTC 时区信息的时间点.

        """
        base = reference or TimeUtils.now()
        return base - timedelta(days=days)

    @staticmethod
    def to_utc(dt: str | date | datetime | None) -> datetime | None:
        """将时间转换为 UTC 时区.

        不带时区信息的时间视为 UTC.

        Args:
            dt: 待转换的时间,可以是字符串、date 或 datetime 对象.

        Returns:
            转换后的 UTC 时区时间,转换失败时返回 None.

        """
        if dt is None or dt == "":
            return None

        try:
            if isinstance(dt, str):
                text = dt.strip()
                if text.endswith("Z"):
                    text = text[:-1] + "+00:00"
                dt = datetime.fromisoformat(text)
            elif isinstance(dt, date) and not isinstance(dt, datetime):
                dt = datetime.combine(dt, datetime.min.time())

            if dt.tzinfo is None:
                return dt.replace(tzinfo=UTC)
            return dt.astimezone(UTC)
        except (ValueError, TypeError) as e:
            get_system_logger().warning("时间转换错误", module="time_utils", error=str(e))
            return None

    @staticmethod
    def to_naive_utc(dt: datetime) -> datetime:
        """转换为不带时区信息的 UTC 时间,用于数据库查询参数."""
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(UTC).replace(tzinfo=None)


time_utils = TimeUtils()

__all__ = ["TimeUtils", "time_utils"]
