"""统计核心组件."""
