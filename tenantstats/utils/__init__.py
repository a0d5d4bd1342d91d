"""TenantStats 通用工具."""
