"""API v1 Resource 基础设施."""
