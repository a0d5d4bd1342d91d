"""数据访问层 Repository."""
