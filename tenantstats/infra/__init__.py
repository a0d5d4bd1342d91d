"""基础设施层."""
