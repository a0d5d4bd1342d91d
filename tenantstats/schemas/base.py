"""Schema 基础设施."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class QuerySchema(BaseModel):
    """读路径 query 参数的基础 schema.

    约定:
    - 默认忽略未知字段,reqparse 只会产出已声明的参数
    - schema 负责规范化、默认值与中文错误文案
    """

    model_config = ConfigDict(extra="ignore", frozen=True)
