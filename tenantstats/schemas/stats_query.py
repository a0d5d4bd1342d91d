"""统计接口 query 参数 schema."""

from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from tenantstats.constants.stats_constants import DEFAULT_DELETED_FLAGS_NAME_PREFIX
from tenantstats.schemas.base import QuerySchema
from tenantstats.schemas.validation import SchemaMessageKeyError

_MAX_NAME_PREFIX_LENGTH = 200
_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


class OrganizationLookupQuery(QuerySchema):
    """按组织编号查询账户的 query 参数."""

    organization_number: int = Field(validation_alias=AliasChoices("orgNumber", "organization_number"))

    @field_validator("organization_number", mode="before")
    @classmethod
    def _parse_organization_number(cls, value: Any) -> int:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise SchemaMessageKeyError("orgNumber 参数必填", message_key="VALIDATION_ERROR")
        if isinstance(value, bool):
            raise SchemaMessageKeyError("orgNumber 必须为整数", message_key="VALIDATION_ERROR")
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not _INTEGER_PATTERN.fullmatch(text):
            raise SchemaMessageKeyError("orgNumber 必须为整数", message_key="VALIDATION_ERROR")
        return int(text)


class DeletedFlagsQuery(QuerySchema):
    """客户状态分组统计的 query 参数."""

    name_prefix: str = Field(
        default=DEFAULT_DELETED_FLAGS_NAME_PREFIX,
        validation_alias=AliasChoices("namePrefix", "name_prefix"),
    )

    @field_validator("name_prefix", mode="before")
    @classmethod
    def _parse_name_prefix(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_DELETED_FLAGS_NAME_PREFIX
        text = str(value)
        if not text.strip():
            return DEFAULT_DELETED_FLAGS_NAME_PREFIX
        if len(text) > _MAX_NAME_PREFIX_LENGTH:
            raise SchemaMessageKeyError("namePrefix 长度不能超过 200", message_key="VALIDATION_ERROR")
        return text


__all__ = ["DeletedFlagsQuery", "OrganizationLookupQuery"]
