"""Stats namespace (平台统计与客户概览)."""

from __future__ import annotations

from typing import cast

from flask_restx import Namespace, fields

from tenantstats.api.v1.models.envelope import get_error_envelope_model, make_success_envelope_model
from tenantstats.api.v1.resources.base import BaseResource
from tenantstats.api.v1.resources.query_parsers import new_parser
from tenantstats.constants.system_constants import ErrorMessages, SuccessMessages
from tenantstats.errors import ConfigurationError, DatabaseError, NotFoundError, ValidationError
from tenantstats.schemas.stats_query import DeletedFlagsQuery, OrganizationLookupQuery
from tenantstats.schemas.validation import validate_or_raise

ns = Namespace("stats", description="平台统计")

ErrorEnvelope = get_error_envelope_model(ns)

STATS_EXPECTED_EXCEPTIONS: tuple[type[BaseException], ...] = (ValidationError, ConfigurationError, DatabaseError)

StatsSummaryData = ns.model(
    "StatsSummaryData",
    {
        "total_customers": fields.Integer(required=True, description="未归档客户数"),
        "active_customers": fields.Integer(required=True, description="启用中的未归档客户数"),
        "total_users": fields.Integer(required=True, description="未归档用户数"),
        "active_users_7d": fields.Integer(required=True, description="近 7 日登录用户数"),
        "active_users_30d": fields.Integer(required=True, description="近 30 日登录用户数"),
        "generated_at_utc": fields.String(required=True, description="生成时间(ISO8601)"),
    },
)
StatsSummarySuccessEnvelope = make_success_envelope_model(ns, "StatsSummarySuccessEnvelope", StatsSummaryData)

CustomerUserModel = ns.model(
    "CustomerUser",
    {
        "user_id": fields.String(description="用户标识,仅邮箱身份时为空"),
        "email": fields.String(description="邮箱"),
        "full_name": fields.String(description="姓名"),
        "last_login_utc": fields.String(description="最近登录时间(ISO8601)"),
        "roles": fields.List(fields.String, description="角色标签", example=["Registration: Eier [Default]"]),
    },
)

CustomerOverviewModel = ns.model(
    "CustomerOverview",
    {
        "account_id": fields.String(required=True),
        "customer_name": fields.String(required=True),
        "organization_number": fields.Integer(),
        "subscription_name": fields.String(),
        "users_count": fields.Integer(required=True),
        "last_login_utc": fields.String(),
        "primary_user_email": fields.String(),
        "primary_user_name": fields.String(),
        "is_deleted": fields.Boolean(required=True),
        "is_disabled": fields.Boolean(required=True),
        "is_active": fields.Boolean(),
        "registration_status_id": fields.Integer(),
        "registration_status": fields.String(),
        "last_sync_status": fields.Integer(),
        "last_sync_end_utc": fields.String(),
        "users": fields.List(fields.Nested(CustomerUserModel), required=True),
    },
)

CustomersData = ns.model(
    "StatsCustomersData",
    {
        "items": fields.List(fields.Nested(CustomerOverviewModel), required=True),
        "total": fields.Integer(required=True),
    },
)
CustomersSuccessEnvelope = make_success_envelope_model(ns, "StatsCustomersSuccessEnvelope", CustomersData)

OrganizationLookupData = ns.model(
    "OrganizationLookupData",
    {
        "account_id": fields.String(required=True),
        "customer_name": fields.String(),
        "organization_number": fields.Integer(required=True),
        "is_archived": fields.Boolean(),
        "is_active": fields.Boolean(),
    },
)
OrganizationLookupSuccessEnvelope = make_success_envelope_model(
    ns,
    "OrganizationLookupSuccessEnvelope",
    OrganizationLookupData,
)

DeletedFlagSummaryModel = ns.model(
    "DeletedCustomerFlagSummary",
    {
        "is_archived": fields.Boolean(),
        "is_active": fields.Boolean(),
        "registration_status_id": fields.Integer(),
        "registration_status": fields.String(),
        "count": fields.Integer(required=True),
    },
)
DeletedFlagsData = ns.model(
    "StatsDeletedFlagsData",
    {
        "items": fields.List(fields.Nested(DeletedFlagSummaryModel), required=True),
        "name_prefix": fields.String(required=True, example="XXXX"),
    },
)
DeletedFlagsSuccessEnvelope = make_success_envelope_model(ns, "StatsDeletedFlagsSuccessEnvelope", DeletedFlagsData)

_organization_lookup_query_parser = new_parser()
_organization_lookup_query_parser.add_argument("orgNumber", type=str, location="args")

_deleted_flags_query_parser = new_parser()
_deleted_flags_query_parser.add_argument("namePrefix", type=str, location="args")


@ns.route("")
class StatsSummaryResource(BaseResource):
    """平台计数资源."""

    @ns.response(200, "OK", StatsSummarySuccessEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def get(self):
        """获取平台级客户与用户计数."""

        def _execute():
            summary = self.stats_service().get_summary()
            return self.success(data=summary.to_payload(), message=SuccessMessages.SUMMARY_LOADED)

        return self.safe_call(
            _execute,
            module="stats",
            action="get_summary",
            public_error="获取平台统计失败",
            expected_exceptions=STATS_EXPECTED_EXCEPTIONS,
        )


@ns.route("/customers")
class StatsCustomersResource(BaseResource):
    """客户概览资源."""

    @ns.response(200, "OK", CustomersSuccessEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    def get(self):
        """获取所有未归档客户的概览."""

        def _execute():
            overviews = self.stats_service().get_customers()
            return self.success(
                data={
                    "items": [overview.to_payload() for overview in overviews],
                    "total": len(overviews),
                },
                message=SuccessMessages.CUSTOMERS_LOADED,
            )

        return self.safe_call(
            _execute,
            module="stats",
            action="get_customers",
            public_error="获取客户概览失败",
            expected_exceptions=STATS_EXPECTED_EXCEPTIONS,
        )


@ns.route("/customers/lookup")
class StatsOrganizationLookupResource(BaseResource):
    """按组织编号查询账户."""

    @ns.response(200, "OK", OrganizationLookupSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(404, "Not Found", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    @ns.expect(_organization_lookup_query_parser)
    def get(self):
        """按组织编号查找账户(含已归档账户)."""

        def _execute():
            parsed = cast("dict[str, object]", _organization_lookup_query_parser.parse_args())
            query = validate_or_raise(OrganizationLookupQuery, parsed)
            result = self.stats_service().lookup_organization(query.organization_number)
            if result is None:
                raise NotFoundError(
                    ErrorMessages.ORGANIZATION_NOT_FOUND,
                    message_key="ORGANIZATION_NOT_FOUND",
                    extra={"org_number": query.organization_number},
                )
            return self.success(data=result.to_payload(), message=SuccessMessages.ORGANIZATION_FOUND)

        return self.safe_call(
            _execute,
            module="stats",
            action="lookup_organization",
            public_error="查询组织编号失败",
            expected_exceptions=STATS_EXPECTED_EXCEPTIONS,
            context={"endpoint": "stats_customers_lookup"},
        )


@ns.route("/customers/deleted-flags")
class StatsDeletedFlagsResource(BaseResource):
    """按名称前缀统计账户状态组合."""

    @ns.response(200, "OK", DeletedFlagsSuccessEnvelope)
    @ns.response(400, "Bad Request", ErrorEnvelope)
    @ns.response(500, "Internal Server Error", ErrorEnvelope)
    @ns.expect(_deleted_flags_query_parser)
    def get(self):
        """获取名称前缀匹配的账户在(归档, 启用, 注册状态)下的分组数量."""

        def _execute():
            parsed = cast("dict[str, object]", _deleted_flags_query_parser.parse_args())
            query = validate_or_raise(DeletedFlagsQuery, parsed)
            groups = self.stats_service().get_deleted_customer_flag_summaries(query.name_prefix)
            return self.success(
                data={
                    "items": [group.to_payload() for group in groups],
                    "name_prefix": query.name_prefix,
                },
                message=SuccessMessages.FLAG_SUMMARIES_LOADED,
            )

        return self.safe_call(
            _execute,
            module="stats",
            action="get_deleted_customer_flag_summaries",
            public_error="获取客户状态分组失败",
            expected_exceptions=STATS_EXPECTED_EXCEPTIONS,
            context={"endpoint": "stats_customers_deleted_flags"},
        )
