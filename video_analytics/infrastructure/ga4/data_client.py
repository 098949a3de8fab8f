"""GA4 Data API adapter."""

import json
from typing import Callable

import structlog
from google.analytics.data_v1beta import BetaAnalyticsDataAsyncClient
from google.analytics.data_v1beta import types as ga4_types
from google.api_core.exceptions import GoogleAPIError
from google.oauth2 import service_account

from video_analytics.domain.entities import ReportRequest, ReportResult, ReportRow
from video_analytics.domain.errors import AnalyticsQueryError, InvalidFilterError
from video_analytics.domain.filters import (
    AndGroup,
    BasicFilter,
    FilterExpression,
    NotExpression,
    OrGroup,
)
from video_analytics.domain.ports import AnalyticsDataPort
from video_analytics.infrastructure.config.settings import Settings

logger = structlog.get_logger()

# Filter tree -> GA4 FilterExpression message
_FILTER_CONVERTERS: dict[type, Callable[[FilterExpression], ga4_types.FilterExpression]] = {}


def _register_converter(
    node_type: type,
    converter: Callable[[FilterExpression], ga4_types.FilterExpression],
) -> None:
    """Register a filter converter."""
    _FILTER_CONVERTERS[node_type] = converter


def to_ga4_filter(expression: FilterExpression) -> ga4_types.FilterExpression:
    """Convert a filter tree to a GA4 FilterExpression."""
    converter = _FILTER_CONVERTERS.get(type(expression))
    if converter is None:
        raise InvalidFilterError(f"Unsupported filter node: {type(expression).__name__}")
    return converter(expression)


def _convert_basic(expr: BasicFilter) -> ga4_types.FilterExpression:
    return ga4_types.FilterExpression(
        filter=ga4_types.Filter(
            field_name=expr.field,
            string_filter=ga4_types.Filter.StringFilter(value=expr.value),
        )
    )


def _convert_and(expr: AndGroup) -> ga4_types.FilterExpression:
    return ga4_types.FilterExpression(
        and_group=ga4_types.FilterExpressionList(
            expressions=[to_ga4_filter(e) for e in expr.expressions]
        )
    )


def _convert_or(expr: OrGroup) -> ga4_types.FilterExpression:
    return ga4_types.FilterExpression(
        or_group=ga4_types.FilterExpressionList(
            expressions=[to_ga4_filter(e) for e in expr.expressions]
        )
    )


def _convert_not(expr: NotExpression) -> ga4_types.FilterExpression:
    return ga4_types.FilterExpression(not_expression=to_ga4_filter(expr.expression))


_register_converter(BasicFilter, _convert_basic)
_register_converter(AndGroup, _convert_and)
_register_converter(OrGroup, _convert_or)
_register_converter(NotExpression, _convert_not)


def build_run_report_request(property_name: str, request: ReportRequest) -> ga4_types.RunReportRequest:
    """Build a GA4 RunReportRequest from a report request."""
    params = {
        "property": property_name,
        "date_ranges": [ga4_types.DateRange(start_date=request.date_start, end_date=request.date_end)],
        "dimensions": [ga4_types.Dimension(name=name) for name in request.dimensions],
        "metrics": [ga4_types.Metric(name=name) for name in request.metrics],
    }
    if request.dimension_filter is not None:
        params["dimension_filter"] = to_ga4_filter(request.dimension_filter)
    if request.order_by_metric:
        params["order_bys"] = [
            ga4_types.OrderBy(
                metric=ga4_types.OrderBy.MetricOrderBy(metric_name=request.order_by_metric),
                desc=True,
            )
        ]
    if request.limit:
        params["limit"] = request.limit
    return ga4_types.RunReportRequest(**params)


def parse_run_report_response(response: ga4_types.RunReportResponse) -> ReportResult:
    """Convert a GA4 RunReportResponse to a report result."""
    return ReportResult(
        rows=tuple(
            ReportRow(
                dimension_values=tuple(value.value for value in row.dimension_values),
                metric_values=tuple(value.value for value in row.metric_values),
            )
            for row in response.rows
        )
    )


class GA4DataClient(AnalyticsDataPort):
    """GA4 Data API (v1beta) report runner."""

    def __init__(self, settings: Settings, client: BetaAnalyticsDataAsyncClient | None = None) -> None:
        """Initialize GA4 client settings. The API client is created on first use."""
        self.property_name = f"properties/{settings.ga4_property_id}"
        self._service_account_key = settings.ga4_service_account_key
        self._client = client

    def _get_client(self) -> BetaAnalyticsDataAsyncClient:
        if self._client is None:
            if self._service_account_key:
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(self._service_account_key)
                )
                self._client = BetaAnalyticsDataAsyncClient(credentials=credentials)
            else:
                # GOOGLE_APPLICATION_CREDENTIALS / application default credentials
                self._client = BetaAnalyticsDataAsyncClient()
        return self._client

    async def run_report(self, request: ReportRequest) -> ReportResult:
        """Run a report against the configured GA4 property."""
        ga4_request = build_run_report_request(self.property_name, request)
        try:
            response = await self._get_client().run_report(request=ga4_request)
        except GoogleAPIError as e:
            logger.error(
                "ga4_run_report_failed",
                property=self.property_name,
                metrics=list(request.metrics),
                error=str(e),
            )
            raise AnalyticsQueryError(f"GA4 runReport failed: {e}") from e

        result = parse_run_report_response(response)
        logger.debug("ga4_run_report_completed", metrics=list(request.metrics), row_count=len(result.rows))
        return result
