"""Unit tests for the GA4 Data API adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from google.analytics.data_v1beta import types as ga4_types
from google.api_core.exceptions import ResourceExhausted

from video_analytics.domain.entities import ReportRequest
from video_analytics.domain.errors import AnalyticsQueryError, InvalidFilterError
from video_analytics.domain.filters import AndGroup, BasicFilter, NotExpression, OrGroup
from video_analytics.infrastructure.ga4.data_client import (
    GA4DataClient,
    build_run_report_request,
    parse_run_report_response,
    to_ga4_filter,
)


@pytest.fixture
def mock_settings():
    """Create mock settings."""
    settings = MagicMock()
    settings.ga4_property_id = "123456"
    settings.ga4_service_account_key = None
    return settings


def report_response(*rows: tuple[list[str], list[str]]) -> ga4_types.RunReportResponse:
    return ga4_types.RunReportResponse(
        rows=[
            ga4_types.Row(
                dimension_values=[ga4_types.DimensionValue(value=d) for d in dims],
                metric_values=[ga4_types.MetricValue(value=m) for m in metrics],
            )
            for dims, metrics in rows
        ]
    )


def test_basic_filter_conversion():
    """Test a basic filter becomes a string filter."""
    expr = to_ga4_filter(BasicFilter("eventName", "video_start"))

    assert expr.filter.field_name == "eventName"
    assert expr.filter.string_filter.value == "video_start"


def test_nested_filter_conversion():
    """Test AND, OR and NOT nodes convert recursively."""
    tree = AndGroup(
        (
            OrGroup((BasicFilter("eventName", "video_complete"), BasicFilter("eventName", "video_progress"))),
            NotExpression(BasicFilter("customEvent:locale", "fr-FR")),
        )
    )

    expr = to_ga4_filter(tree)

    or_group, not_expr = expr.and_group.expressions
    assert [e.filter.string_filter.value for e in or_group.or_group.expressions] == [
        "video_complete",
        "video_progress",
    ]
    assert not_expr.not_expression.filter.field_name == "customEvent:locale"
    assert not_expr.not_expression.filter.string_filter.value == "fr-FR"


def test_unknown_filter_node():
    """Test unknown filter nodes are rejected."""
    with pytest.raises(InvalidFilterError):
        to_ga4_filter({"filter": "eventName"})


def test_build_run_report_request():
    """Test request construction."""
    request = ReportRequest(
        date_start="2025-01-01",
        date_end="2025-01-31",
        metrics=("activeUsers",),
        dimensions=("country",),
        dimension_filter=BasicFilter("country", "FR"),
        order_by_metric="activeUsers",
        limit=50,
    )

    ga4_request = build_run_report_request("properties/123456", request)

    assert ga4_request.property == "properties/123456"
    assert ga4_request.date_ranges[0].start_date == "2025-01-01"
    assert ga4_request.date_ranges[0].end_date == "2025-01-31"
    assert [m.name for m in ga4_request.metrics] == ["activeUsers"]
    assert [d.name for d in ga4_request.dimensions] == ["country"]
    assert ga4_request.dimension_filter.filter.string_filter.value == "FR"
    assert ga4_request.order_bys[0].metric.metric_name == "activeUsers"
    assert ga4_request.order_bys[0].desc
    assert ga4_request.limit == 50


def test_build_run_report_request_minimal():
    """Test optional request parts are left unset."""
    request = ReportRequest(date_start="2025-01-01", date_end="2025-01-01", metrics=("sessions",))

    ga4_request = build_run_report_request("properties/1", request)

    assert len(ga4_request.order_bys) == 0
    assert ga4_request.limit == 0
    assert "dimension_filter" not in ga4_request


def test_parse_run_report_response():
    """Test response rows map to report rows."""
    result = parse_run_report_response(report_response((["US"], ["10"]), (["FR"], ["5"])))

    assert [(row.dimension(0), row.metric_int(0)) for row in result.rows] == [("US", 10), ("FR", 5)]


@pytest.mark.asyncio
async def test_run_report(mock_settings):
    """Test running a report through the API client."""
    api_client = MagicMock()
    api_client.run_report = AsyncMock(return_value=report_response(([], ["42"])))
    client = GA4DataClient(mock_settings, client=api_client)

    result = await client.run_report(ReportRequest("2025-01-01", "2025-01-31", ("sessions",)))

    assert result.first_metric_int() == 42
    sent = api_client.run_report.call_args.kwargs["request"]
    assert sent.property == "properties/123456"


@pytest.mark.asyncio
async def test_run_report_api_error(mock_settings):
    """Test API errors surface as AnalyticsQueryError."""
    api_client = MagicMock()
    api_client.run_report = AsyncMock(side_effect=ResourceExhausted("quota exceeded"))
    client = GA4DataClient(mock_settings, client=api_client)

    with pytest.raises(AnalyticsQueryError, match="quota exceeded"):
        await client.run_report(ReportRequest("2025-01-01", "2025-01-31", ("sessions",)))
