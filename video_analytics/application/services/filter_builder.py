"""Filter composition for locale, country and event predicates."""

from typing import Callable

from video_analytics.domain.enums import Locale
from video_analytics.domain.errors import InvalidFilterError
from video_analytics.domain.filters import (
    AndGroup,
    BasicFilter,
    FilterExpression,
    NotExpression,
    OrGroup,
)
from video_analytics.domain.types import JsonDict

LOCALE_FIELD = "customEvent:locale"
COUNTRY_FIELD = "country"
EVENT_NAME_FIELD = "eventName"
VIDEO_ID_FIELD = "customEvent:video_id"
PROGRESS_BUCKET_FIELD = "customEvent:progress_bucket"

# Dashboard language codes -> values tracked in the locale dimension
_TRACKED_LOCALES = {
    Locale.EN.value: "en-US",
    Locale.FR.value: "fr-FR",
}


def tracked_locale(locale: str) -> str:
    """Map a dashboard language code to its tracked locale value."""
    return _TRACKED_LOCALES.get(locale, locale)


def locale_filter(locale: str | None) -> FilterExpression | None:
    """Build the locale predicate.

    The site ships only French and English copy, so English is everything that
    is not French: sessions with an unknown or foreign locale count as English.
    """
    if not locale or locale == Locale.ALL.value:
        return None

    if locale == Locale.EN.value:
        return NotExpression(BasicFilter(LOCALE_FIELD, tracked_locale(Locale.FR.value)))

    return BasicFilter(LOCALE_FIELD, tracked_locale(locale))


def country_filter(country: str | None) -> FilterExpression | None:
    """Build the country predicate."""
    if not country or country.lower() == "all":
        return None
    return BasicFilter(COUNTRY_FIELD, country)


def combine_filters(locale: str | None, country: str | None) -> FilterExpression | None:
    """Combine locale and country predicates with AND."""
    locale_expr = locale_filter(locale)
    country_expr = country_filter(country)

    if locale_expr is None and country_expr is None:
        return None
    if country_expr is None:
        return locale_expr
    if locale_expr is None:
        return country_expr
    return AndGroup((locale_expr, country_expr))


def event_filter(event_name: str) -> BasicFilter:
    """Build an event name predicate."""
    return BasicFilter(EVENT_NAME_FIELD, event_name)


def and_all(*expressions: FilterExpression | None) -> FilterExpression | None:
    """AND together the given expressions, skipping missing ones."""
    present = tuple(expr for expr in expressions if expr is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return AndGroup(present)


def with_query_filters(
    base: FilterExpression,
    locale: str | None,
    country: str | None,
    *extra: FilterExpression | None,
) -> FilterExpression:
    """AND an event predicate with the locale, country and extra predicates."""
    return AndGroup(
        tuple(
            expr
            for expr in (base, locale_filter(locale), country_filter(country), *extra)
            if expr is not None
        )
    )


# ============================================================================
# Filter description (JSON form for logs)
# ============================================================================

_FILTER_DESCRIBERS: dict[type, Callable[[FilterExpression], JsonDict]] = {}


def _register_describer(node_type: type, describer: Callable[[FilterExpression], JsonDict]) -> None:
    """Register a filter describer."""
    _FILTER_DESCRIBERS[node_type] = describer


def describe_filter(expression: FilterExpression | None) -> JsonDict | None:
    """Render a filter tree in the analytics API's JSON shape."""
    if expression is None:
        return None

    describer = _FILTER_DESCRIBERS.get(type(expression))
    if describer is None:
        raise InvalidFilterError(f"Unsupported filter node: {type(expression).__name__}")
    return describer(expression)


_register_describer(
    BasicFilter,
    lambda expr: {"filter": {"fieldName": expr.field, "stringFilter": {"value": expr.value}}},
)
_register_describer(
    AndGroup,
    lambda expr: {"andGroup": {"expressions": [describe_filter(e) for e in expr.expressions]}},
)
_register_describer(
    OrGroup,
    lambda expr: {"orGroup": {"expressions": [describe_filter(e) for e in expr.expressions]}},
)
_register_describer(
    NotExpression,
    lambda expr: {"notExpression": describe_filter(expr.expression)},
)
