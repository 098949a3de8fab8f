"""Domain types and aliases."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, TypedDict

Timestamp = datetime

# ISO calendar date, YYYY-MM-DD
IsoDate = str

# JSON-serializable types (recursive)
if TYPE_CHECKING:
    JsonValue = str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
else:
    JsonValue = str | int | float | bool | None | dict | list

JsonDict = dict[str, JsonValue]


# Raw session record as kept in the session document
class SessionRecordDict(TypedDict, total=False):
    """Stored analytics session structure."""
    session_id: str
    ip_address: str | None
    created_at: str
    language: str | None
    is_test_data: bool
    country: str | None
    region: str | None
    city: str | None
    updated_at: str


class JobStatsDict(TypedDict):
    """Per-job entry in enrichment stats."""
    key: str
    jobId: str
    state: str
    progress: int
    ageMs: int


class EnrichmentStatsDict(TypedDict):
    """Enrichment manager stats structure."""
    activeJobs: int
    circuitBreakerOpen: bool
    circuitBreakerFailures: int
    jobs: list[JobStatsDict]
