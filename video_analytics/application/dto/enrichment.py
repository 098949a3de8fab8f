"""Enrichment DTOs."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from video_analytics.application.dto.dashboard import validate_iso_date
from video_analytics.domain.entities import EnrichmentJob, EnrichmentJobKey
from video_analytics.domain.enums import JobState
from video_analytics.domain.types import IsoDate


class EnrichmentRequest(BaseModel):
    """Request to enrich sessions of a date window with locations."""

    model_config = ConfigDict(populate_by_name=True)

    date_from: IsoDate = Field(alias="dateFrom")
    date_to: IsoDate = Field(alias="dateTo")
    language: str | None = None
    include_production: bool = Field(default=False, alias="includeProduction")

    @field_validator("date_from", "date_to")
    @classmethod
    def check_iso_date(cls, value: str) -> str:
        return validate_iso_date(value)

    @field_validator("language")
    @classmethod
    def check_language(cls, value: str | None) -> str | None:
        # "all" and blank both mean no language filter
        if not value or value.strip().lower() == "all":
            return None
        return value.strip()

    @model_validator(mode="after")
    def check_window(self) -> "EnrichmentRequest":
        if self.date_from > self.date_to:
            raise ValueError('"dateFrom" cannot be after "dateTo".')
        return self

    def to_key(self) -> EnrichmentJobKey:
        return EnrichmentJobKey(
            date_from=self.date_from,
            date_to=self.date_to,
            language=self.language,
            include_production=self.include_production,
        )


class EnrichmentJobStatus(BaseModel):
    """Job status as returned to dashboard clients."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    state: JobState
    progress: int = Field(ge=0, le=100)
    started_at: int = Field(alias="startedAt")  # epoch ms
    ttl: int  # epoch ms
    total_ips: int | None = Field(default=None, alias="totalIPs")
    processed_ips: int | None = Field(default=None, alias="processedIPs")
    error: str | None = None

    @classmethod
    def from_job(cls, job: EnrichmentJob) -> "EnrichmentJobStatus":
        return cls(
            job_id=job.job_id,
            state=job.state,
            progress=job.progress,
            started_at=int(job.started_at.timestamp() * 1000),
            ttl=int(job.ttl.timestamp() * 1000),
            total_ips=job.total_ips,
            processed_ips=job.processed_ips,
            error=job.error,
        )
