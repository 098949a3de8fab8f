"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # GA4 Data API
    ga4_property_id: str
    # Full service account JSON; falls back to application default credentials
    ga4_service_account_key: str | None = None
    ga4_query_timeout_seconds: float = 2.0
    ga4_report_timeout_seconds: float = 10.0

    # Session storage (JSON document in S3)
    aws_region: str = "us-east-1"
    aws_s3_bucket: str
    sessions_object_key: str = "analytics/analytics-sessions.json"

    # IP geolocation providers
    location_primary_url: str = "https://ipapi.co/{ip}/json/"
    location_fallback_url: str = "http://ip-api.com/json/{ip}"
    location_user_agent: str = "video-analytics/1.0"
    location_timeout_seconds: float = 10.0
    location_min_request_interval_seconds: float = 3.0
    location_cache_ttl_seconds: int = 24 * 60 * 60

    # Enrichment jobs
    enrichment_debounce_seconds: int = 60
    enrichment_job_ttl_seconds: int = 300
    enrichment_max_failures: int = 3
    enrichment_circuit_open_seconds: int = 300
    enrichment_concurrency_limit: int = 2
    enrichment_stagger_seconds: float = 1.0
    enrichment_batch_pause_seconds: float = 2.0
    enrichment_sweep_interval_seconds: float = 60.0
    # 0 disables the scheduled enrichment runner
    enrichment_schedule_interval_seconds: int = 0
    enrichment_schedule_lookback_days: int = 1
    enrichment_include_production: bool = True

    prometheus_port: int = 9300
    log_level: str = "INFO"
    log_json: bool = True

    # AWS Credentials (optional - picked up by boto3 from environment variables)
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
    )
