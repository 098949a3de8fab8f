"""Prometheus metrics."""

from prometheus_client import Counter, Gauge, Histogram

ga4_queries_total = Counter(
    "ga4_queries_total",
    "Total number of analytics data API queries",
    ["query", "outcome"],
)

ga4_query_duration_seconds = Histogram(
    "ga4_query_duration_seconds",
    "Duration of analytics data API queries in seconds",
    ["query"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10],
)

enrichment_jobs_started = Counter(
    "enrichment_jobs_started_total",
    "Total number of location enrichment jobs started",
)

enrichment_jobs_succeeded = Counter(
    "enrichment_jobs_succeeded_total",
    "Total number of location enrichment jobs succeeded",
)

enrichment_jobs_failed = Counter(
    "enrichment_jobs_failed_total",
    "Total number of location enrichment jobs failed",
)

enrichment_degraded = Counter(
    "enrichment_degraded_total",
    "Total number of enrichment requests rejected by the circuit breaker",
)

enrichment_ips_processed = Counter(
    "enrichment_ips_processed_total",
    "Total number of IP addresses processed by enrichment jobs",
    ["outcome"],
)

enrichment_circuit_open = Gauge(
    "enrichment_circuit_open",
    "1 while the enrichment circuit breaker is open",
)
