"""Analytics session store backed by a JSON document in S3."""

import asyncio
from datetime import datetime, timezone

import structlog

from video_analytics.domain.entities import AnalyticsSession, SessionLocation
from video_analytics.domain.ports import SessionStoragePort
from video_analytics.domain.types import IsoDate, SessionRecordDict
from video_analytics.infrastructure.aws.s3_io import S3IO

logger = structlog.get_logger()


def _to_session(record: SessionRecordDict) -> AnalyticsSession:
    return AnalyticsSession(
        session_id=str(record.get("session_id", "")),
        ip_address=record.get("ip_address"),
        created_at=str(record.get("created_at", "")),
        language=record.get("language"),
        is_test_data=bool(record.get("is_test_data", False)),
        country=record.get("country"),
        region=record.get("region"),
        city=record.get("city"),
    )


def _in_window(record: SessionRecordDict, date_from: IsoDate, date_to: IsoDate) -> bool:
    """Inclusive calendar-date match on created_at."""
    created_day = str(record.get("created_at", ""))[:10]
    return bool(created_day) and date_from <= created_day <= date_to


class S3SessionStore(SessionStoragePort):
    """Sessions kept as {"sessions": [...]} in a single S3 object.

    Writes are read-modify-write of the whole document, serialized by a lock.
    """

    def __init__(self, s3_io: S3IO, object_key: str) -> None:
        """Initialize session store."""
        self.s3_io = s3_io
        self.object_key = object_key
        self._lock = asyncio.Lock()

    async def _load_records(self) -> list[SessionRecordDict]:
        if not await self.s3_io.object_exists(self.object_key):
            logger.warning("sessions_document_missing", object_key=self.object_key)
            return []
        document = await self.s3_io.get_json(self.object_key)
        return list(document.get("sessions", []))

    async def get_analytics_sessions(
        self,
        date_from: IsoDate,
        date_to: IsoDate,
        language: str | None = None,
        include_production: bool = False,
    ) -> list[AnalyticsSession]:
        """Get sessions created within [date_from, date_to].

        Test-data sessions are dropped unless include_production is set.
        """
        records = await self._load_records()

        selected = [
            record
            for record in records
            if _in_window(record, date_from, date_to)
            and (include_production or not record.get("is_test_data", False))
            and (not language or record.get("language") == language)
        ]
        logger.info(
            "sessions_loaded",
            date_from=date_from,
            date_to=date_to,
            language=language or "all",
            include_production=include_production,
            total=len(records),
            selected=len(selected),
        )
        return [_to_session(record) for record in selected]

    async def update_session_location(self, ip_address: str, location: SessionLocation) -> int:
        """Set country, region and city on every session with this IP."""
        async with self._lock:
            records = await self._load_records()
            updated_at = datetime.now(timezone.utc).isoformat()

            updated = 0
            for record in records:
                if record.get("ip_address") == ip_address:
                    record["country"] = location.country
                    record["region"] = location.region
                    record["city"] = location.city
                    record["updated_at"] = updated_at
                    updated += 1

            if updated:
                await self.s3_io.put_json(self.object_key, {"sessions": records})

        logger.info("session_location_updated", ip=ip_address, country=location.country, updated=updated)
        return updated
