"""Domain enums for locales, events and job states."""

from enum import Enum


class Locale(str, Enum):
    """Site language variant used as a dashboard filter."""

    ALL = "all"
    FR = "fr"
    EN = "en"


class VideoEvent(str, Enum):
    """GA4 video event names."""

    START = "video_start"
    PROGRESS = "video_progress"
    COMPLETE = "video_complete"


class JobState(str, Enum):
    """Enrichment job lifecycle state."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    DEGRADED = "degraded"  # Circuit open, no job created
