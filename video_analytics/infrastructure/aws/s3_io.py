"""S3 I/O operations."""

import asyncio
import json

import boto3
from botocore.exceptions import ClientError
from tenacity import retry, stop_after_attempt, wait_exponential

from video_analytics.domain.errors import StorageError
from video_analytics.domain.types import JsonDict
from video_analytics.infrastructure.config.settings import Settings

_MISSING_OBJECT_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3IO:
    """S3 JSON document I/O.

    boto3 calls are blocking and run in a worker thread.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize S3 client."""
        self.settings = settings
        self.s3_client = boto3.client("s3", region_name=settings.aws_region)
        self.bucket = settings.aws_s3_bucket

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=2, max=10), reraise=True)
    async def get_json(self, key: str) -> JsonDict:
        """Get JSON object from S3."""
        try:
            response = await asyncio.to_thread(self.s3_client.get_object, Bucket=self.bucket, Key=key)
            content = await asyncio.to_thread(response["Body"].read)
            return json.loads(content.decode("utf-8"))
        except ClientError as e:
            raise StorageError(f"Failed to read S3 object {key}: {e}") from e

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=2, max=10), reraise=True)
    async def put_json(self, key: str, data: JsonDict) -> None:
        """Put JSON object to S3."""
        try:
            content = json.dumps(data, default=str, indent=2)
            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content.encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as e:
            raise StorageError(f"Failed to write S3 object {key}: {e}") from e

    async def object_exists(self, key: str) -> bool:
        """Check if object exists in S3.

        Only a not-found response means absent; any other error raises StorageError.
        """
        try:
            await asyncio.to_thread(self.s3_client.head_object, Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_OBJECT_CODES:
                return False
            raise StorageError(f"Failed to check S3 object {key}: {e}") from e
