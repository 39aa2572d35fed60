"""S3 blob store for travel and profile images."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import ErrorCode, UpstreamError
from core.storage.interface import BlobStore

logger = logging.getLogger(__name__)

# DeleteObjects accepts at most 1000 keys per request.
DELETE_BATCH_SIZE = 1000

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3BlobStore(BlobStore):
    def __init__(self, s3_client: Any, bucket: str):
        self._client = s3_client
        self._bucket = bucket

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(Bucket=self._bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to upload {key}: {e}", code=ErrorCode.UPLOAD_FAILED) from e

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return False
            raise UpstreamError(f"Failed to stat {key}: {e}") from e
        except BotoCoreError as e:
            raise UpstreamError(f"Failed to stat {key}: {e}") from e
        return True

    def presign_get(self, key: str, expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires_in,
                HttpMethod="GET",
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to sign {key}: {e}", code=ErrorCode.SIGN_FAILED) from e

    def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to list objects under {prefix}: {e}") from e
        return keys

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to delete {key}: {e}") from e

    def delete_keys(self, keys: list[str]) -> list[str]:
        failed: list[str] = []
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            try:
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (BotoCoreError, ClientError):
                logger.exception("Batch delete of %d objects failed", len(batch))
                failed.extend(batch)
                continue

            for error in response.get("Errors", []):
                logger.warning("Failed to delete %s: %s", error.get("Key"), error.get("Code"))
                failed.append(error["Key"])
        return failed
