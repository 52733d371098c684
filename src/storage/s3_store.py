"""boto3-backed ObjectStore for Amazon S3."""
from functools import lru_cache
from typing import Any, Optional
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .object_store import ObjectStore, ObjectStoreError, ObjectNotFound, ObjectAlreadyExists

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
PRECONDITION_FAILED_CODES = {"412", "PreconditionFailed"}


@lru_cache(maxsize=None)
def get_s3_client(region: Optional[str] = None):
    """Shared S3 client per region; boto3 clients are thread safe."""
    return boto3.client("s3", region_name=region)


class S3ObjectStore(ObjectStore):
    """ObjectStore over a boto3 S3 client (real or mock)."""

    def __init__(self, client: Any):
        self.client = client

    def read(self, bucket: str, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            body = response["Body"]
            try:
                data = body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "GetObject", bucket, key) from e

        logger.info(f"Read {len(data)} bytes from s3://{bucket}/{key}")
        return data

    def exists(self, bucket: str, key: str) -> bool:
        try:
            self.client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            error = self._translate(e, "HeadObject", bucket, key)
            if isinstance(error, ObjectNotFound):
                return False
            raise error from e
        return True

    def write(self, bucket: str, key: str, body: bytes, content_type: str,
              create_only: bool = False) -> None:
        params = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if create_only:
            params["IfNoneMatch"] = "*"

        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "PutObject", bucket, key) from e

        logger.info(f"Wrote {len(body)} bytes to s3://{bucket}/{key}")

    def _translate(self, error: Exception, operation: str, bucket: str, key: str) -> ObjectStoreError:
        """Map a botocore error onto the ObjectStore error types."""
        if not isinstance(error, ClientError):
            return ObjectStoreError(f"{operation} s3://{bucket}/{key} failed: {error}", bucket, key)

        code = str(error.response.get("Error", {}).get("Code", ""))
        status = str(error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", ""))
        message = f"{operation} s3://{bucket}/{key} failed: {code or status}"

        if code in NOT_FOUND_CODES or status == "404":
            return ObjectNotFound(message, bucket, key, code)
        if code in PRECONDITION_FAILED_CODES or status == "412":
            return ObjectAlreadyExists(message, bucket, key, code)
        return ObjectStoreError(message, bucket, key, code)
