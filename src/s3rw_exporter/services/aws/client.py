"""boto3 object store client implementation."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from ...constants import (
    BUCKET_EXISTS_CODES,
    DEFAULT_REGION,
    ERROR_LABEL_TIMEOUT,
    NOT_FOUND_CODES,
    NULL_VERSION_ID,
)
from ...utils.errors import (
    ObjectNotFoundError,
    RestoreWithoutVersionError,
    TransportError,
    sanitize_exception,
)
from ..s3.models import BucketStatus, ObjectVersion

logger = logging.getLogger(__name__)

# Stores that cannot list versions answer with one of these
_VERSIONS_UNSUPPORTED_CODES = ("NotImplemented", "MethodNotAllowed")


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", "Unknown"))


def to_transport_error(operation: str, error: Exception) -> TransportError:
    """Convert a botocore exception into a TransportError.

    Args:
        operation: Human readable operation name, e.g. "download file"
        error: Exception raised by botocore

    Returns:
        TransportError (ObjectNotFoundError for missing keys)
    """
    message = sanitize_exception(error)
    if isinstance(error, ClientError):
        code = _error_code(error)
        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(operation, code, message)
        return TransportError(operation, code, message)
    if isinstance(error, (ConnectTimeoutError, ReadTimeoutError)):
        return TransportError(operation, ERROR_LABEL_TIMEOUT, message)
    return TransportError(operation, type(error).__name__, message)


class BotoObjectStore:
    """Object store client backed by a boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        region: str,
        bucket: str,
        access_key: str,
        secret_key: str,
        path_style: bool = False,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the boto3 S3 client.

        Args:
            endpoint: S3 endpoint URL
            region: Region name
            bucket: Bucket every object operation targets
            access_key: Access key ID
            secret_key: Secret access key
            path_style: Use path-style addressing
            timeout_seconds: Optional connect and read timeout
        """
        self.endpoint = endpoint
        self.region = region
        self.bucket = bucket
        self.path_style = path_style

        config_kwargs: dict[str, Any] = {
            "signature_version": "s3v4",
            "s3": {"addressing_style": "path" if path_style else "auto"},
            # A probe reports what one request sees, so no SDK retries
            "retries": {"max_attempts": 1, "mode": "standard"},
        }
        if timeout_seconds is not None:
            config_kwargs["connect_timeout"] = timeout_seconds
            config_kwargs["read_timeout"] = timeout_seconds

        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(**config_kwargs),
        )

    def put_object(self, key: str, data: bytes) -> None:
        """Upload an object in a single request."""
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)
        except (ClientError, BotoCoreError) as e:
            raise to_transport_error("upload file", e) from e

    def multipart_put(self, key: str, data: bytes, part_size: int, concurrency: int) -> None:
        """Upload an object through the multipart API.

        The payload is split into parts of ``part_size`` bytes (an empty
        payload still produces one part) and parts are sent by at most
        ``concurrency`` worker threads. The upload is aborted when any part
        fails.
        """
        if part_size <= 0:
            raise ValueError("part_size must be positive")
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")

        chunks = [data[i:i + part_size] for i in range(0, len(data), part_size)] or [b""]

        try:
            response = self.client.create_multipart_upload(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise to_transport_error("start multipart upload", e) from e
        upload_id = response["UploadId"]

        def upload_part(part_number: int, chunk: bytes) -> dict[str, Any]:
            part = self.client.upload_part(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                PartNumber=part_number,
                Body=chunk,
            )
            return {"PartNumber": part_number, "ETag": part["ETag"]}

        try:
            with ThreadPoolExecutor(max_workers=min(concurrency, len(chunks))) as executor:
                futures = [
                    executor.submit(upload_part, number, chunk)
                    for number, chunk in enumerate(chunks, start=1)
                ]
                parts = [future.result() for future in futures]

            self.client.complete_multipart_upload(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={"Parts": sorted(parts, key=lambda p: p["PartNumber"])},
            )
        except Exception as e:
            # Incomplete uploads stay on the store until aborted
            self._abort_multipart(key, upload_id)
            if isinstance(e, (ClientError, BotoCoreError)):
                raise to_transport_error("multipart upload file", e) from e
            raise

        logger.debug(f"Uploaded {key} in {len(chunks)} part(s)")

    def _abort_multipart(self, key: str, upload_id: str) -> None:
        try:
            self.client.abort_multipart_upload(Bucket=self.bucket, Key=key, UploadId=upload_id)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Failed to abort multipart upload {upload_id} for {key}: {sanitize_exception(e)}")

    def get_object(self, key: str) -> bytes:
        """Download the full content of an object."""
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise to_transport_error("download file", e) from e

    def current_version_id(self, key: str) -> str | None:
        """Return the version id to restore after deleting, None if unversioned.

        This is the live version, or the newest real version when a delete
        marker left by an earlier unrestored delete sits on top. Must be
        called before deleting, the id cannot be recovered afterwards.
        """
        try:
            response = self.client.list_object_versions(Bucket=self.bucket, Prefix=key)
        except ClientError as e:
            if _error_code(e) in _VERSIONS_UNSUPPORTED_CODES:
                logger.warning(f"Store does not support listing versions: {sanitize_exception(e)}")
                return None
            raise to_transport_error("list versions", e) from e
        except BotoCoreError as e:
            raise to_transport_error("list versions", e) from e

        # S3 lists the versions of a key newest first
        versions = [v for v in response.get("Versions", []) if v.get("Key") == key]
        if not versions:
            return None
        latest = next((v for v in versions if v.get("IsLatest")), None)
        if latest is None:
            latest = versions[0]
            logger.warning(f"{key} is hidden by a delete marker, using newest version {latest.get('VersionId')}")

        version_id = latest.get("VersionId")
        if version_id and version_id != NULL_VERSION_ID:
            return version_id
        return None

    def delete_object(self, key: str) -> ObjectVersion:
        """Delete an object, returning the version it had before deletion."""
        version_id = self.current_version_id(key)
        if version_id is None:
            logger.warning(f"No version id found for {key}, restore will not be possible")

        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise to_transport_error("delete file", e) from e

        return ObjectVersion(key=key, version_id=version_id)

    def restore_object(self, version: ObjectVersion) -> None:
        """Copy a previous version back onto the live key."""
        if not version.has_version:
            raise RestoreWithoutVersionError(version.key)

        try:
            self.client.copy_object(
                Bucket=self.bucket,
                Key=version.key,
                CopySource={
                    "Bucket": self.bucket,
                    "Key": version.key,
                    "VersionId": version.version_id,
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise to_transport_error("restore file", e) from e

    def ensure_bucket(self, name: str, region: str) -> BucketStatus:
        """Create a bucket, treating an existing one as success."""
        create_params: dict[str, Any] = {"Bucket": name}
        if region and region != DEFAULT_REGION:
            create_params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            self.client.create_bucket(**create_params)
        except ClientError as e:
            if _error_code(e) in BUCKET_EXISTS_CODES:
                logger.warning(f"Bucket {name} already exists: {_error_code(e)}")
                return BucketStatus.ALREADY_EXISTS
            raise to_transport_error("create bucket", e) from e
        except BotoCoreError as e:
            raise to_transport_error("create bucket", e) from e

        return BucketStatus.CREATED
