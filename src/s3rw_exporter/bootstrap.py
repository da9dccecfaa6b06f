"""One-shot first-run setup of the probe bucket."""

from __future__ import annotations

import logging

from .config import S3Settings
from .fixture import Fixture
from .services.s3.base import ObjectStoreClient
from .services.s3.models import BucketStatus
from .utils.errors import BootstrapError, ProbeError

logger = logging.getLogger(__name__)


def first_run(store: ObjectStoreClient, settings: S3Settings, fixture: Fixture) -> BucketStatus:
    """Create the bucket if needed and seed the object the download check reads.

    Safe to run repeatedly: an existing bucket, whoever created it, counts
    as success and the seed object is simply overwritten.

    Args:
        store: Object store client
        settings: S3 settings
        fixture: Loaded fixture payloads

    Returns:
        Whether the bucket was created or already existed

    Raises:
        BootstrapError: If the bucket cannot be created or the seed upload fails
    """
    logger.info(f"Creating bucket '{settings.bucket}'")
    try:
        status = store.ensure_bucket(settings.bucket, settings.region)
    except ProbeError as e:
        raise BootstrapError(f"unable to create bucket '{settings.bucket}': {e}") from e

    if status is BucketStatus.ALREADY_EXISTS:
        logger.warning(f"Bucket '{settings.bucket}' already exists")

    logger.info(
        f"Uploading initial file '{settings.download_key}' from '{settings.download_file_path}'"
    )
    try:
        store.put_object(settings.download_key, fixture.download_expected)
    except ProbeError as e:
        raise BootstrapError(f"unable to upload initial file: {e}") from e

    return status
