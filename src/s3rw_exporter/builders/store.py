"""Builder for the object store client."""

from __future__ import annotations

from ..config import ProbeConfig
from ..services.aws.client import BotoObjectStore


def create_store_from_config(config: ProbeConfig) -> BotoObjectStore:
    """Create the object store client from the validated configuration.

    Args:
        config: Validated process configuration

    Returns:
        Configured object store client bound to the probe bucket
    """
    s3 = config.s3
    return BotoObjectStore(
        endpoint=s3.url,
        region=s3.region,
        bucket=s3.bucket,
        access_key=s3.access_key,
        secret_key=s3.secret_key,
        path_style=s3.force_path_style,
        timeout_seconds=s3.timeout_seconds,
    )
