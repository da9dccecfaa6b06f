"""boto3 backed object store."""

from .client import BotoObjectStore

__all__ = ["BotoObjectStore"]
