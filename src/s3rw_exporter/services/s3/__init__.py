"""Object store interface shared by all backends."""

from .base import ObjectStoreClient
from .models import BucketStatus, ObjectVersion

__all__ = ["ObjectStoreClient", "BucketStatus", "ObjectVersion"]
