"""Tests for the first-run bootstrap."""

from __future__ import annotations

import pytest

from s3rw_exporter.bootstrap import first_run
from s3rw_exporter.services.memory.client import InMemoryObjectStore
from s3rw_exporter.services.s3.models import BucketStatus
from s3rw_exporter.utils.errors import BootstrapError, TransportError


class TestFirstRun:
    """Test cases for first_run."""

    def test_creates_bucket_and_seeds_object(self, settings, fixture_payloads) -> None:
        """Test the bucket is created and the download object seeded."""
        store = InMemoryObjectStore()

        status = first_run(store, settings, fixture_payloads)

        assert status is BucketStatus.CREATED
        assert settings.bucket in store.buckets
        assert store.get_object(settings.download_key) == fixture_payloads.download_expected
        assert store.calls[0] == ("ensure_bucket", (settings.bucket, settings.region))

    def test_is_idempotent(self, settings, fixture_payloads) -> None:
        """Test a second run succeeds against an existing bucket."""
        store = InMemoryObjectStore()

        first_run(store, settings, fixture_payloads)
        status = first_run(store, settings, fixture_payloads)

        assert status is BucketStatus.ALREADY_EXISTS
        assert store.get_object(settings.download_key) == fixture_payloads.download_expected

    def test_bucket_failure_is_fatal(self, settings, fixture_payloads) -> None:
        """Test a bucket creation failure raises BootstrapError."""
        store = InMemoryObjectStore()
        store.fail("ensure_bucket", TransportError("create bucket", "AccessDenied", "Access Denied"))

        with pytest.raises(BootstrapError, match="unable to create bucket"):
            first_run(store, settings, fixture_payloads)
        assert not any(name == "put_object" for name, _ in store.calls)

    def test_seed_upload_failure_is_fatal(self, settings, fixture_payloads) -> None:
        """Test a seed upload failure raises BootstrapError."""
        store = InMemoryObjectStore()
        store.fail("put_object")

        with pytest.raises(BootstrapError, match="unable to upload initial file"):
            first_run(store, settings, fixture_payloads)
