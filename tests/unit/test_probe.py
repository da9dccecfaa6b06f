"""Tests for the probe cycle."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from s3rw_exporter.constants import (
    ERROR_KIND_MISMATCH,
    ERROR_KIND_RESTORE_WITHOUT_VERSION,
    ERROR_KIND_TRANSPORT,
    ERROR_KIND_UNEXPECTED,
)
from s3rw_exporter.fixture import Fixture
from s3rw_exporter.probe import Operation, ProbeCycle, enabled_operations
from s3rw_exporter.services.memory.client import InMemoryObjectStore
from s3rw_exporter.services.s3.models import ObjectVersion
from s3rw_exporter.utils.errors import ObjectNotFoundError, TransportError


class TestEnabledOperations:
    """Test which steps a cycle runs."""

    def test_minimal(self, settings_factory) -> None:
        """Test only upload and download run by default."""
        assert enabled_operations(settings_factory()) == [Operation.UPLOAD, Operation.DOWNLOAD]

    def test_all_enabled(self, settings_factory) -> None:
        """Test every step runs in cycle order."""
        settings = settings_factory(multipart_upload_enabled=True, versioning_check_enabled=True)
        assert enabled_operations(settings) == [
            Operation.UPLOAD,
            Operation.MULTIPART_UPLOAD,
            Operation.DELETE,
            Operation.RESTORE,
            Operation.DOWNLOAD,
        ]


class TestProbeCycle:
    """Test cases for ProbeCycle.run."""

    def test_default_cycle_produces_upload_then_download(self, store, fixture_payloads, settings, sink) -> None:
        """Test a cycle with optional checks disabled yields exactly two results."""
        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        assert [r.operation for r in results] == [Operation.UPLOAD, Operation.DOWNLOAD]
        assert all(r.succeeded for r in results)
        assert sink.status == {"upload": 1, "download": 1}
        assert len(sink.cycles) == 1

    def test_result_count_matches_enabled_steps(self, versioned_store, fixture_payloads, settings_factory, sink) -> None:
        """Test one result per enabled step, with no duplicates."""
        settings = settings_factory(multipart_upload_enabled=True, versioning_check_enabled=True)
        cycle = ProbeCycle(versioned_store, fixture_payloads, settings, sink)

        results = cycle.run()

        assert [r.operation for r in results] == cycle.operations
        assert len({r.operation for r in results}) == len(results)
        assert all(r.succeeded for r in results), results

    def test_upload_stores_payload(self, store, fixture_payloads, settings, sink) -> None:
        """Test the uploaded object can be read back unchanged."""
        ProbeCycle(store, fixture_payloads, settings, sink).run()

        assert store.get_object(settings.upload_key) == fixture_payloads.upload_payload

    def test_multipart_upload_uses_configured_parts(self, fixture_payloads, settings_factory, sink) -> None:
        """Test multipart upload receives the configured part size and concurrency."""
        settings = settings_factory(multipart_upload_enabled=True)
        store = MagicMock()
        store.get_object.return_value = fixture_payloads.download_expected

        ProbeCycle(store, fixture_payloads, settings, sink).run()

        store.multipart_put.assert_called_once_with(
            settings.upload_key,
            fixture_payloads.upload_payload,
            part_size=5 * 1024 * 1024,
            concurrency=5,
        )

    def test_failed_upload_does_not_stop_download(self, store, fixture_payloads, settings, sink) -> None:
        """Test a transport failure is isolated to its step."""
        store.fail("put_object", TransportError("upload file", "AccessDenied", "Access Denied"))

        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        upload, download = results
        assert not upload.succeeded
        assert upload.error_kind == ERROR_KIND_TRANSPORT
        assert upload.error_label == "AccessDenied"
        assert download.succeeded
        assert sink.status == {"upload": 0, "download": 1}
        assert sink.errors["upload"] == {(ERROR_KIND_TRANSPORT, "AccessDenied"): 1}

    def test_content_mismatch_is_not_a_transport_error(self, settings, sink) -> None:
        """Test wrong bytes are reported as a mismatch with status 0."""
        store = InMemoryObjectStore()
        store.put_object(settings.download_key, b"ABC")
        payloads = Fixture(download_expected=b"ABD", upload_payload=b"x")

        results = ProbeCycle(store, payloads, settings, sink).run()

        download = results[-1]
        assert not download.succeeded
        assert download.error_kind == ERROR_KIND_MISMATCH
        assert download.error_label == "content_mismatch"
        assert sink.status["download"] == 0
        assert all(kind != ERROR_KIND_TRANSPORT for kind, _ in sink.errors["download"])

    def test_missing_object_is_a_transport_error(self, fixture_payloads, settings, sink) -> None:
        """Test a missing download object is not reported as a mismatch."""
        store = InMemoryObjectStore()

        download = ProbeCycle(store, fixture_payloads, settings, sink).run()[-1]

        assert download.error_kind == ERROR_KIND_TRANSPORT
        assert download.error_label == "NoSuchKey"

    def test_versioning_check_restores_object(self, versioned_store, fixture_payloads, settings_factory, sink) -> None:
        """Test delete then restore leaves the download object readable."""
        settings = settings_factory(versioning_check_enabled=True)

        results = ProbeCycle(versioned_store, fixture_payloads, settings, sink).run()

        assert [r.succeeded for r in results] == [True, True, True, True]
        assert versioned_store.get_object(settings.download_key) == fixture_payloads.download_expected
        restore_calls = [detail for name, detail in versioned_store.calls if name == "restore_object"]
        assert restore_calls == [ObjectVersion(key=settings.download_key, version_id="v1")]

    def test_unversioned_bucket_reports_restore_without_version(self, store, fixture_payloads, settings_factory, sink) -> None:
        """Test restore without a version id is labeled and download still runs."""
        settings = settings_factory(versioning_check_enabled=True)

        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        operations = [r.operation for r in results]
        assert operations == [Operation.UPLOAD, Operation.DELETE, Operation.RESTORE, Operation.DOWNLOAD]
        delete, restore, download = results[1:]
        assert delete.succeeded
        assert not restore.succeeded
        assert restore.error_kind == ERROR_KIND_RESTORE_WITHOUT_VERSION
        # The object is gone for good in an unversioned bucket
        assert download.error_kind == ERROR_KIND_TRANSPORT

    def test_failed_delete_still_attempts_restore_and_download(self, versioned_store, fixture_payloads, settings_factory, sink) -> None:
        """Test a failing delete neither skips restore nor download."""
        settings = settings_factory(versioning_check_enabled=True)
        versioned_store.fail(
            "delete_object",
            ObjectNotFoundError("delete file", "NoSuchKey", "The specified key does not exist."),
        )

        results = ProbeCycle(versioned_store, fixture_payloads, settings, sink).run()

        delete, restore, download = results[1:]
        assert not delete.succeeded
        assert delete.error_label == "NoSuchKey"
        assert not restore.succeeded
        assert restore.error_kind == ERROR_KIND_RESTORE_WITHOUT_VERSION
        assert download.succeeded
        assert ("restore_object", ObjectVersion(key=settings.download_key)) in versioned_store.calls

    def test_versioning_check_recovers_after_failed_restore(self, versioned_store, fixture_payloads, settings_factory, sink) -> None:
        """Test a transient restore failure does not break later cycles."""
        settings = settings_factory(versioning_check_enabled=True)
        cycle = ProbeCycle(versioned_store, fixture_payloads, settings, sink)
        versioned_store.fail("restore_object", TransportError("restore file", "SlowDown", "Please reduce your request rate."))

        first = cycle.run()
        assert not first[2].succeeded
        assert first[2].error_label == "SlowDown"
        assert not first[3].succeeded

        versioned_store.recover()
        for _ in range(3):
            results = cycle.run()

        assert all(r.succeeded for r in results)
        assert versioned_store.get_object(settings.download_key) == fixture_payloads.download_expected

    def test_unexpected_exception_is_isolated(self, fixture_payloads, settings, sink) -> None:
        """Test an exception outside the taxonomy is recorded and the cycle continues."""
        store = MagicMock()
        store.put_object.side_effect = RuntimeError("boom")
        store.get_object.return_value = fixture_payloads.download_expected

        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        assert results[0].error_kind == ERROR_KIND_UNEXPECTED
        assert results[0].error_label == "RuntimeError"
        assert results[1].succeeded

    def test_every_step_failing_still_reports_every_step(self, fixture_payloads, settings_factory, sink) -> None:
        """Test metrics never go stale by omission."""
        settings = settings_factory(multipart_upload_enabled=True, versioning_check_enabled=True)
        store = InMemoryObjectStore()
        for operation in ("put_object", "multipart_put", "delete_object", "restore_object", "get_object"):
            store.fail(operation)

        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        assert len(results) == 5
        assert not any(r.succeeded for r in results)
        assert set(sink.status) == {"upload", "multipart_upload", "delete", "restore", "download"}
        assert set(sink.status.values()) == {0}

    def test_each_operation_is_cleared_before_it_is_set(self, store, fixture_payloads, settings, sink) -> None:
        """Test the reset-then-set contract per operation."""
        ProbeCycle(store, fixture_payloads, settings, sink).run()

        upload_calls = [name for name, detail in sink.calls if detail == "upload"]
        assert upload_calls == ["clear", "set_status", "set_duration"]

    def test_errors_are_cleared_on_next_success(self, store, fixture_payloads, settings, sink) -> None:
        """Test an error from a previous cycle disappears once the step recovers."""
        cycle = ProbeCycle(store, fixture_payloads, settings, sink)
        store.fail("put_object")
        cycle.run()
        assert sink.errors["upload"]

        store.recover()
        cycle.run()

        assert sink.errors["upload"] == {}
        assert sink.status["upload"] == 1

    @pytest.mark.parametrize("failing", ["put_object", "get_object"])
    def test_failed_step_keeps_duration(self, store, fixture_payloads, settings, sink, failing) -> None:
        """Test failed steps still carry a measured duration in the result."""
        store.fail(failing)

        results = ProbeCycle(store, fixture_payloads, settings, sink).run()

        failed = [r for r in results if not r.succeeded]
        assert len(failed) == 1
        assert failed[0].duration_seconds >= 0
