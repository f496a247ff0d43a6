"""Unit tests for BaseService error translation and operation metrics."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from slotengine.core.exceptions import (
    BookingConflictException,
    RepositoryException,
    RepositoryTimeoutException,
    StorageFailureException,
    StorageTimeoutException,
)
from slotengine.services.base import BaseService


class DummyService(BaseService):
    @BaseService.measure_operation("do_work")
    def do_work(self, fail: bool = False):
        if fail:
            raise BookingConflictException()
        return "done"


@pytest.fixture
def service():
    BaseService._operation_stats.pop("DummyService", None)
    return DummyService(MagicMock())


class TestStorageErrors:
    def test_timeout_becomes_storage_timeout(self, service):
        with pytest.raises(StorageTimeoutException) as exc_info:
            with service.storage_errors("get_rules"):
                raise RepositoryTimeoutException("get_rules", 1.5)

        assert exc_info.value.details["operation"] == "get_rules"
        assert exc_info.value.details["timeout_seconds"] == 1.5

    def test_repository_error_becomes_storage_failure(self, service):
        with pytest.raises(StorageFailureException) as exc_info:
            with service.storage_errors("get_rules"):
                raise RepositoryException("connection refused")

        assert not isinstance(exc_info.value, StorageTimeoutException)
        assert exc_info.value.details["operation"] == "get_rules"

    def test_domain_errors_pass_through(self, service):
        with pytest.raises(BookingConflictException):
            with service.storage_errors("create_booking"):
                raise BookingConflictException()


class TestTransaction:
    def test_commit_on_success(self, service):
        with service.transaction():
            pass
        service.db.commit.assert_called_once()

    def test_sqlalchemy_error_rolls_back_and_maps(self, service):
        with pytest.raises(StorageFailureException):
            with service.transaction():
                raise OperationalError("SELECT 1", {}, Exception("server closed"))
        service.db.rollback.assert_called_once()
        service.db.commit.assert_not_called()

    def test_domain_error_rolls_back_and_propagates(self, service):
        with pytest.raises(BookingConflictException):
            with service.transaction():
                raise BookingConflictException()
        service.db.rollback.assert_called_once()


class TestMeasureOperation:
    def test_records_success_and_failure(self, service):
        assert service.do_work() == "done"
        with pytest.raises(BookingConflictException):
            service.do_work(fail=True)

        metrics = service.get_metrics()["do_work"]
        assert metrics["count"] == 2
        assert metrics["success_rate"] == 0.5
        assert metrics["max_time"] >= 0

    def test_reports_to_prometheus(self, service, monkeypatch):
        recorder = MagicMock()
        monkeypatch.setattr(
            "slotengine.services.base.prometheus_metrics.record_service_operation", recorder
        )
        with pytest.raises(BookingConflictException):
            service.do_work(fail=True)

        recorder.assert_called_once()
        kwargs = recorder.call_args.kwargs
        assert kwargs["service"] == "DummyService"
        assert kwargs["status"] == "error"
        assert kwargs["error_type"] == "BookingConflictException"
