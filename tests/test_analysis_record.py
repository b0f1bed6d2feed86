"""Processing status transitions and the advisory record gateway."""
import pytest
from sqlalchemy.exc import OperationalError

from app.models import AnalysisRecord, InvalidTransition, ProcessingStatus
from app.models.analysis import can_transition, is_terminal, utcnow
from app.services.persistence import Completed, Failed, RecordGateway, RecordHandle


def test_allowed_transitions():
    assert can_transition(ProcessingStatus.PENDING, ProcessingStatus.PROCESSING)
    assert can_transition(ProcessingStatus.PROCESSING, ProcessingStatus.COMPLETED)
    assert can_transition(ProcessingStatus.PROCESSING, ProcessingStatus.FAILED)
    assert not can_transition(ProcessingStatus.PENDING, ProcessingStatus.COMPLETED)
    assert not can_transition(ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)


@pytest.mark.parametrize("status", [ProcessingStatus.COMPLETED, ProcessingStatus.FAILED])
def test_terminal_states_are_never_revisited(status):
    assert is_terminal(status)
    record = AnalysisRecord(report_id="r1", user_id="u1", processing_status=status)
    with pytest.raises(InvalidTransition):
        record.transition(ProcessingStatus.PROCESSING)


def test_new_record_defaults_to_pending():
    assert AnalysisRecord(report_id="r1", user_id="u1").processing_status == ProcessingStatus.PENDING


def test_create_pending_then_complete(db):
    gateway = RecordGateway(db)
    handle = gateway.create_pending("r1", "u1")
    assert handle is not None
    assert db.get(AnalysisRecord, handle.id).processing_status == ProcessingStatus.PROCESSING

    assert gateway.finalize(handle, Completed("All good")) is True
    db.expire_all()
    record = db.get(AnalysisRecord, handle.id)
    assert record.processing_status == ProcessingStatus.COMPLETED
    assert record.summary_text == "All good"
    assert record.error_message is None


def test_finalize_failed_sets_error_message(db):
    gateway = RecordGateway(db)
    handle = gateway.create_pending("r1", "u1")
    assert gateway.finalize(handle, Failed("File not found in storage")) is True
    db.expire_all()
    record = db.get(AnalysisRecord, handle.id)
    assert record.processing_status == ProcessingStatus.FAILED
    assert record.error_message == "File not found in storage"
    assert record.summary_text is None


def test_finalize_twice_is_rejected(db):
    gateway = RecordGateway(db)
    handle = gateway.create_pending("r1", "u1")
    assert gateway.finalize(handle, Completed("first")) is True
    assert gateway.finalize(handle, Failed("second")) is False
    db.expire_all()
    assert db.get(AnalysisRecord, handle.id).summary_text == "first"


def test_create_pending_swallows_database_errors(db, monkeypatch):
    def boom():
        raise OperationalError("INSERT", {}, Exception("permission denied"))

    monkeypatch.setattr(db, "commit", boom)
    assert RecordGateway(db).create_pending("r1", "u1") is None


def test_finalize_without_handle_is_not_persisted(db):
    assert RecordGateway(db).finalize(None, Completed("x")) is False


def test_finalize_unknown_record(db):
    assert RecordGateway(db).finalize(RecordHandle(id="missing"), Completed("x")) is False


def test_finalize_swallows_database_errors(db, monkeypatch):
    gateway = RecordGateway(db)
    handle = gateway.create_pending("r1", "u1")

    def boom():
        raise OperationalError("UPDATE", {}, Exception("permission denied"))

    monkeypatch.setattr(db, "commit", boom)
    assert gateway.finalize(handle, Completed("x")) is False


def test_timestamps_are_timezone_aware(db):
    assert utcnow().tzinfo is not None
    handle = RecordGateway(db).create_pending("r1", "u1")
    assert handle is not None
    db.expire_all()
    record = db.get(AnalysisRecord, handle.id)
    assert record.created_at is not None
    assert record.updated_at is not None
