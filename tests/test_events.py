"""
Report write events raised by the session hooks.
"""
import pytest

from app import events
from app.events import ReportWriteEvent, dispatch_report_write
from app.extensions import db
from app.models import DailyReport
from tasks import report_tasks


@pytest.fixture()
def captured(app, monkeypatch):
    writes = []
    monkeypatch.setitem(app.config, "REPORT_EVENTS_ENABLED", True)
    monkeypatch.setattr(events, "dispatch_report_write", writes.append)
    return writes


def test_insert_produces_event_without_before(captured, make_report):
    report = make_report()
    assert len(captured) == 1
    write = captured[0]
    assert write.report_id == report.id
    assert write.company_id == report.company_id
    assert write.before is None
    assert write.after_status == "draft"


def test_status_change_carries_both_snapshots(captured, make_report):
    report = make_report(status="submitted")
    captured.clear()

    report.status = "approved"
    db.session.commit()

    assert len(captured) == 1
    assert captured[0].before_status == "submitted"
    assert captured[0].after_status == "approved"
    assert captured[0].status_changed


def test_other_field_change_keeps_status(captured, make_report):
    report = make_report(status="approved")
    captured.clear()

    report.notes = "更新"
    db.session.commit()

    assert len(captured) == 1
    assert not captured[0].status_changed


def test_rollback_discards_pending_events(captured, make_report):
    report = make_report(status="submitted")
    captured.clear()

    report.status = "approved"
    db.session.flush()
    db.session.rollback()

    assert captured == []
    assert db.session.get(DailyReport, report.id).status == "submitted"


def test_disabled_hook_dispatches_nothing(app, monkeypatch, make_report):
    writes = []
    monkeypatch.setattr(events, "dispatch_report_write", writes.append)
    make_report()
    assert writes == []


def test_event_payload_survives_serialization():
    write = ReportWriteEvent(1, 2, {"status": "draft"}, {"status": "submitted"})
    assert ReportWriteEvent.from_dict(write.to_dict()) == write


def test_queue_failure_is_logged_not_raised(monkeypatch, caplog):
    def broken_delay(payload):
        raise ConnectionError("broker down")

    monkeypatch.setattr(report_tasks.handle_report_write_task, "delay", broken_delay)
    dispatch_report_write(ReportWriteEvent(1, 2, None, {"status": "draft"}))
    assert "broker down" in caplog.text


def test_task_runs_lifecycle(monkeypatch):
    seen = []

    def fake_on_report_written(write):
        seen.append(write)
        from app.utils.outcome import Outcome
        return Outcome.ok()

    monkeypatch.setattr("app.services.lifecycle_service.on_report_written", fake_on_report_written)
    result = report_tasks.handle_report_write_task.run(
        {"company_id": 1, "report_id": 2, "before": None, "after": {"status": "draft"}}
    )
    assert result == {"status": "ok", "reason": None}
    assert seen == [ReportWriteEvent(1, 2, None, {"status": "draft"})]
