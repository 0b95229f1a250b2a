"""
Report write events.

Every committed write to a daily report produces one ReportWriteEvent with
the before/after snapshots. Events are collected during flush and handed to
the background worker only after the transaction commits, so a rolled back
write never triggers the lifecycle.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from app.models import DailyReport

logger = logging.getLogger(__name__)

PENDING_KEY = 'pending_report_events'


@dataclass(frozen=True)
class ReportWriteEvent:
    company_id: int
    report_id: int
    before: Optional[dict] = None
    after: Optional[dict] = None

    @property
    def before_status(self):
        return (self.before or {}).get('status')

    @property
    def after_status(self):
        return (self.after or {}).get('status')

    @property
    def status_changed(self):
        return self.before_status != self.after_status

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            company_id=data['company_id'],
            report_id=data['report_id'],
            before=data.get('before'),
            after=data.get('after'),
        )


def _previous_status(report):
    history = inspect(report).attrs.status.history
    if history.deleted:
        return history.deleted[0]
    return report.status


def collect_report_writes(session, flush_context):
    """after_flush: new/dirty/deleted still describe the flushed changes"""
    pending = session.info.setdefault(PENDING_KEY, [])

    for obj in session.new:
        if isinstance(obj, DailyReport):
            pending.append(ReportWriteEvent(obj.company_id, obj.id, None, obj.snapshot()))

    for obj in session.dirty:
        if isinstance(obj, DailyReport) and session.is_modified(obj):
            after = obj.snapshot()
            before = dict(after, status=_previous_status(obj))
            pending.append(ReportWriteEvent(obj.company_id, obj.id, before, after))

    for obj in session.deleted:
        if isinstance(obj, DailyReport):
            pending.append(ReportWriteEvent(obj.company_id, obj.id, obj.snapshot(), None))


def dispatch_committed_writes(session):
    pending = session.info.pop(PENDING_KEY, None)
    if not pending or not has_app_context():
        return
    if not current_app.config.get('REPORT_EVENTS_ENABLED', True):
        return
    for write in pending:
        dispatch_report_write(write)


def discard_pending_writes(session):
    session.info.pop(PENDING_KEY, None)


def dispatch_report_write(write: ReportWriteEvent):
    """Queue one event for the worker; queueing failures are logged, never raised"""
    try:
        from tasks.report_tasks import handle_report_write_task
        handle_report_write_task.delay(write.to_dict())
        logger.debug(f"Queued write event for report {write.report_id}")
    except Exception as e:
        logger.error(f"Failed to queue write event for report {write.report_id}: {e}", exc_info=True)


def init_report_events(app):
    """Register the session hooks once per process"""
    listeners = (
        ('after_flush', collect_report_writes),
        ('after_commit', dispatch_committed_writes),
        ('after_rollback', discard_pending_writes),
    )
    for name, fn in listeners:
        if not event.contains(Session, name, fn):
            event.listen(Session, name, fn)
    app.logger.debug("Report write events registered")
