"""
Celery tasks for the daily report lifecycle
"""
import logging
from app.extensions import celery

logger = logging.getLogger(__name__)


@celery.task(bind=True, name='tasks.handle_report_write', acks_late=True)
def handle_report_write_task(self, payload):
    """
    Run the lifecycle for one committed report write

    Args:
        payload: ReportWriteEvent.to_dict()

    Returns:
        dict: outcome status and reason (informational only)
    """
    from app.events import ReportWriteEvent
    from app.services.lifecycle_service import on_report_written

    write = ReportWriteEvent.from_dict(payload)
    outcome = on_report_written(write)
    if outcome.is_failed:
        logger.error(f"Lifecycle for report {write.report_id} failed: {outcome.reason}")
    return {'status': outcome.status, 'reason': outcome.reason}
