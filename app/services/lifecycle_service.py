"""
Lifecycle Service
Reacts to report write events:

    -> submitted   auto-approve when the effective policy says so
    -> approved    render the PDF, store it with a QR code, save the URLs
                   and mail the recipients

Handlers run in the background worker. Failures are logged and reported as
a failed Outcome; they never propagate back to the event source.
"""
import logging
from datetime import datetime

from app.extensions import db
from app.models import DailyReport
from app.services.artifact_service import report_document_name
from app.services.collaborators import get_collaborators
from app.services.email_service import build_approval_email
from app.services.policy_service import resolve_approval_policy
from app.services.report_service import (
    generate_report_artifacts,
    get_company,
    persist_artifacts,
)
from app.utils.i18n import get_translation
from app.utils.outcome import Outcome

logger = logging.getLogger(__name__)

SYSTEM_APPROVER = 'system'


def _load_report(company_id, report_id):
    report = db.session.get(DailyReport, report_id)
    if report is None or report.company_id != company_id:
        return None
    return report


def _run_stage(name, report_id, fn) -> Outcome:
    try:
        return Outcome.ok(fn())
    except Exception as e:
        logger.error(f"Report {report_id}: {name} failed: {e}", exc_info=True)
        db.session.rollback()
        return Outcome.failed(f"{name}: {e}")


def handle_submitted(company_id, report_id, collaborators) -> Outcome:
    """Approve the report automatically when the effective mode is auto"""
    report = _load_report(company_id, report_id)
    if report is None:
        return Outcome.failed('report not found')
    if report.status != 'submitted':
        logger.info(f"Report {report_id} is {report.status}, skipping auto approval")
        return Outcome.ok()

    policy = resolve_approval_policy(company_id, report.site_id)
    if not policy.is_auto:
        logger.info(f"Report {report_id} awaits manual approval")
        return Outcome.ok()

    def approve():
        report.status = 'approved'
        report.approval = {
            'approved_by': SYSTEM_APPROVER,
            'approved_by_name': get_translation('auto_approver_name'),
            'approved_at': datetime.utcnow().isoformat(),
            'auto_approved': True,
        }
        db.session.commit()
        logger.info(f"Report {report_id} auto-approved")
        return report

    return _run_stage('auto approval', report_id, approve)


def notify_recipients(report, pdf_bytes, artifacts, collaborators) -> bool:
    """Mail the approval notice with the PDF attached; False when nothing was sent"""
    policy = resolve_approval_policy(report.company_id, report.site_id)
    if not policy.emails:
        logger.info(f"Report {report.id}: no notification recipients")
        return False

    company = get_company(report.company_id)
    subject, text, html = build_approval_email(
        report, company, report.is_auto_approved, artifacts.document_url
    )
    sent = collaborators.send_mail(
        policy.emails,
        subject,
        text,
        html,
        attachments=[{
            'filename': report_document_name(report.report_date),
            'content': pdf_bytes,
            'mimetype': 'application/pdf',
        }],
    )
    if sent:
        logger.info(f"Report {report.id}: approval notice sent to {len(policy.emails)} recipient(s)")
    else:
        logger.warning(f"Report {report.id}: approval notice was not sent")
    return sent


def handle_approved(company_id, report_id, collaborators) -> Outcome:
    """Generate, store and announce the report document"""
    report = _load_report(company_id, report_id)
    if report is None:
        return Outcome.failed('report not found')
    if report.status != 'approved':
        logger.info(f"Report {report_id} is {report.status}, skipping artifact generation")
        return Outcome.ok()

    generated = _run_stage('artifact generation', report_id,
                           lambda: generate_report_artifacts(report, collaborators))
    if generated.is_failed:
        return generated
    artifacts, pdf_bytes = generated.value

    persisted = _run_stage('artifact persistence', report_id,
                           lambda: persist_artifacts(report, artifacts))
    if persisted.is_failed:
        return persisted

    notified = _run_stage('notification', report_id,
                          lambda: notify_recipients(report, pdf_bytes, artifacts, collaborators))
    if notified.is_failed:
        return notified
    return Outcome.ok(artifacts)


TRANSITION_HANDLERS = {
    'submitted': handle_submitted,
    'approved': handle_approved,
}


def on_report_written(write, collaborators=None) -> Outcome:
    """
    Entry point for one report write event

    Args:
        write: ReportWriteEvent
        collaborators: Collaborators (defaults to the app's)

    Returns:
        Outcome: ok when nothing had to be done or every stage succeeded
    """
    if write.after is None or not write.status_changed:
        return Outcome.ok()

    handler = TRANSITION_HANDLERS.get(write.after_status)
    if handler is None:
        return Outcome.ok()

    logger.info(
        f"Report {write.report_id}: {write.before_status or 'new'} -> {write.after_status}"
    )
    try:
        return handler(write.company_id, write.report_id, collaborators or get_collaborators())
    except Exception as e:
        logger.error(f"Report {write.report_id}: lifecycle handler failed: {e}", exc_info=True)
        db.session.rollback()
        return Outcome.failed(str(e))
