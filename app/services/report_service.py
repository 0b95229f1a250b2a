"""
Report Service
Business logic for daily report documents and status transitions
"""
import logging
from datetime import datetime
from typing import Optional

from app.extensions import db
from app.models import Company, DailyReport, Site
from app.services.artifact_service import (
    PackagedArtifacts,
    package_for_retrieval,
    report_document_name,
    report_path_prefix,
)
from app.services.policy_service import resolve_lunch_break_policy
from app.utils.errors import Conflict, InvalidArgument, NotFound
from app.utils.pdf_utils import render_report_pdf

logger = logging.getLogger(__name__)


def get_company(company_id) -> Company:
    company = db.session.get(Company, company_id)
    if company is None:
        raise NotFound('企業が見つかりません')
    return company


def get_report(company_id, report_id) -> DailyReport:
    """Report by id, scoped to its company"""
    report = db.session.get(DailyReport, report_id)
    if report is None or report.company_id != company_id:
        raise NotFound('日報が見つかりません')
    return report


def get_report_site(report) -> Optional[Site]:
    if not report.site_id:
        return None
    site = db.session.get(Site, report.site_id)
    if site is None or site.company_id != report.company_id:
        return None
    return site


def render_report_document(report, company, site, collaborators, logo_image=None, fetch_logo=True) -> bytes:
    """
    Fetch the optional images and render the report PDF

    Args:
        report: DailyReport
        company: owning Company
        site: Site or None (client name and lunch policy override)
        collaborators: Collaborators used to fetch images
        logo_image: logo bytes already fetched by the caller (bulk export)
        fetch_logo: fetch company.logo_url when logo_image is not given

    Returns:
        bytes: PDF document
    """
    if logo_image is None and fetch_logo and company.logo_url:
        logo_image = collaborators.fetch_image(company.logo_url)

    signature_image = None
    if report.signature_url:
        signature_image = collaborators.fetch_image(report.signature_url)

    return render_report_pdf(
        report,
        company,
        signature_image=signature_image,
        logo_image=logo_image,
        client_name=site.client_name if site else None,
        lunch_policy=resolve_lunch_break_policy(company, site),
        tz_name=collaborators.timezone,
    )


def generate_report_artifacts(report, collaborators):
    """
    Render the report and store the PDF and QR code

    Returns:
        tuple: (PackagedArtifacts, pdf bytes)
    """
    company = get_company(report.company_id)
    site = get_report_site(report)
    pdf_bytes = render_report_document(report, company, site, collaborators)
    artifacts = package_for_retrieval(
        pdf_bytes,
        report_path_prefix(report.company_id, report.id),
        report_document_name(report.report_date),
        collaborators.blob_store,
    )
    return artifacts, pdf_bytes


def persist_artifacts(report, artifacts: PackagedArtifacts):
    report.pdf_url = artifacts.document_url
    report.qr_code_url = artifacts.code_url
    report.pdf_generated_at = datetime.utcnow()
    db.session.commit()
    logger.info(f"Report {report.id}: artifact URLs saved")


def regenerate_report_artifacts(company_id, report_id, collaborators) -> PackagedArtifacts:
    """
    Re-render and re-store the PDF of a report (e.g. after an edit).
    No notification is sent and the status is left alone.
    """
    report = get_report(company_id, report_id)
    artifacts, _ = generate_report_artifacts(report, collaborators)
    persist_artifacts(report, artifacts)
    return artifacts


def submit_report(company_id, report_id):
    report = get_report(company_id, report_id)
    if report.status not in ('draft', 'rejected'):
        raise Conflict('下書きまたは差戻しの日報のみ送信できます')
    if not report.workers:
        raise InvalidArgument('作業員を1名以上登録してください')
    report.status = 'submitted'
    report.submitted_at = datetime.utcnow()
    db.session.commit()
    logger.info(f"Report {report_id} submitted")
    return report


def approve_report(company_id, report_id, user_id, user_name):
    report = get_report(company_id, report_id)
    if report.status != 'submitted':
        raise Conflict('送信完了の日報のみ承認できます')
    report.status = 'approved'
    report.approval = {
        'approved_by': user_id,
        'approved_by_name': user_name or '',
        'approved_at': datetime.utcnow().isoformat(),
        'auto_approved': False,
    }
    db.session.commit()
    logger.info(f"Report {report_id} approved by {user_id}")
    return report


def reject_report(company_id, report_id, user_id, user_name, reason):
    """Send a report back; the client signature is cleared so it must be signed again"""
    if not isinstance(reason, str) or not reason.strip():
        raise InvalidArgument('差戻し理由を入力してください')
    report = get_report(company_id, report_id)
    if report.status not in ('submitted', 'approved'):
        raise Conflict('この日報は差戻しできません')
    report.status = 'rejected'
    report.rejection = {
        'rejected_by': user_id,
        'rejected_by_name': user_name or '',
        'rejected_at': datetime.utcnow().isoformat(),
        'reason': reason.strip(),
    }
    report.client_signature = {'image_url': None, 'signed_at': None, 'signer_name': None}
    db.session.commit()
    logger.info(f"Report {report_id} rejected by {user_id}")
    return report
