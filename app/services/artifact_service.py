"""
Artifact Service
Stores a rendered report PDF and a companion QR code that links to it.
"""
import logging
from dataclasses import dataclass

from app.services.blob_store import new_download_token
from app.utils.qr_utils import render_qr_png

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'
PNG_CONTENT_TYPE = 'image/png'
QR_FILENAME = 'qrcode.png'


@dataclass(frozen=True)
class PackagedArtifacts:
    document_url: str
    code_url: str
    document_path: str
    code_path: str


def report_document_name(report_date) -> str:
    return f"report_{report_date.strftime('%Y%m%d')}.pdf"


def report_path_prefix(company_id, report_id) -> str:
    return f"companies/{company_id}/reports/{report_id}"


def artifact_paths(company_id, report_id, report_date):
    """
    Deterministic (document_path, code_path) for a report.

    Regenerating the same report overwrites the same objects; only the
    download tokens change.
    """
    prefix = report_path_prefix(company_id, report_id)
    return f"{prefix}/{report_document_name(report_date)}", f"{prefix}/{QR_FILENAME}"


def package_for_retrieval(document_bytes, path_prefix, document_name, blob_store) -> PackagedArtifacts:
    """
    Store the document, then a QR code encoding its download URL.

    The two writes are independent. If the QR write fails the document stays
    stored; the QR is a convenience derived from it.
    """
    document_path = f"{path_prefix}/{document_name}"
    document_token = new_download_token()
    blob_store.save(document_path, document_bytes, PDF_CONTENT_TYPE, document_token)
    document_url = blob_store.public_url(document_path, document_token)

    code_path = f"{path_prefix}/{QR_FILENAME}"
    code_token = new_download_token()
    blob_store.save(code_path, render_qr_png(document_url), PNG_CONTENT_TYPE, code_token)
    code_url = blob_store.public_url(code_path, code_token)

    logger.info(f"Packaged {document_path} with QR code {code_path}")
    return PackagedArtifacts(
        document_url=document_url,
        code_url=code_url,
        document_path=document_path,
        code_path=code_path,
    )
