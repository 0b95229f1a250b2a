"""
Reporting API Routes
Handles report PDF regeneration, bulk export, CSV export, attendance summary
and the manual status transitions
"""
import base64
import logging
from datetime import date

from flask import Blueprint, Response, jsonify, request
from flask_jwt_extended import jwt_required

from app.services.collaborators import get_collaborators
from app.services.export_service import (
    export_approved_reports,
    export_reports_csv,
    summarize_attendance,
)
from app.services.report_service import (
    approve_report,
    regenerate_report_artifacts,
    reject_report,
    submit_report,
)
from app.utils.audit import log_audit
from app.utils.decorators import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_MEMBER,
    get_current_company_id,
    get_current_user,
    require_role,
    verify_company_access,
)
from app.utils.errors import InvalidArgument, NotFound, ServiceError

logger = logging.getLogger(__name__)

reporting_bp = Blueprint('reporting', __name__, url_prefix='/api/reports')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument('リクエスト本文が正しくありません')
    return data


def _require_int(value, label):
    if value is None or value == '':
        raise InvalidArgument(f'{label}は必須です')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{label}が正しくありません')


def _require_date(value, label):
    if not value:
        raise InvalidArgument(f'{label}は必須です')
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{label}の形式が正しくありません（YYYY-MM-DD）')


def _require_range(start_value, end_value):
    start_date = _require_date(start_value, '開始日')
    end_date = _require_date(end_value, '終了日')
    if start_date > end_date:
        raise InvalidArgument('開始日は終了日以前の日付を指定してください')
    return start_date, end_date


def _request_company_id():
    """companyId from the query string, defaulting to the caller's company"""
    value = request.args.get('companyId')
    company_id = _require_int(value, '企業ID') if value else get_current_company_id()
    verify_company_access(company_id)
    return company_id


@reporting_bp.route('/generate-pdf', methods=['POST'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def generate_pdf():
    """
    Regenerate the PDF and QR code of one report

    Request body:
        companyId: Company ID
        reportId: Daily report ID

    Returns:
        {success, pdfUrl, qrCodeUrl}
    """
    data = _json_body()
    company_id = _require_int(data.get('companyId'), '企業ID')
    report_id = _require_int(data.get('reportId'), '日報ID')
    verify_company_access(company_id)

    try:
        artifacts = regenerate_report_artifacts(company_id, report_id, get_collaborators())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"PDF generation failed for report {report_id}: {e}", exc_info=True)
        raise ServiceError('PDF生成中にエラーが発生しました。しばらくしてから再度お試しください。')

    user_id, _ = get_current_user()
    log_audit('daily_report', 'regenerate', company_id=company_id, user_id=user_id, entity_id=report_id)

    return jsonify({
        'success': True,
        'pdfUrl': artifacts.document_url,
        'qrCodeUrl': artifacts.code_url,
    }), 200


@reporting_bp.route('/export', methods=['POST'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def export_reports():
    """
    Export approved reports in a date range as a ZIP of PDFs

    Request body:
        companyId: Company ID
        startDate: YYYY-MM-DD (inclusive)
        endDate: YYYY-MM-DD (inclusive)

    Returns:
        {success, zipBase64, count}; zipBase64 is null when nothing matched
    """
    data = _json_body()
    company_id = _require_int(data.get('companyId'), '企業ID')
    start_date, end_date = _require_range(data.get('startDate'), data.get('endDate'))
    verify_company_access(company_id)

    try:
        result = export_approved_reports(company_id, start_date, end_date, get_collaborators())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Bulk export failed for company {company_id}: {e}", exc_info=True)
        raise ServiceError('PDF一括出力中にエラーが発生しました。しばらくしてから再度お試しください。')

    user_id, _ = get_current_user()
    log_audit('export', 'export', company_id=company_id, user_id=user_id, details={
        'start_date': start_date,
        'end_date': end_date,
        'count': result.count,
    })

    return jsonify({
        'success': True,
        'zipBase64': base64.b64encode(result.archive_bytes).decode('ascii') if result.archive_bytes else None,
        'count': result.count,
    }), 200


@reporting_bp.route('/export.csv', methods=['GET'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def export_csv():
    """
    Worker rows of submitted/approved/rejected reports as CSV

    Query params:
        startDate, endDate: YYYY-MM-DD (required)
        employeeId: only rows of this worker (optional)
        companyId: defaults to the caller's company
    """
    company_id = _request_company_id()
    start_date, end_date = _require_range(request.args.get('startDate'), request.args.get('endDate'))
    employee_id = request.args.get('employeeId') or None

    content = export_reports_csv(
        company_id, start_date, end_date,
        employee_id=employee_id,
        tz_name=get_collaborators().timezone,
    )
    if content is None:
        raise NotFound('該当する日報がありません')

    filename = f"reports_{start_date.strftime('%Y%m%d')}_{end_date.strftime('%Y%m%d')}.csv"
    return Response(
        content,
        mimetype='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@reporting_bp.route('/attendance-summary', methods=['GET'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def attendance_summary():
    """Monthly worked time per worker (query params: year, month, companyId)"""
    company_id = _request_company_id()
    year = _require_int(request.args.get('year'), '年')
    month = _require_int(request.args.get('month'), '月')
    if not 1 <= month <= 12:
        raise InvalidArgument('月は1から12の範囲で指定してください')

    return jsonify({
        'success': True,
        'year': year,
        'month': month,
        'workers': summarize_attendance(company_id, year, month),
    }), 200


@reporting_bp.route('/<int:report_id>/submit', methods=['POST'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER, ROLE_MEMBER)
def submit(report_id):
    company_id = get_current_company_id()
    report = submit_report(company_id, report_id)

    user_id, _ = get_current_user()
    log_audit('daily_report', 'submit', company_id=company_id, user_id=user_id, entity_id=report_id)
    return jsonify({'success': True, 'report': report.to_dict()}), 200


@reporting_bp.route('/<int:report_id>/approve', methods=['POST'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def approve(report_id):
    company_id = get_current_company_id()
    user_id, user_name = get_current_user()
    report = approve_report(company_id, report_id, user_id, user_name)

    log_audit('daily_report', 'approve', company_id=company_id, user_id=user_id, entity_id=report_id)
    return jsonify({'success': True, 'report': report.to_dict()}), 200


@reporting_bp.route('/<int:report_id>/reject', methods=['POST'])
@jwt_required()
@require_role(ROLE_ADMIN, ROLE_MANAGER)
def reject(report_id):
    """
    Send a report back to its author

    Request body:
        reason: Rejection reason (required)
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    company_id = get_current_company_id()
    user_id, user_name = get_current_user()
    report = reject_report(company_id, report_id, user_id, user_name, data.get('reason'))

    log_audit('daily_report', 'reject', company_id=company_id, user_id=user_id, entity_id=report_id,
              details={'reason': report.rejection.get('reason')})
    return jsonify({'success': True, 'report': report.to_dict()}), 200
