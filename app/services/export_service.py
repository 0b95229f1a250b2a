"""
Export Service
Bulk exports of daily reports for a company over a date range:

- ZIP of rendered PDFs for approved reports
- CSV of worker rows (one row per worker per report)
- monthly attendance summary per worker
"""
import csv
import io
import logging
import re
import zipfile
from collections import namedtuple
from datetime import date, datetime, time

from app.extensions import db
from app.models import DailyReport, Site
from app.services.policy_service import resolve_lunch_break_policy
from app.services.report_service import get_company, render_report_document
from app.utils.i18n import get_translation, to_local
from app.utils.time_calc import compute_worked_minutes

logger = logging.getLogger(__name__)

ExportResult = namedtuple('ExportResult', ['archive_bytes', 'count'])

_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|]')

CSV_COLUMNS = (
    'csv_report_date', 'csv_site', 'csv_created_by', 'csv_worker', 'csv_start',
    'csv_end', 'csv_lunch', 'csv_remarks', 'csv_status', 'csv_submitted_at',
    'csv_approved_at',
)


def sanitize_filename(value) -> str:
    return _UNSAFE_NAME_CHARS.sub('_', value or '')


def unique_entry_name(name, used) -> str:
    """``a.pdf``, then ``a_2.pdf``, ``a_3.pdf`` ... within one archive"""
    if name not in used:
        used.add(name)
        return name
    stem, dot, ext = name.rpartition('.')
    if not dot:
        stem, ext = name, ''
    counter = 2
    while True:
        candidate = f"{stem}_{counter}.{ext}" if ext else f"{stem}_{counter}"
        if candidate not in used:
            used.add(candidate)
            return candidate
        counter += 1


def _date_bounds(start_date: date, end_date: date):
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time(23, 59, 59))


def _reports_in_range(company_id, start_date, end_date, statuses):
    start, end = _date_bounds(start_date, end_date)
    return DailyReport.query.filter(
        DailyReport.company_id == company_id,
        DailyReport.status.in_(statuses),
        DailyReport.report_date >= start,
        DailyReport.report_date <= end,
    ).order_by(DailyReport.report_date.asc(), DailyReport.id.asc()).all()


def export_approved_reports(company_id, start_date, end_date, collaborators) -> ExportResult:
    """
    Render every approved report in the range into one ZIP archive

    Args:
        company_id: Company whose reports are exported
        start_date: first day (inclusive)
        end_date: last day (inclusive)
        collaborators: Collaborators for image fetch and timezone

    Returns:
        ExportResult: (archive bytes, report count); (None, 0) when nothing matches
    """
    reports = _reports_in_range(company_id, start_date, end_date, ('approved',))
    if not reports:
        logger.info(f"No approved reports for company {company_id} between {start_date} and {end_date}")
        return ExportResult(None, 0)

    company = get_company(company_id)
    logo_image = collaborators.fetch_image(company.logo_url) if company.logo_url else None

    sites = {}
    used_names = set()
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for report in reports:
            if report.site_id and report.site_id not in sites:
                site = db.session.get(Site, report.site_id)
                sites[report.site_id] = site if site and site.company_id == company_id else None
            site = sites.get(report.site_id)

            pdf_bytes = render_report_document(
                report, company, site, collaborators, logo_image=logo_image, fetch_logo=False
            )
            name = f"{report.report_date.strftime('%Y-%m-%d')}_{sanitize_filename(report.site_name)}.pdf"
            archive.writestr(unique_entry_name(name, used_names), pdf_bytes)

    logger.info(f"Exported {len(reports)} reports for company {company_id}")
    return ExportResult(buffer.getvalue(), len(reports))


def _format_local(value, tz_name):
    if not value:
        return ''
    return to_local(value, tz_name).strftime('%Y-%m-%d %H:%M')


def _approved_at(report):
    approved_at = (report.approval or {}).get('approved_at')
    if not approved_at:
        return None
    try:
        return datetime.fromisoformat(approved_at)
    except ValueError:
        return None


def export_reports_csv(company_id, start_date, end_date, employee_id=None, tz_name='Asia/Tokyo'):
    """
    Worker rows of all non-draft reports in the range as CSV text (with BOM)

    Returns None when no row matches.
    """
    reports = _reports_in_range(company_id, start_date, end_date, ('submitted', 'approved', 'rejected'))

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([get_translation(key) for key in CSV_COLUMNS])

    rows = 0
    for report in reports:
        common = {
            'date': report.report_date.strftime('%Y-%m-%d'),
            'status': get_translation(report.status),
            'submitted_at': _format_local(report.submitted_at, tz_name),
            'approved_at': _format_local(_approved_at(report), tz_name),
        }
        workers = report.workers or []
        if employee_id:
            workers = [w for w in workers if str(w.get('employee_id') or '') == str(employee_id)]
        elif not workers:
            workers = [None]

        for worker in workers:
            worker = worker or {}
            if worker:
                lunch_key = 'lunch_skipped' if worker.get('no_lunch_break') else 'lunch_taken'
                lunch = get_translation(lunch_key)
            else:
                lunch = ''
            writer.writerow([
                common['date'],
                report.site_name or '',
                report.created_by_name or '',
                worker.get('name', ''),
                worker.get('start_time', ''),
                worker.get('end_time', ''),
                lunch,
                worker.get('remarks', ''),
                common['status'],
                common['submitted_at'],
                common['approved_at'],
            ])
            rows += 1

    if rows == 0:
        return None
    return '\ufeff' + buf.getvalue()


def summarize_attendance(company_id, year, month):
    """
    Per-worker totals over submitted and approved reports of one month

    Returns:
        list of dicts: worker_key, name, work_days, total_minutes, total_hours,
        no_lunch_days; sorted by name
    """
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    end = date.fromordinal(end.toordinal() - 1)

    company = get_company(company_id)
    reports = _reports_in_range(company_id, start, end, ('submitted', 'approved'))

    sites = {}
    summary = {}
    for report in reports:
        if report.site_id not in sites:
            site = db.session.get(Site, report.site_id) if report.site_id else None
            sites[report.site_id] = site if site and site.company_id == company_id else None
        policy = resolve_lunch_break_policy(company, sites[report.site_id])

        for worker in report.workers or []:
            name = (worker.get('name') or '').strip()
            key = worker.get('employee_id') or name
            if not key:
                continue
            entry = summary.setdefault(key, {
                'worker_key': key,
                'name': name,
                'dates': set(),
                'total_minutes': 0,
                'no_lunch_days': 0,
            })
            entry['dates'].add(report.report_date.date())
            minutes = compute_worked_minutes(
                worker.get('start_time'), worker.get('end_time'),
                bool(worker.get('no_lunch_break')), policy,
            )
            entry['total_minutes'] += minutes or 0
            if worker.get('no_lunch_break'):
                entry['no_lunch_days'] += 1

    results = []
    for entry in summary.values():
        dates = entry.pop('dates')
        entry['work_days'] = len(dates)
        entry['total_hours'] = round(entry['total_minutes'] / 60, 2)
        results.append(entry)
    return sorted(results, key=lambda e: (e['name'], str(e['worker_key'])))
