"""
Internationalization (i18n) Utilities
Labels printed on report PDFs, CSV exports and notification emails.
Japanese is the primary language; English is kept for API consumers.
"""
import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# Translation dictionaries
TRANSLATIONS = {
    'ja': {
        # Report PDF
        'report_date': '報告日',
        'confirmation': '確認',
        'execution_date': '実施日',
        'report': '報告',
        'client': '元請',
        'site': '現場名',
        'worker_name': '氏名',
        'start_time': '開始',
        'end_time': '終了',
        'worked': '実働',
        'no_lunch_break': '昼休憩なし',
        'remarks': '備考',
        'notes': '備考・連絡事項',
        # Status
        'draft': '下書き',
        'signed': 'サイン済み',
        'submitted': '送信完了',
        'approved': '承認済み',
        'rejected': '差戻し',
        # CSV
        'csv_report_date': '実施日',
        'csv_site': '現場名',
        'csv_created_by': '作成者',
        'csv_worker': '作業員名',
        'csv_start': '開始時間',
        'csv_end': '終了時間',
        'csv_lunch': '昼休憩',
        'csv_remarks': '備考',
        'csv_status': 'ステータス',
        'csv_submitted_at': '送信日時',
        'csv_approved_at': '承認日時',
        'lunch_taken': 'あり',
        'lunch_skipped': 'なし',
        # Email
        'auto_approver_name': '自動承認',
    },
    'en': {
        'report_date': 'Report date',
        'confirmation': 'Confirmed',
        'execution_date': 'Work date',
        'report': 'Report',
        'client': 'Client',
        'site': 'Site',
        'worker_name': 'Name',
        'start_time': 'Start',
        'end_time': 'End',
        'worked': 'Worked',
        'no_lunch_break': 'No lunch',
        'remarks': 'Remarks',
        'notes': 'Notes',
        'draft': 'Draft',
        'signed': 'Signed',
        'submitted': 'Submitted',
        'approved': 'Approved',
        'rejected': 'Rejected',
        'lunch_taken': 'Yes',
        'lunch_skipped': 'No',
        'auto_approver_name': 'Auto approval',
    }
}


def get_translation(key, language='ja', default=None):
    """
    Get translation for a key in the specified language

    Args:
        key: Translation key
        language: 'ja' or 'en'
        default: Default value if key not found

    Returns:
        str: Translated text
    """
    lang = language.lower() if language else 'ja'
    if lang not in TRANSLATIONS:
        lang = 'ja'

    translations = TRANSLATIONS.get(lang, TRANSLATIONS['ja'])
    return translations.get(key, default or key)


def to_local(value, tz_name):
    """Naive datetimes are stored as UTC; convert to the report timezone"""
    if value is None:
        return None
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name))


def format_month_day(value):
    """``M月D日`` without zero padding, or '' when missing"""
    if value is None:
        return ''
    if not isinstance(value, (date, datetime)):
        return ''
    return f"{value.month}月{value.day}日"


def format_full_date(value):
    if value is None:
        return ''
    return f"{value.year}年{value.month}月{value.day}日"
