from .company import Company
from .site import Site
from .daily_report import DailyReport, REPORT_STATUSES
from .stored_object import StoredObject
from .audit_log import AuditLog

__all__ = ["Company", "Site", "DailyReport", "REPORT_STATUSES", "StoredObject", "AuditLog"]
