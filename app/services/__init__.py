from .policy_service import (
    ApprovalPolicy,
    merge_approval_policy,
    resolve_approval_policy,
    resolve_lunch_break_policy,
)

from .report_service import (
    get_report,
    generate_report_artifacts,
    regenerate_report_artifacts,
    submit_report,
    approve_report,
    reject_report,
)

from .lifecycle_service import on_report_written

from .export_service import (
    ExportResult,
    export_approved_reports,
    export_reports_csv,
    summarize_attendance,
)

from .email_service import build_approval_email, send_email

__all__ = [
    # Policy
    "ApprovalPolicy",
    "merge_approval_policy",
    "resolve_approval_policy",
    "resolve_lunch_break_policy",
    # Report Services
    "get_report",
    "generate_report_artifacts",
    "regenerate_report_artifacts",
    "submit_report",
    "approve_report",
    "reject_report",
    # Lifecycle
    "on_report_written",
    # Export
    "ExportResult",
    "export_approved_reports",
    "export_reports_csv",
    "summarize_attendance",
    # Email Services
    "build_approval_email",
    "send_email",
]
