from .decorators import require_role, get_current_company_id, get_current_user, verify_company_access

from .audit import log_audit

from .errors import ServiceError, InvalidArgument, Unauthenticated, PermissionDenied, NotFound, Conflict

from .outcome import Outcome

from .time_calc import compute_worked_duration, compute_worked_minutes, LunchBreakPolicy

__all__ = [
    # Decorators
    "require_role",
    "get_current_company_id",
    "get_current_user",
    "verify_company_access",
    # Audit
    "log_audit",
    # Errors
    "ServiceError",
    "InvalidArgument",
    "Unauthenticated",
    "PermissionDenied",
    "NotFound",
    "Conflict",
    "Outcome",
    # Time arithmetic
    "compute_worked_duration",
    "compute_worked_minutes",
    "LunchBreakPolicy",
]
