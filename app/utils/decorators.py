from functools import wraps
from flask_jwt_extended import get_jwt_identity, get_jwt

from app.utils.errors import PermissionDenied, Unauthenticated

ROLE_ADMIN = 'admin'
ROLE_MANAGER = 'manager'
ROLE_MEMBER = 'member'


def get_current_company_id():
    """Company the caller belongs to, from JWT claims."""
    company_id = get_jwt().get("company_id")
    if company_id is None:
        raise Unauthenticated()
    return company_id


def get_current_user():
    """Returns (user_id, display_name) of the caller."""
    claims = get_jwt()
    return str(get_jwt_identity()), claims.get("name") or ''


def verify_company_access(company_id):
    """Raises PermissionDenied unless the caller belongs to company_id."""
    if str(get_current_company_id()) != str(company_id):
        raise PermissionDenied('この企業のデータにはアクセスできません')


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role('admin', 'manager')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            """
            Require that the current JWT-authenticated user has one of the given roles.
            Must be used together with @jwt_required() on the route.
            """
            if not get_jwt_identity():
                raise Unauthenticated()

            if get_jwt().get("role") not in roles:
                raise PermissionDenied(f'この操作には次の権限が必要です: {", ".join(roles)}')

            return f(*args, **kwargs)
        return decorated_function
    return decorator
