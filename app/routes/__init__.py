from .health import health_bp
from .reporting import reporting_bp
from .storage import storage_bp

__all__ = ['health_bp', 'reporting_bp', 'storage_bp']
