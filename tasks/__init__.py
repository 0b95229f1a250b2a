"""
Celery tasks module
Import all tasks here so Celery can discover them
"""
from . import report_tasks

__all__ = ['report_tasks']
