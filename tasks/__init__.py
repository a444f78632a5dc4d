"""
Celery tasks module
Import all tasks here so Celery can discover them
"""
from . import integration_tasks

__all__ = ['integration_tasks']
