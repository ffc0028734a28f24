"""
Business logic services
"""
from . import links
from . import notifications
from . import scheduler

__all__ = [
    'links',
    'notifications',
    'scheduler'
]
