"""
Scheduler module
Deferred reminder jobs and the recurring reminder lifecycle
"""
from .backend import SchedulerBackend
from .reminders import ReminderScheduler, job_name_for
from . import jobs

__all__ = ['SchedulerBackend', 'ReminderScheduler', 'job_name_for', 'jobs']
