"""
remindlink - recurring reminders with deep-link notifications
"""
__version__ = "0.1.0"
