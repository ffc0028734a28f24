"""
Custom Exceptions - Application-specific error types
"""


class ReminderServiceException(Exception):
    """Base exception for all reminder service errors"""
    pass


class ConfigurationError(ReminderServiceException):
    """Raised when settings cannot be turned into working services"""
    pass


class LinkError(ReminderServiceException):
    """Base class for deep link failures"""
    pass


class MalformedLink(LinkError):
    """Raised when a link string does not follow the deep link grammar"""
    pass


class NoRouteFound(LinkError):
    """Raised when a path has no launchable destination in the route table"""

    def __init__(self, path: str):
        super().__init__(f"No route found for path '{path}'")
        self.path = path


class DeliveryFailure(ReminderServiceException):
    """Raised when the notification sink rejects a notification"""
    pass


class SchedulerError(ReminderServiceException):
    """Raised when scheduler operations fail"""
    pass


class JobSubmissionFailure(SchedulerError):
    """Raised when the scheduler backend cannot accept a job"""
    pass
