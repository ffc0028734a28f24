"""
Application constants
"""

# Reminder chain
DEFAULT_REMINDER_INTERVAL_SECONDS = 2 * 60
JOB_NAME_PREFIX = "reminder-"

# Notifications
DEFAULT_NOTIFY_ID_BASE = 100

# Deep links: "<scheme>://route<path>?k=v"
LINK_ROUTE_AUTHORITY = "route"
LINK_ROUTE_PREFIX = "//" + LINK_ROUTE_AUTHORITY

# Keys of the payload stored with every scheduled job
PAYLOAD_REMINDER_ID = "reminder_id"
PAYLOAD_TITLE = "title"
PAYLOAD_CONTENT = "content"
PAYLOAD_LINK = "link"

DEFAULT_HANDLER_KEY = "reminders"

DEFAULT_ROUTES = {
    "/app/main": "MainScreen",
    "/app/second": "SecondScreen",
}
