"""
Pydantic models for notifications
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from remindlink.models.link import LaunchableTarget


class NotificationRecord(BaseModel):
    """One delivered notification"""
    model_config = ConfigDict(frozen=True)

    notify_id: int
    title: str
    content: str
    click_action: Optional[LaunchableTarget] = None
    posted_at_epoch_millis: int = 0
    auto_cancel: bool = True
    small_icon: Optional[str] = None
    style: str = "big_text"


class SendNotificationRequest(BaseModel):
    """Request model for sending a notification right away"""
    title: str = Field(..., min_length=1, max_length=200, description="Notification title")
    content: str = Field("", description="Notification body, may span several lines")
    link: Optional[str] = Field(None, description="Router path or full deep link for the click action")
    broadcast: bool = Field(False, description="Resolve the link when clicked instead of when sent")
