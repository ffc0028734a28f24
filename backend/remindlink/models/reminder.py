"""
Pydantic models for reminders
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from remindlink.core.constants import (
    PAYLOAD_CONTENT,
    PAYLOAD_LINK,
    PAYLOAD_REMINDER_ID,
    PAYLOAD_TITLE,
)


class ReminderState(str, Enum):
    """Lifecycle of one recurring reminder"""
    UNSCHEDULED = "unscheduled"
    PENDING = "pending"
    FIRING = "firing"


class ReminderRequest(BaseModel):
    """
    One cycle of a recurring reminder.

    reminder_id is stable across cycles; fire_at_epoch_millis changes every
    cycle, so each cycle gets a fresh value from next_cycle().
    """
    model_config = ConfigDict(frozen=True)

    reminder_id: int = Field(..., ge=0)
    title: str = ""
    content: str = ""
    link: str = ""
    fire_at_epoch_millis: int

    def next_cycle(self, fire_at_epoch_millis: int) -> "ReminderRequest":
        return self.model_copy(update={"fire_at_epoch_millis": fire_at_epoch_millis})

    def to_payload(self) -> Dict[str, Any]:
        """Job payload handed to the scheduler backend"""
        return {
            PAYLOAD_REMINDER_ID: self.reminder_id,
            PAYLOAD_TITLE: self.title,
            PAYLOAD_CONTENT: self.content,
            PAYLOAD_LINK: self.link,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], fire_at_epoch_millis: int) -> "ReminderRequest":
        """
        Rebuild a request from a fired job payload

        Missing text fields fall back to "" and a missing id to 0.
        """
        return cls(
            reminder_id=int(payload.get(PAYLOAD_REMINDER_ID) or 0),
            title=payload.get(PAYLOAD_TITLE) or "",
            content=payload.get(PAYLOAD_CONTENT) or "",
            link=payload.get(PAYLOAD_LINK) or "",
            fire_at_epoch_millis=fire_at_epoch_millis,
        )


class ScheduleReminderRequest(BaseModel):
    """Request model for scheduling a recurring reminder"""
    reminder_id: int = Field(..., ge=0, description="Stable reminder identity")
    title: str = Field(..., min_length=1, max_length=200, description="Notification title")
    content: str = Field("", description="Notification body")
    link: str = Field("", description="Router path opened on click, e.g. /app/second")
    fire_at_epoch_millis: Optional[int] = Field(
        None, description="First fire time; defaults to now plus the reminder interval"
    )


class ReminderStatus(BaseModel):
    """Observable state of one reminder"""
    reminder_id: int
    state: ReminderState
    job_name: str
    next_fire_at_epoch_millis: Optional[int] = None
    next_fire_at: Optional[str] = None


class FireResult(BaseModel):
    """Outcome of one fire of a reminder"""
    reminder_id: int
    notify_id: Optional[int] = None
    delivered: bool = False
    rearmed: bool = False
    next_fire_at_epoch_millis: Optional[int] = None
