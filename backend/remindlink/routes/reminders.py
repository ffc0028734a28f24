"""
Reminder Routes - Endpoints for scheduling and cancelling recurring reminders
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from remindlink.core.dependencies import Services, get_services
from remindlink.core.exceptions import JobSubmissionFailure, SchedulerError
from remindlink.models.reminder import ReminderRequest, ReminderStatus, ScheduleReminderRequest
from remindlink.utils.timezone import now_epoch_millis

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.post("", response_model=ReminderStatus)
async def schedule_reminder(request: ScheduleReminderRequest, services: Services = Depends(get_services)):
    """Schedule a recurring reminder, replacing any pending cycle with the same id"""
    fire_at = request.fire_at_epoch_millis
    if fire_at is None:
        fire_at = now_epoch_millis() + services.reminders.interval_millis

    try:
        return services.reminders.schedule(ReminderRequest(
            reminder_id=request.reminder_id,
            title=request.title,
            content=request.content,
            link=request.link,
            fire_at_epoch_millis=fire_at
        ))
    except JobSubmissionFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("", response_model=List[ReminderStatus])
async def list_reminders(services: Services = Depends(get_services)):
    """List reminders with a pending cycle, soonest first"""
    try:
        return services.reminders.pending_reminders()
    except SchedulerError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{reminder_id}", response_model=ReminderStatus)
async def get_reminder(reminder_id: int, services: Services = Depends(get_services)):
    """Get the state and next fire time of a reminder"""
    try:
        return services.reminders.get_status(reminder_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{reminder_id}")
async def cancel_reminder(reminder_id: int, services: Services = Depends(get_services)):
    """Cancel a reminder so it stops re-arming"""
    try:
        cancelled = services.reminders.cancel_work(reminder_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")

    if not cancelled:
        raise HTTPException(status_code=404, detail=f"No pending reminder with id {reminder_id}")
    return {"status": "cancelled", "reminder_id": reminder_id}
