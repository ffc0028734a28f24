"""
Notification Routes - Send, list, clear and click notifications
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from remindlink.core.dependencies import Services, get_services
from remindlink.core.exceptions import DeliveryFailure
from remindlink.models.notification import NotificationRecord, SendNotificationRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=NotificationRecord)
async def send_notification(request: SendNotificationRequest, services: Services = Depends(get_services)):
    """Send a notification right away"""
    try:
        return services.dispatcher.send_link(request.title, request.content, request.link,
                                             broadcast=request.broadcast)
    except DeliveryFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("", response_model=List[NotificationRecord])
async def list_notifications(services: Services = Depends(get_services)):
    """List notifications that have not been clicked or cleared"""
    return services.sink.live_notifications()


@router.post("/cancel-all")
async def cancel_all_notifications(services: Services = Depends(get_services)):
    """Clear every live notification"""
    try:
        cancelled = services.dispatcher.cancel_all()
        return {"status": "success", "cancelled": cancelled}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{notify_id}/click")
async def click_notification(notify_id: int, services: Services = Depends(get_services)):
    """Click a notification: dismiss it and open its click action"""
    record = services.sink.take(notify_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No live notification with id {notify_id}")

    navigation = services.resolver.activate(record.click_action)
    if navigation is None:
        logger.info(f"[CLICK] Notification {notify_id} has no destination to open")
    return {"notify_id": notify_id, "navigation": navigation}
