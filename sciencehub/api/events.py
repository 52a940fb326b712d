"""
FastAPI routes for event management from the admin dashboard.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from ..schemas.common import ErrorResponse
from ..schemas.event import EventResponse, SaveEventRequest, SaveEventResponse
from ..services.event_service import EventService
from ..services.notification_service import NotificationDispatcher, format_event_saved_message
from ..utils.dependencies import get_event_service, get_notification_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(tags=["events"])


@router.post(
    "/save-event",
    response_model=SaveEventResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid event data"},
        404: {"model": ErrorResponse, "description": "Event to update not found"},
        409: {"model": ErrorResponse, "description": "Time slot conflict or concurrent update"},
        500: {"model": ErrorResponse, "description": "Persistence error"},
    },
)
async def save_event(
    request: SaveEventRequest,
    background_tasks: BackgroundTasks,
    service: EventService = Depends(get_event_service),
    notifications: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Create (``isNew: true``) or update an event.

    The event's time slot is created or moved along with it. A notification
    announcing the change is sent after the response.
    """
    event = await service.save_event(request.event_data, request.is_new)

    notifications.dispatch(format_event_saved_message(event, request.is_new), background_tasks)

    return SaveEventResponse(
        data=[EventResponse.model_validate(event)],
        message=f"Event {'created' if request.is_new else 'updated'} successfully",
    )
