"""
FastAPI routes for event registration.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends

from ..schemas.common import ErrorResponse
from ..schemas.registration import (
    EventRegistrationsResponse,
    RegisterEventRequest,
    RegisterEventResponse,
    RegistrationStatusUpdate,
)
from ..services.notification_service import NotificationDispatcher, format_registration_message
from ..services.registration_service import RegistrationService
from ..utils.dependencies import get_notification_dispatcher, get_registration_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["registrations"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
    404: {"model": ErrorResponse, "description": "Event not found"},
    409: {"model": ErrorResponse, "description": "Capacity exceeded, duplicate id or concurrent update"},
    500: {"model": ErrorResponse, "description": "Persistence error"},
}


@router.post(
    "/register-event",
    response_model=RegisterEventResponse,
    responses=ERROR_RESPONSES,
)
async def register_event(
    request: RegisterEventRequest,
    background_tasks: BackgroundTasks,
    service: RegistrationService = Depends(get_registration_service),
    notifications: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Register for an event.

    The total is computed server side from the event's pricing. The
    registration is recorded before the response is sent; the Telegram
    notification is delivered afterwards and its outcome never affects
    the response.
    """
    result = await service.register(request.event_id, request.registration_data)

    notifications.dispatch(
        format_registration_message(result.event, result.registration),
        background_tasks,
    )

    return RegisterEventResponse(
        registration_id=result.registration_id,
        total_amount=result.total_amount,
    )


@router.get(
    "/events/{event_id}/registrations",
    response_model=EventRegistrationsResponse,
    responses={404: ERROR_RESPONSES[404]},
)
async def get_event_registrations(
    event_id: UUID,
    service: RegistrationService = Depends(get_registration_service),
):
    """Registrations of an event with counters over active entries."""
    return await service.get_registrations(event_id)


@router.post(
    "/events/{event_id}/registrations/{registration_id}/status",
    response_model=EventRegistrationsResponse,
    responses={404: ERROR_RESPONSES[404], 409: ERROR_RESPONSES[409]},
)
async def set_registration_status(
    event_id: UUID,
    registration_id: str,
    update: RegistrationStatusUpdate,
    service: RegistrationService = Depends(get_registration_service),
):
    """Cancel (``active: false``) or reactivate a registration."""
    logger.info(f"Setting registration {registration_id} of event {event_id} active={update.active}")
    return await service.set_registration_status(event_id, registration_id, update.active)
