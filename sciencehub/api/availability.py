"""
FastAPI routes for the date/time availability picker.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..schemas.availability import (
    DateAvailability,
    DayAvailabilityResponse,
    TimeSlotCheckRequest,
    TimeSlotCheckResponse,
)
from ..schemas.common import ErrorResponse
from ..services.availability_service import AvailabilityService
from ..utils.dependencies import get_availability_service

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/dates", response_model=List[DateAvailability])
async def list_dates(service: AvailabilityService = Depends(get_availability_service)):
    """Status of every date with slots, from today onward."""
    return await service.list_date_availability()


@router.post("/check", response_model=TimeSlotCheckResponse)
async def check_time_slot(
    request: TimeSlotCheckRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Check a proposed time range against existing slots."""
    return await service.check_time_slot(
        request.date,
        request.start_time,
        request.end_time,
        request.exclude_event_id,
    )


@router.get(
    "/{date}",
    response_model=DayAvailabilityResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid probe time"}},
)
async def get_day(
    date: dt.date,
    time: Optional[str] = Query(None, description="Probe time, HH:MM"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Slots and picker grid of one date; with ``time``, whether that time is free."""
    return await service.get_day(date, time)
