"""
FastAPI routes for page-view tracking and admin reporting.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from ..schemas.analytics import EventRegistrationStats, PageStats, PageViewCreate, TimeSpentUpdate
from ..schemas.common import ErrorResponse, SuccessResponse
from ..services.analytics_service import AnalyticsService
from ..utils.dependencies import get_analytics_service

router = APIRouter(tags=["analytics"])


@router.post(
    "/track-page-view",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def track_page_view(
    data: PageViewCreate,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Record a page view."""
    await service.track_page_view(data)
    return SuccessResponse()


@router.post(
    "/update-time-spent",
    response_model=SuccessResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "No matching page view found"},
        500: {"model": ErrorResponse},
    },
)
async def update_time_spent(
    data: TimeSpentUpdate,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Store the time spent on the session's most recent view of a path."""
    await service.update_time_spent(data)
    return SuccessResponse()


@router.get("/analytics/events", response_model=List[EventRegistrationStats])
async def get_event_stats(service: AnalyticsService = Depends(get_analytics_service)):
    """Per-event registration statistics over active registrations."""
    return await service.get_event_stats()


@router.get("/analytics/events/export")
async def export_event_stats(service: AnalyticsService = Depends(get_analytics_service)):
    """Per-event registration statistics as a CSV download."""
    content = await service.export_event_stats_csv()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="event_registrations.csv"'},
    )


@router.get("/analytics/pages", response_model=List[PageStats])
async def get_page_stats(
    include_admin: bool = Query(False, description="Include views from admin pages"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Visits, unique sessions and average time spent per path."""
    return await service.get_page_stats(include_admin=include_admin)
