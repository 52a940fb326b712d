"""
Analytics service for page-view tracking and registration reporting.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import Event
from ..models.page_view import PageView
from ..schemas.analytics import EventRegistrationStats, PageStats, PageViewCreate, TimeSpentUpdate
from ..stores.sqlalchemy_store import registrations_of
from ..utils.exceptions import PageViewNotFoundError, PersistenceError

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "event_id", "title", "date", "registrations", "cancelled",
    "adults", "children", "total", "max_regs", "fill_percentage",
    "revenue", "currency",
]


class AnalyticsService:
    """Service for analytics and reporting operations."""

    def __init__(self, db: AsyncSession):
        """Initialize the analytics service."""
        self.db = db

    async def track_page_view(self, data: PageViewCreate) -> PageView:
        """Record one page view."""
        page_view = PageView(**data.model_dump(), created_at=datetime.now(timezone.utc))
        try:
            self.db.add(page_view)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error tracking page view for {data.path}: {e}")
            raise PersistenceError(f"Failed to track page view: {e}") from e
        return page_view

    async def update_time_spent(self, data: TimeSpentUpdate) -> PageView:
        """Set the duration of the most recent view of ``path`` in the session."""
        query = (
            select(PageView)
            .where(PageView.session_id == data.session_id, PageView.path == data.path)
            .order_by(desc(PageView.created_at))
            .limit(1)
        )
        try:
            page_view = (await self.db.execute(query)).scalar_one_or_none()
            if page_view is None:
                raise PageViewNotFoundError(data.session_id, data.path)
            page_view.time_spent = data.time_spent
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating time spent for {data.path}: {e}")
            raise PersistenceError(f"Failed to update time spent: {e}") from e
        return page_view

    async def get_event_stats(self) -> List[EventRegistrationStats]:
        """Registration statistics per event, newest first."""
        result = await self.db.execute(select(Event).order_by(desc(Event.date), Event.title))
        stats = []
        for event in result.scalars().all():
            registrations, _ = registrations_of(event)
            counters = registrations.recomputed()
            active = counters.active_registrations()
            revenue = sum(
                (Decimal(str(entry.get("total_amount") or 0)) for entry in active),
                Decimal("0"),
            )
            capacity = counters.capacity
            stats.append(EventRegistrationStats(
                event_id=event.id,
                title=event.title,
                date=event.date,
                registrations=len(active),
                cancelled=len(counters.reg_list) - len(active),
                adults=counters.current_adults,
                children=counters.current_children,
                total=counters.current,
                max_regs=capacity,
                fill_percentage=round(counters.current / capacity * 100, 1) if capacity else None,
                revenue=revenue,
                currency=event.currency,
            ))
        return stats

    async def export_event_stats_csv(self) -> str:
        """The per-event statistics as CSV with a header row."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in await self.get_event_stats():
            writer.writerow(row.model_dump(mode="json"))
        return buffer.getvalue()

    async def get_page_stats(self, include_admin: bool = False) -> List[PageStats]:
        """Visits, unique sessions and average time spent per path."""
        query = select(
            PageView.path,
            func.count(PageView.id).label('visits'),
            func.count(func.distinct(PageView.session_id)).label('unique_visitors'),
            func.avg(PageView.time_spent).label('avg_time_spent'),
        )
        if not include_admin:
            query = query.where(PageView.is_admin.is_(False))
        query = query.group_by(PageView.path).order_by(desc('visits'), PageView.path)

        result = await self.db.execute(query)
        return [
            PageStats(
                path=row.path,
                visits=row.visits,
                unique_visitors=row.unique_visitors,
                avg_time_spent=round(float(row.avg_time_spent or 0), 1),
            )
            for row in result.fetchall()
        ]
