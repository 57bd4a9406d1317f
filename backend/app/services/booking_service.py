# backend/app/services/booking_service.py
"""
Booking Service

Staff-facing booking queries: filtered listing, upcoming bookings, today's
schedule in the workspace timezone, and booking detail.
"""

from datetime import date, datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import get_timezone, local_day_bounds, local_today, utc_now
from ..models.booking import Booking, BookingStatus
from ..models.workspace import Workspace
from ..repositories.booking_repository import BookingRepository
from ..repositories.workspace_repository import WorkspaceRepository
from .base import BaseService
from .booking_lifecycle import parse_status

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Read side of the booking engine for the dashboard."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        workspace_repository: Optional[WorkspaceRepository] = None,
    ):
        super().__init__(db)
        self.booking_repository = booking_repository or BookingRepository(db)
        self.workspace_repository = workspace_repository or WorkspaceRepository(db)

    def _require_workspace(self, workspace_id: str) -> Workspace:
        workspace = self.workspace_repository.get_active(workspace_id)
        if workspace is None:
            raise NotFoundException("Workspace not found")
        return workspace

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        workspace_id: str,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        booking_type_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Bookings of the workspace, newest start first.

        ``start_date`` and ``end_date`` are inclusive workspace-local dates.
        """
        workspace = self._require_workspace(workspace_id)
        tz = get_timezone(workspace.timezone)

        if start_date and end_date and end_date < start_date:
            raise ValidationException(
                "End date must not be before start date", details={"field": "endDate"}
            )

        start_from: Optional[datetime] = local_day_bounds(start_date, tz)[0] if start_date else None
        start_before: Optional[datetime] = local_day_bounds(end_date, tz)[1] if end_date else None

        return self.booking_repository.list_for_workspace(
            workspace_id,
            status=parse_status(status).value if status else None,
            start_from=start_from,
            start_before=start_before,
            booking_type_id=booking_type_id,
            newest_first=True,
        )

    @BaseService.measure_operation("get_upcoming_bookings")
    def get_upcoming_bookings(self, workspace_id: str, now: Optional[datetime] = None) -> List[Booking]:
        """Open bookings starting within the upcoming window, soonest first."""
        self._require_workspace(workspace_id)
        start = now or utc_now()
        return self.booking_repository.list_for_workspace(
            workspace_id,
            statuses=[BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value],
            start_from=start,
            start_before=start + timedelta(days=settings.upcoming_window_days),
            newest_first=False,
        )

    @BaseService.measure_operation("get_today_bookings")
    def get_today_bookings(self, workspace_id: str, now: Optional[datetime] = None) -> List[Booking]:
        """All bookings on today's date in the workspace timezone."""
        workspace = self._require_workspace(workspace_id)
        tz = get_timezone(workspace.timezone)
        day_start, day_end = local_day_bounds(local_today(tz, now), tz)
        return self.booking_repository.list_for_workspace(
            workspace_id,
            start_from=day_start,
            start_before=day_end,
            newest_first=False,
        )

    @BaseService.measure_operation("get_booking")
    def get_booking(self, workspace_id: str, booking_id: str) -> Booking:
        booking = self.booking_repository.get_for_workspace(workspace_id, booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking
