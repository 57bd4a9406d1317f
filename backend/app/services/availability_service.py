# backend/app/services/availability_service.py
"""
Availability listing for the public booking page.

Listing = slot generation over the booking type's weekly rules, followed by
the conflict filter over a snapshot of the type's active bookings for that
local date. Read-only and lock-free: a stale snapshot only means a later
reservation attempt ends in a slot conflict.
"""

from datetime import date, datetime, timedelta
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_utils import get_timezone, js_weekday, local_day_bounds, local_today
from ..models.booking_type import BookingType
from ..models.workspace import Workspace
from ..repositories.availability_rule_repository import AvailabilityRuleRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.booking_type_repository import BookingTypeRepository
from ..repositories.workspace_repository import WorkspaceRepository
from .base import BaseService
from .conflict_filter import filter_conflicts
from .slot_generator import Slot, generate_slots

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Computes reservable slots and bookable dates for a booking type."""

    def __init__(
        self,
        db: Session,
        workspace_repository: Optional[WorkspaceRepository] = None,
        booking_type_repository: Optional[BookingTypeRepository] = None,
        availability_rule_repository: Optional[AvailabilityRuleRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.workspace_repository = workspace_repository or WorkspaceRepository(db)
        self.booking_type_repository = booking_type_repository or BookingTypeRepository(db)
        self.rule_repository = availability_rule_repository or AvailabilityRuleRepository(db)
        self.booking_repository = booking_repository or BookingRepository(db)

    def resolve_bookable_type(
        self, workspace_id: str, booking_type_id: str
    ) -> Tuple[Workspace, BookingType]:
        """
        Load the workspace and one of its active booking types.

        Raises:
            NotFoundException: Unknown or inactive workspace
            ValidationException: Booking type missing, foreign or inactive
        """
        workspace = self.workspace_repository.get_active(workspace_id)
        if workspace is None:
            raise NotFoundException("Workspace not found")

        if not booking_type_id:
            raise ValidationException(
                "Booking type is required", details={"field": "bookingTypeId"}
            )

        booking_type = self.booking_type_repository.get_for_workspace(
            workspace_id, booking_type_id, active_only=True
        )
        if booking_type is None:
            raise ValidationException(
                "Booking type not found or inactive",
                details={"field": "bookingTypeId", "value": booking_type_id},
            )
        return workspace, booking_type

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        workspace_id: str,
        booking_type_id: str,
        day: date,
        now: Optional[datetime] = None,
    ) -> List[Slot]:
        """
        Reservable slots of a booking type on a workspace-local date.

        Returns:
            Conflict-free slots ordered by start, each exactly one duration long
        """
        workspace, booking_type = self.resolve_bookable_type(workspace_id, booking_type_id)
        tz = get_timezone(workspace.timezone)

        rules = self.rule_repository.list_for_day(booking_type.id, js_weekday(day))
        candidates = generate_slots(booking_type.duration, day, rules, tz, now=now)
        if not candidates:
            return []

        day_start, day_end = local_day_bounds(day, tz)
        existing = self.booking_repository.get_active_overlapping(
            booking_type.id, day_start, day_end
        )
        slots = filter_conflicts(candidates, existing)

        self.logger.debug(
            "Availability for %s on %s: %d of %d candidates free",
            booking_type.id,
            day.isoformat(),
            len(slots),
            len(candidates),
        )
        return slots

    @BaseService.measure_operation("get_available_dates")
    def get_available_dates(
        self,
        workspace_id: str,
        booking_type_id: str,
        from_date: Optional[date] = None,
        days_ahead: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Local dates in the booking horizon whose weekday has at least one rule.

        Dates are not checked against existing bookings; a fully booked date
        still appears and simply lists no slots.
        """
        workspace, booking_type = self.resolve_bookable_type(workspace_id, booking_type_id)
        tz = get_timezone(workspace.timezone)

        start = from_date or local_today(tz)
        horizon = days_ahead or settings.available_dates_horizon_days
        weekdays = self.rule_repository.days_with_rules(booking_type.id)

        dates: List[Dict[str, Any]] = []
        for offset in range(horizon):
            day = start + timedelta(days=offset)
            weekday = js_weekday(day)
            if weekday in weekdays:
                dates.append({"date": day, "day_of_week": weekday})
        return dates
