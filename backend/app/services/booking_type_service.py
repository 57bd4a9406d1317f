# backend/app/services/booking_type_service.py
"""
Booking Type Service

Catalog management for bookable services:
- Listing booking types (staff and public views)
- Creating types seeded with a default weekly availability
- Updating, deleting and deactivating types
- Adding and removing availability rules
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..core.timezone_utils import parse_hhmm
from ..models.booking_type import AvailabilityRule, BookingType
from ..models.workspace import Workspace
from ..repositories.availability_rule_repository import AvailabilityRuleRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.booking_type_repository import BookingTypeRepository
from ..repositories.workspace_repository import WorkspaceRepository
from ..schemas.booking_type import AvailabilityRuleCreate, BookingTypeCreate, BookingTypeUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


def validate_rule_window(day_of_week: Any, start_time: Any, end_time: Any) -> Dict[str, Any]:
    """
    Check one weekly window and return it in storage form.

    Raises:
        ValidationException: Day outside 0..6, malformed time, or end not after start
    """
    if not isinstance(day_of_week, int) or isinstance(day_of_week, bool) or not 0 <= day_of_week <= 6:
        raise ValidationException(
            "Day of week must be between 0 (Sunday) and 6 (Saturday)",
            details={"field": "dayOfWeek", "value": day_of_week},
        )
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        raise ValidationException(
            "End time must be after start time",
            details={"field": "endTime", "start_time": start_time, "end_time": end_time},
        )
    return {
        "day_of_week": day_of_week,
        "start_time": start.strftime("%H:%M"),
        "end_time": end.strftime("%H:%M"),
    }


class BookingTypeService(BaseService):
    """Manages booking types and their availability rules."""

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

    def _require_workspace(self, workspace_id: str) -> Workspace:
        workspace = self.workspace_repository.get_active(workspace_id)
        if workspace is None:
            raise NotFoundException("Workspace not found")
        return workspace

    def _require_booking_type(self, workspace_id: str, booking_type_id: str) -> BookingType:
        booking_type = self.booking_type_repository.get_for_workspace(workspace_id, booking_type_id)
        if booking_type is None:
            raise NotFoundException("Booking type not found")
        return booking_type

    def _seed_rules(
        self, workspace: Workspace, requested: Optional[Iterable[AvailabilityRuleCreate]]
    ) -> List[Dict[str, Any]]:
        source: Iterable[Mapping[str, Any]]
        if requested is not None:
            source = [rule.model_dump() for rule in requested]
        elif workspace.business_hours:
            source = workspace.business_hours
        else:
            source = settings.default_availability
        return [
            validate_rule_window(rule.get("day_of_week"), rule.get("start_time"), rule.get("end_time"))
            for rule in source
        ]

    # Queries

    @BaseService.measure_operation("list_booking_types")
    def list_booking_types(self, workspace_id: str, include_inactive: bool = False) -> List[BookingType]:
        self._require_workspace(workspace_id)
        return self.booking_type_repository.list_for_workspace(
            workspace_id, active_only=not include_inactive
        )

    @BaseService.measure_operation("list_public_booking_types")
    def list_public_booking_types(self, workspace_id: str) -> List[BookingType]:
        """Active booking types shown on the public booking page."""
        self._require_workspace(workspace_id)
        return self.booking_type_repository.list_for_workspace(workspace_id, active_only=True)

    @BaseService.measure_operation("get_booking_type")
    def get_booking_type(self, workspace_id: str, booking_type_id: str) -> BookingType:
        return self._require_booking_type(workspace_id, booking_type_id)

    # Commands

    @BaseService.measure_operation("create_booking_type")
    def create_booking_type(self, workspace_id: str, data: BookingTypeCreate) -> BookingType:
        """
        Create a booking type together with its initial weekly rules.

        Rules come from the request when given, otherwise from the workspace's
        business hours, otherwise from the default week
        (Mon-Fri 09:00-17:00, Sat 09:00-13:00).
        """
        workspace = self._require_workspace(workspace_id)
        rules = self._seed_rules(workspace, data.availability)

        with self.transaction():
            booking_type = self.booking_type_repository.create(
                workspace_id=workspace_id,
                name=data.name,
                description=data.description,
                duration=data.duration,
                location=data.location,
                is_active=True,
            )
            booking_type.availability_rules = [AvailabilityRule(**rule) for rule in rules]
            self.db.flush()

        self.log_operation(
            "create_booking_type",
            workspace_id=workspace_id,
            booking_type_id=booking_type.id,
            rule_count=len(rules),
        )
        return booking_type

    @BaseService.measure_operation("update_booking_type")
    def update_booking_type(
        self, workspace_id: str, booking_type_id: str, data: BookingTypeUpdate
    ) -> BookingType:
        """
        Apply a partial update.

        A duration change affects future slot generation only; committed
        bookings keep their stored end time.
        """
        booking_type = self._require_booking_type(workspace_id, booking_type_id)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            raise ValidationException("Name cannot be empty", details={"field": "name"})
        if "duration" in changes and changes["duration"] is None:
            raise ValidationException("Duration is required", details={"field": "duration"})

        with self.transaction():
            for field, value in changes.items():
                setattr(booking_type, field, value)
            self.db.flush()

        self.log_operation(
            "update_booking_type", booking_type_id=booking_type_id, fields=sorted(changes)
        )
        return booking_type

    @BaseService.measure_operation("delete_booking_type")
    def delete_booking_type(self, workspace_id: str, booking_type_id: str) -> bool:
        """
        Delete a booking type.

        Refused while PENDING or CONFIRMED bookings exist. A type that only has
        finished bookings is deactivated instead, since bookings are never
        deleted and keep referencing it.

        Returns:
            True if the row was deleted, False if it was deactivated
        """
        booking_type = self._require_booking_type(workspace_id, booking_type_id)

        open_count = self.booking_repository.count_open_for_type(booking_type.id)
        if open_count:
            raise ConflictException(
                "Cannot delete booking type with active bookings",
                details={"active_bookings": open_count},
            )

        with self.transaction():
            if self.booking_repository.exists(booking_type_id=booking_type.id):
                booking_type.is_active = False
                deleted = False
            else:
                self.booking_type_repository.delete(booking_type.id)
                deleted = True

        self.log_operation(
            "delete_booking_type", booking_type_id=booking_type_id, hard_delete=deleted
        )
        return deleted

    @BaseService.measure_operation("add_availability_rule")
    def add_availability_rule(
        self, workspace_id: str, booking_type_id: str, data: AvailabilityRuleCreate
    ) -> AvailabilityRule:
        booking_type = self._require_booking_type(workspace_id, booking_type_id)
        values = validate_rule_window(data.day_of_week, data.start_time, data.end_time)

        with self.transaction():
            rule = self.rule_repository.create(booking_type_id=booking_type.id, **values)
        self.db.expire(booking_type, ["availability_rules"])

        self.log_operation(
            "add_availability_rule", booking_type_id=booking_type_id, rule_id=rule.id
        )
        return rule

    @BaseService.measure_operation("delete_availability_rule")
    def delete_availability_rule(self, workspace_id: str, booking_type_id: str, rule_id: str) -> None:
        booking_type = self._require_booking_type(workspace_id, booking_type_id)
        rule = self.rule_repository.get_for_booking_type(booking_type.id, rule_id)
        if rule is None:
            raise NotFoundException("Availability rule not found")

        with self.transaction():
            self.rule_repository.delete(rule.id)
        self.db.expire(booking_type, ["availability_rules"])

        self.log_operation("delete_availability_rule", booking_type_id=booking_type_id, rule_id=rule_id)
