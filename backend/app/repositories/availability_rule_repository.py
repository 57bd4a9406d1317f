# backend/app/repositories/availability_rule_repository.py
"""
Availability rule store.

Per-booking-type weekly windows (day of week, local start, local end).
Pure data access; interpretation happens in the slot generator.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..models.booking_type import AvailabilityRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRuleRepository(BaseRepository[AvailabilityRule]):
    """Data access for availability rules."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilityRule)

    def list_for_booking_type(self, booking_type_id: str) -> List[AvailabilityRule]:
        query = (
            self.db.query(AvailabilityRule)
            .filter(AvailabilityRule.booking_type_id == booking_type_id)
            .order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc())
        )
        return self._execute_query(query)

    def list_for_day(self, booking_type_id: str, day_of_week: int) -> List[AvailabilityRule]:
        query = (
            self.db.query(AvailabilityRule)
            .filter(
                AvailabilityRule.booking_type_id == booking_type_id,
                AvailabilityRule.day_of_week == day_of_week,
            )
            .order_by(AvailabilityRule.start_time.asc())
        )
        return self._execute_query(query)

    def get_for_booking_type(self, booking_type_id: str, rule_id: str) -> Optional[AvailabilityRule]:
        return self.find_one_by(id=rule_id, booking_type_id=booking_type_id)

    def days_with_rules(self, booking_type_id: str) -> Set[int]:
        """Weekdays (0 = Sunday) that have at least one window."""
        return {rule.day_of_week for rule in self.list_for_booking_type(booking_type_id)}
