"""
Base schemas with standardized field types for consistent API responses.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from ..core.timezone_utils import ensure_utc


class StandardizedModel(BaseModel):
    """Base model with camelCase JSON and ISO-8601 UTC timestamps"""

    model_config = ConfigDict(
        use_enum_values=True,
        populate_by_name=True,
        from_attributes=True,
        alias_generator=to_camel,
    )


class TimestampedModel(StandardizedModel):
    """Response base for records that expose start/end instants."""

    start_time: datetime
    end_time: datetime

    @field_serializer("start_time", "end_time")
    def _serialize_instant(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return ensure_utc(value).isoformat().replace("+00:00", "Z")
