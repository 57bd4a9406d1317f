# backend/app/models/types.py
"""
Custom SQLAlchemy types that work across different database backends.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import pytz
from sqlalchemy import DateTime, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

if TYPE_CHECKING:
    from sqlalchemy.sql.type_api import TypeDecorator as _TypeDecorator

    TypeDecoratorProtocol = _TypeDecorator[Any]
else:
    TypeDecoratorProtocol = TypeDecorator


# JSONB on PostgreSQL, plain JSON text elsewhere
JSONType = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")


class UTCDateTime(TypeDecoratorProtocol):
    """
    Timezone-aware UTC datetime on every backend.

    PostgreSQL keeps the offset natively; SQLite drops it, so values are
    normalized to UTC before binding and re-tagged as UTC when loaded.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            value = pytz.UTC.localize(value)
        value = value.astimezone(pytz.UTC)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            return pytz.UTC.localize(value)
        return value.astimezone(pytz.UTC)
