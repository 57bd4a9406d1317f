# Infrastructure routes (health, metrics) are unprefixed; booking routes
# are mounted under /api/bookings in app.main
from . import (
    booking_types as booking_types,
    bookings as bookings,
    health as health,
    prometheus as prometheus,
    public_bookings as public_bookings,
)
