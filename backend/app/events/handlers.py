"""Event handlers - process booking events delivered from the outbox."""
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], None]


def log_booking_created(payload: Dict[str, Any]) -> None:
    logger.info(
        "Booking %s created (ref %s, status %s, starts %s)",
        payload.get("booking_id"),
        payload.get("reference_code"),
        payload.get("status"),
        payload.get("start_time"),
    )


def log_status_changed(payload: Dict[str, Any]) -> None:
    logger.info(
        "Booking %s moved %s -> %s",
        payload.get("booking_id"),
        payload.get("from_status"),
        payload.get("to_status"),
    )


def log_booking_cancelled(payload: Dict[str, Any]) -> None:
    logger.info("Booking %s cancelled: %s", payload.get("booking_id"), payload.get("reason") or "-")


def log_booking_rescheduled(payload: Dict[str, Any]) -> None:
    logger.info(
        "Booking %s rescheduled from %s to %s",
        payload.get("booking_id"),
        payload.get("previous_start_time"),
        payload.get("start_time"),
    )


def default_handlers() -> Dict[str, List[EventHandler]]:
    """
    Registry of event type -> handler functions.

    Notification and automation subscribers register next to these.
    """
    return {
        "BookingCreated": [log_booking_created],
        "BookingStatusChanged": [log_status_changed],
        "BookingCancelled": [log_booking_cancelled],
        "BookingRescheduled": [log_booking_rescheduled],
    }
