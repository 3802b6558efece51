"""
Shipment status transitions and the tracking history they produce.

Any status may follow any other; ordering is not enforced here. The engine
only decides what a change looks like in the history and which timestamps
it touches. Persisting the result is left to the caller.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from django.utils import timezone

from .models import Shipment, TrackingEvent


CREATED_LOCATION = "Origin"
CREATED_DESCRIPTION = "Shipment created and ready for pickup"

DEFAULT_LOCATION = "In transit"

STATUS_EVENTS = {
    Shipment.Status.PICKED_UP: ("Origin", "Package picked up by courier"),
    Shipment.Status.OUT_FOR_DELIVERY: ("Local Facility", "Package out for delivery"),
    Shipment.Status.DELIVERED: ("Destination", "Package delivered successfully"),
}


def describe_status(status: str) -> Tuple[str, str]:
    """Return the (location, description) recorded for a change to ``status``."""
    if status in STATUS_EVENTS:
        return STATUS_EVENTS[status]
    return DEFAULT_LOCATION, f"Status updated to {status}"


def seed_event(shipment: Shipment, timestamp: Optional[datetime] = None) -> TrackingEvent:
    return TrackingEvent(
        shipment=shipment,
        status=shipment.status,
        location=CREATED_LOCATION,
        description=CREATED_DESCRIPTION,
        timestamp=timestamp or timezone.now(),
    )


def apply_status_change(
    shipment: Shipment, requested_status: str, timestamp: Optional[datetime] = None
) -> Optional[TrackingEvent]:
    """
    Move ``shipment`` to ``requested_status``.

    Returns the unsaved history entry to append, or ``None`` when the status
    is unchanged, in which case the shipment is left untouched. A change to
    ``delivered`` stamps ``actual_delivery``; later changes never clear it.
    """
    if requested_status == shipment.status:
        return None

    timestamp = timestamp or timezone.now()
    location, description = describe_status(requested_status)

    shipment.status = requested_status
    if requested_status == Shipment.Status.DELIVERED:
        shipment.actual_delivery = timestamp

    return TrackingEvent(
        shipment=shipment,
        status=requested_status,
        location=location,
        description=description,
        timestamp=timestamp,
    )
