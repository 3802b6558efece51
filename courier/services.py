from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from core.exceptions import ConflictError, unique_fields

from .models import Courier, Shipment
from .tracking import apply_status_change, seed_event

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Sub-documents merged key by key on update instead of being replaced.
MERGED_FIELDS = ("sender", "receiver")


def get_courier(courier_id) -> Courier:
    courier = Courier.objects.filter(pk=courier_id).first()
    if not courier:
        raise NotFound("Courier not found")
    return courier


def calculate_shipping_cost(courier: Courier, weight=None, distance=None) -> Decimal:
    cost = Decimal(str(courier.base_rate))

    weight_rate = Decimal(str(courier.weight_rate or 0))
    if weight and weight_rate > 0:
        cost += Decimal(str(weight)) * weight_rate

    distance_rate = Decimal(str(courier.distance_rate or 0))
    if distance and distance_rate > 0:
        cost += Decimal(str(distance)) * distance_rate

    return cost.quantize(CENTS, rounding=ROUND_HALF_UP)


def _storable_cost(cost: Decimal) -> Decimal:
    field = Shipment._meta.get_field("shipping_cost")
    limit = Decimal(10) ** (field.max_digits - field.decimal_places)
    if cost >= limit:
        raise ValidationError(
            {"shipping_cost": [f"Calculated shipping cost must be less than {limit}"]}
        )
    return cost


def shipping_quote(courier: Courier, weight=None, distance=None) -> Dict[str, Any]:
    return {
        "courier": courier.name,
        "base_rate": courier.base_rate,
        "weight_rate": courier.weight_rate,
        "distance_rate": courier.distance_rate,
        "calculated_cost": calculate_shipping_cost(courier, weight, distance),
        "estimated_delivery_days": {
            "min": courier.min_delivery_days,
            "max": courier.max_delivery_days,
        },
    }


def delete_courier(courier: Courier) -> None:
    in_use = courier.shipments.count()
    if in_use:
        logger.warning("Refusing to delete courier=%s used by %s shipment(s)", courier.code, in_use)
        raise ConflictError("Cannot delete courier that is being used in shipments")
    courier.delete()
    logger.info("Deleted courier=%s", courier.code)


def create_shipment(data: Dict[str, Any], created_by=None, timestamp=None) -> Shipment:
    data = dict(data)
    # Resolve the courier before anything is written.
    courier = get_courier(data.pop("courier_id"))
    distance = data.pop("distance", None)
    if data.get("shipping_cost") is None:
        data["shipping_cost"] = _storable_cost(
            calculate_shipping_cost(courier, data.get("package_weight"), distance)
        )

    timestamp = timestamp or timezone.now()
    with unique_fields("tracking_number"), transaction.atomic():
        shipment = Shipment.objects.create(courier=courier, created_by=created_by, **data)
        seed_event(shipment, timestamp).save()

    logger.info("Created shipment=%s courier=%s", shipment.tracking_number, courier.code)
    return shipment


def update_shipment(shipment: Shipment, data: Dict[str, Any], timestamp=None) -> Shipment:
    data = dict(data)
    requested_status: Optional[str] = data.pop("status", None)
    courier_id = data.pop("courier_id", None)
    data.pop("distance", None)

    with transaction.atomic():
        if courier_id is not None:
            shipment.courier = get_courier(courier_id)
        for field, value in data.items():
            if field in MERGED_FIELDS and isinstance(value, dict):
                value = {**(getattr(shipment, field) or {}), **value}
            setattr(shipment, field, value)

        event = None
        if requested_status is not None:
            previous_status = shipment.status
            event = apply_status_change(shipment, requested_status, timestamp or timezone.now())

        shipment.save()
        if event is not None:
            event.save()
            logger.info(
                "Shipment %s status %s -> %s", shipment.tracking_number, previous_status, shipment.status
            )
    return shipment
