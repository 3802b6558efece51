"""
Human-readable identifiers for couriers, products and shipments.

Each format takes the 1-based sequence number derived from the collection
size. Counting alone is not safe under concurrent writers, so
``next_identifier`` keeps advancing the sequence until it finds a value that
is not taken; the unique index remains the final arbiter at commit time.
"""
from django.utils import timezone


def epoch_millis(now=None) -> int:
    now = now or timezone.now()
    return int(now.timestamp() * 1000)


def courier_code(sequence: int) -> str:
    return f"CR{sequence:03d}"


def product_sku(sequence: int, millis: int) -> str:
    return f"PROD{str(millis)[-6:]}{sequence:03d}"


def tracking_number(sequence: int, millis: int) -> str:
    return f"SH{millis}{sequence}"


def next_identifier(model, field: str, formatter) -> str:
    manager = model._default_manager
    sequence = manager.count() + 1
    candidate = formatter(sequence)
    while manager.filter(**{field: candidate}).exists():
        sequence += 1
        candidate = formatter(sequence)
    return candidate
