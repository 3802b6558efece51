from datetime import timedelta
from decimal import Decimal

from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from catalog.models import Product
from courier.models import Shipment

CENTS = Decimal("0.01")
PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "30d"
RECENT_LIMIT = 5
ALERT_LIMIT = 10

STOCK_VALUE = ExpressionWrapper(
    F("price") * F("quantity"), output_field=DecimalField(max_digits=20, decimal_places=2)
)


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS)


def _status_counts():
    rows = Shipment.objects.order_by().values("status").annotate(count=Count("id"))
    return {row["status"]: row["count"] for row in rows}


def dashboard_stats(now=None):
    now = now or timezone.now()
    status_counts = _status_counts()

    revenue = (
        Shipment.objects.filter(created_at__gte=now - timedelta(days=30))
        .exclude(status=Shipment.Status.CANCELLED)
        .aggregate(
            total_revenue=Sum("shipping_cost"),
            average_revenue=Avg("shipping_cost"),
            shipment_count=Count("id"),
        )
    )

    return {
        "shipments": {
            "total": sum(status_counts.values()),
            "status_counts": status_counts,
            "pending": status_counts.get(Shipment.Status.PENDING, 0),
            "in_transit": status_counts.get(Shipment.Status.IN_TRANSIT, 0),
            "delivered": status_counts.get(Shipment.Status.DELIVERED, 0),
        },
        "products": {
            "total": Product.objects.count(),
            "low_stock": Product.objects.needs_reorder().count(),
            "out_of_stock": Product.objects.out_of_stock().count(),
        },
        "revenue": {
            "total_revenue": _money(revenue["total_revenue"]),
            "average_revenue": _money(revenue["average_revenue"]),
            "shipment_count": revenue["shipment_count"],
        },
        "recent": {
            "shipments": Shipment.objects.select_related("courier").order_by("-created_at")[:RECENT_LIMIT],
            "products": Product.objects.order_by("-created_at")[:RECENT_LIMIT],
        },
    }


def resolve_period(period):
    if period not in PERIOD_DAYS:
        period = DEFAULT_PERIOD
    return period, PERIOD_DAYS[period]


def shipment_analytics(period=DEFAULT_PERIOD, now=None):
    now = now or timezone.now()
    period, days = resolve_period(period)
    shipments = Shipment.objects.filter(created_at__gte=now - timedelta(days=days)).order_by()

    by_status = (
        shipments.annotate(date=TruncDate("created_at"))
        .values("status", "date")
        .annotate(count=Count("id"))
        .order_by("date", "status")
    )
    by_courier = (
        shipments.values("courier__name")
        .annotate(count=Count("id"), total_revenue=Sum("shipping_cost"))
        .order_by("-count", "courier__name")
    )
    daily = (
        shipments.annotate(date=TruncDate("created_at"))
        .values("date")
        .annotate(count=Count("id"), revenue=Sum("shipping_cost"))
        .order_by("date")
    )

    return {
        "period": period,
        "shipments_by_status": [
            {"status": row["status"], "date": row["date"], "count": row["count"]} for row in by_status
        ],
        "shipments_by_courier": [
            {
                "courier": row["courier__name"],
                "count": row["count"],
                "total_revenue": _money(row["total_revenue"]),
            }
            for row in by_courier
        ],
        "daily_trends": [
            {"date": row["date"], "count": row["count"], "revenue": _money(row["revenue"])} for row in daily
        ],
    }


def product_analytics():
    by_category = (
        Product.objects.order_by()
        .values("category")
        .annotate(count=Count("id"), total_value=Sum(STOCK_VALUE))
        .order_by("-count", "category")
    )
    top_by_value = Product.objects.annotate(total_value=STOCK_VALUE).order_by("-total_value", "name")[:ALERT_LIMIT]

    return {
        "products_by_category": [
            {"category": row["category"], "count": row["count"], "total_value": _money(row["total_value"])}
            for row in by_category
        ],
        "low_stock_alerts": Product.objects.needs_reorder().order_by("quantity", "name")[:ALERT_LIMIT],
        "top_products_by_value": [
            {
                "id": product.id,
                "name": product.name,
                "sku": product.sku,
                "quantity": product.quantity,
                "price": product.price,
                "total_value": _money(product.total_value),
                "stock_status": product.stock_status,
            }
            for product in top_by_value
        ],
    }
