"""ORM models package export."""

from huntbook.models.availability import AvailabilityDay
from huntbook.models.order import Order, OrderStatus
from huntbook.models.season import SeasonRateTable

__all__ = [
    "AvailabilityDay",
    "Order",
    "OrderStatus",
    "SeasonRateTable",
]
