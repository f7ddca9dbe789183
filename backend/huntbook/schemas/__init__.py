"""Schema exports."""

from huntbook.schemas.availability import AvailabilityResponse, DayAvailabilityRead
from huntbook.schemas.booking import BookingSelection, PricingLineRead, QuoteRead
from huntbook.schemas.order import (
    OrderCreate,
    OrderRead,
    PaymentCallback,
    RejectionRead,
)
from huntbook.schemas.season import SeasonCreate, SeasonRead, SeasonUpdate

__all__ = [
    "AvailabilityResponse",
    "BookingSelection",
    "DayAvailabilityRead",
    "OrderCreate",
    "OrderRead",
    "PaymentCallback",
    "PricingLineRead",
    "QuoteRead",
    "RejectionRead",
    "SeasonCreate",
    "SeasonRead",
    "SeasonUpdate",
]
