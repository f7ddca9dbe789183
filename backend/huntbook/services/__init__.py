"""Service layer exports."""
from huntbook.services import (
    availability_service,
    pricing_service,
    reservation_service,
    season_service,
)

__all__ = [
    "availability_service",
    "pricing_service",
    "reservation_service",
    "season_service",
]
