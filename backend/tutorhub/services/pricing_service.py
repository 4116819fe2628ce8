# backend/tutorhub/services/pricing_service.py
"""
Pricing helpers for TutorHub bookings.

All money is integer cents. Intermediate arithmetic uses Decimal and rounds
half-up to whole cents, so 5000/h for 1.5h is exactly 7500 and a half cent
always rounds away from zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.config import settings
from ..core.exceptions import ValidationException

SECONDS_PER_HOUR = Decimal(3600)


@dataclass(frozen=True)
class EarningsBreakdown:
    price: int
    platform_fee: int
    teacher_earnings: int
    platform_fee_percentage: int


def _round_to_int(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def duration_hours(start: datetime, end: datetime) -> Decimal:
    if start >= end:
        raise ValidationException("Start time must be before end time")
    return Decimal(str((end - start).total_seconds())) / SECONDS_PER_HOUR


def calculate_booking_price(hourly_rate_cents: int, start: datetime, end: datetime) -> int:
    """Price in cents for the interval at the given hourly rate."""
    return _round_to_int(Decimal(hourly_rate_cents) * duration_hours(start, end))


def calculate_teacher_earnings(
    price: int, fee_percentage: Optional[int] = None
) -> EarningsBreakdown:
    """Split a booking price into the platform fee and the teacher's share."""
    pct = settings.platform_fee_percentage if fee_percentage is None else fee_percentage
    platform_fee = _round_to_int(Decimal(price) * Decimal(pct) / Decimal(100))
    return EarningsBreakdown(
        price=price,
        platform_fee=platform_fee,
        teacher_earnings=price - platform_fee,
        platform_fee_percentage=pct,
    )
