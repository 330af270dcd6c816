"""Booking price calculation.

CRITICAL BUSINESS LOGIC:
- Amounts are whole XAF (zero-decimal currency), never multiplied by 100
- Guests pay subtotal + 14% service fee
- Hosts are paid the guest total minus a 14% commission computed on that
  total, so the rate is applied twice (once on each side). This mirrors the
  figures shown in the admin financial reports.
- Fractional XAF are rounded half-up
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from app.config import settings

SERVICE_FEE_RATE = Decimal(settings.service_fee_percent) / Decimal("100")


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_rate(amount: int, rate: Decimal = SERVICE_FEE_RATE) -> int:
    """Return ``round_half_up(amount * rate)``."""
    return round_half_up(Decimal(amount) * rate)


def count_nights(check_in: date, check_out: date) -> int:
    """Calendar nights between two dates."""
    return (check_out - check_in).days


@dataclass(frozen=True)
class PriceBreakdown:
    """Guest-facing price breakdown."""

    nightly_rate: int
    nights: int
    subtotal: int
    service_fee_rate: Decimal
    service_fee: int
    total: int


@dataclass(frozen=True)
class HostPayout:
    """Host-side split of a guest total."""

    total: int
    commission: int
    payout: int


def compute_price(price_per_night: int, check_in: date, check_out: date) -> PriceBreakdown:
    """Compute nights, subtotal, service fee and total.

    Callers must reject ``check_out <= check_in`` before calling.
    """
    nights = count_nights(check_in, check_out)
    subtotal = nights * price_per_night
    service_fee = apply_rate(subtotal)
    return PriceBreakdown(
        nightly_rate=price_per_night,
        nights=nights,
        subtotal=subtotal,
        service_fee_rate=SERVICE_FEE_RATE,
        service_fee=service_fee,
        total=subtotal + service_fee,
    )


def compute_host_payout(total: int) -> HostPayout:
    """Split a guest total into platform commission and host payout.

    Commission is taken from ``total``, not ``subtotal``.
    """
    commission = apply_rate(total)
    return HostPayout(total=total, commission=commission, payout=total - commission)
