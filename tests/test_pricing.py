"""Price calculation."""

from datetime import date
from decimal import Decimal

import pytest

from app.domain.pricing import (
    SERVICE_FEE_RATE,
    apply_rate,
    compute_host_payout,
    compute_price,
    count_nights,
    round_half_up,
)


def test_three_nights_at_25000():
    price = compute_price(25000, date(2030, 1, 10), date(2030, 1, 13))

    assert price.nights == 3
    assert price.subtotal == 75000
    assert price.service_fee == 10500
    assert price.total == 85500
    assert price.service_fee_rate == Decimal("0.14")


@pytest.mark.parametrize(
    "nightly, check_in, check_out",
    [
        (1000, date(2030, 1, 1), date(2030, 1, 2)),
        (18333, date(2030, 2, 27), date(2030, 3, 2)),
        (9999999, date(2031, 12, 30), date(2032, 1, 6)),
    ],
)
def test_total_is_subtotal_plus_rounded_fee(nightly, check_in, check_out):
    price = compute_price(nightly, check_in, check_out)

    assert price.nights == (check_out - check_in).days
    assert price.subtotal == price.nights * nightly
    assert price.service_fee == round_half_up(Decimal(price.subtotal) * Decimal("0.14"))
    assert price.total == price.subtotal + price.service_fee


def test_nights_across_month_and_leap_day():
    assert count_nights(date(2028, 2, 28), date(2028, 3, 1)) == 2


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(Decimal("0.5")) == 1
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.49")) == 2


def test_fee_rounding_on_odd_subtotal():
    # 1025 * 0.14 = 143.5
    assert apply_rate(1025) == 144


def test_host_payout_takes_commission_from_guest_total():
    payout = compute_host_payout(85500)

    assert payout.commission == 11970
    assert payout.payout == 73530
    assert payout.commission == apply_rate(85500, SERVICE_FEE_RATE)


def test_host_payout_of_zero():
    payout = compute_host_payout(0)
    assert (payout.commission, payout.payout) == (0, 0)
