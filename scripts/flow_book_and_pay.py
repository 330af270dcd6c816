#!/usr/bin/env python3
"""
Booking and checkout flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Session tokens come from the identity provider (copy them from the web app
or mint them from its dashboard) and are read from the environment:

    GUEST_TOKEN=... HOST_TOKEN=... python scripts/flow_book_and_pay.py \
        --listing-id <UUID> --check-in 2026-12-01 --check-out 2026-12-04

Flow:
    1. Quote the stay
    2. Create booking (guest)
    3. Open checkout session (guest)
    4. Optionally confirm the booking without payment (host)
"""

import argparse
import json
import os
import sys

import httpx

BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:8000")


def api_request(token: str | None, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make an API request, authenticated when a token is given."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers=headers,
        json=data,
        timeout=10.0,
        follow_redirects=True,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Booking and checkout flow")
    parser.add_argument("--listing-id", required=True, help="Listing UUID")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--guests", type=int, default=2, help="Number of guests")
    parser.add_argument("--host-confirm", action="store_true", help="Confirm as host instead of paying")
    args = parser.parse_args()

    guest_token = os.environ.get("GUEST_TOKEN")
    if not guest_token:
        print("ERROR: GUEST_TOKEN is not set")
        sys.exit(1)

    # Step 1: Quote
    print_step(1, "Quote the stay")
    quote_result = api_request(None, "POST", "/api/v1/bookings/quote", {
        "listing_id": args.listing_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
    })
    if not print_result(quote_result):
        sys.exit(1)

    if not quote_result["data"].get("available"):
        print("ERROR: These dates are not available")
        sys.exit(1)

    price = quote_result["data"]["price"]
    print("\nPricing Summary:")
    print(f"  Subtotal:     {price['subtotal']:,} XAF ({price['nights']} nights)")
    print(f"  Service fee:  {price['service_fee']:,} XAF")
    print(f"  Total:        {price['total']:,} XAF")

    # Step 2: Create booking
    print_step(2, "Create booking")
    booking_result = api_request(guest_token, "POST", "/api/v1/bookings", {
        "listing_id": args.listing_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
        "num_guests": args.guests,
    })
    if not print_result(booking_result, ["id", "total_price", "status", "payment_status"]):
        sys.exit(1)

    booking = booking_result["data"]
    booking_id = booking["id"]
    print(f"\nBooking created: {booking_id}")

    if args.host_confirm:
        host_token = os.environ.get("HOST_TOKEN")
        if not host_token:
            print("ERROR: HOST_TOKEN is not set")
            sys.exit(1)

        print_step(3, "Confirm booking (as host)")
        confirm_result = api_request(host_token, "PATCH", f"/api/v1/bookings/{booking_id}/status", {
            "status": "confirmed",
        })
        if not print_result(confirm_result, ["id", "status", "payment_status", "confirmed_at"]):
            sys.exit(1)
        print("\nBooking CONFIRMED")
        return

    # Step 3: Checkout
    print_step(3, "Open checkout session")
    listing_title = (booking.get("listing") or {}).get("title") or "Stay"
    checkout_result = api_request(guest_token, "POST", "/api/v1/payments/checkout", {
        "booking_id": booking_id,
        "display_name": listing_title,
        "total_amount": booking["total_price"],
    })
    if not print_result(checkout_result):
        sys.exit(1)

    print("\n" + "="*60)
    print("Open this URL to pay; the webhook confirms the booking:")
    print(checkout_result["data"]["url"])
    print("="*60)


if __name__ == "__main__":
    main()
