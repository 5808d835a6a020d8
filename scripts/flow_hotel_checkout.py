#!/usr/bin/env python3
"""
Hotel checkout walkthrough against a running server.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_hotel_checkout.py --hotel-id h123 --check-in 2026-04-01 --check-out 2026-04-04
    python scripts/flow_hotel_checkout.py --hotel-id h123 --check-in 2026-05-01 --check-out 2026-05-05 --keep

Flow:
    1. Clear any previous hotel flow for the session
    2. Check the guard refuses the guest page
    3. Submit search criteria
    4. Select the hotel
    5. Add the lead guest
    6. Add payment details
    7. Complete the flow
    8. Clear the flow (unless --keep)
"""

import argparse
import json
import sys
import uuid

import httpx

BASE_URL = "http://localhost:8000"
FLOWS = "/api/v1/flows/hotels"


def api_request(session_id: str, method: str, endpoint: str, data: dict | None = None, params: dict | None = None) -> dict:
    """Make an API request bound to the browsing session."""
    headers = {"X-Session-ID": session_id}
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers=headers,
        json=data,
        params=params,
        timeout=10.0,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def date_envelope(value: str) -> dict:
    """Wrap an ISO date the way the API stores it."""
    return {"kind": "date", "payload": value}


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
    parser = argparse.ArgumentParser(description="Hotel checkout flow walkthrough")
    parser.add_argument("--hotel-id", required=True, help="Hotel id as used in storefront URLs")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--adults", type=int, default=2, help="Number of adults")
    parser.add_argument("--session-id", default=None, help="Reuse a browsing session")
    parser.add_argument("--keep", action="store_true", help="Leave the completed flow in the store")
    args = parser.parse_args()

    session_id = args.session_id or uuid.uuid4().hex
    print(f"Session: {session_id}")
    flow_fields = ["progress", "next_step", "previous_step"]

    # Step 1: Start clean
    print_step(1, "Clear previous hotel flow")
    if not print_result(api_request(session_id, "DELETE", FLOWS)):
        sys.exit(1)

    # Step 2: Guard refuses the guest page
    print_step(2, "Resolve guest page before searching")
    guard_result = api_request(
        session_id, "GET", "/api/v1/routes/resolve",
        params={"path": f"/hotels/{args.hotel_id}/guests"},
    )
    if not print_result(guard_result, ["allowed", "redirect_to", "reason"]):
        sys.exit(1)

    # Step 3: Search criteria
    print_step(3, "Submit search criteria")
    criteria_result = api_request(session_id, "PATCH", FLOWS, {
        "criteria": {
            "check_in": date_envelope(args.check_in),
            "check_out": date_envelope(args.check_out),
            "adults": args.adults,
            "rooms": 1,
        },
    })
    if not print_result(criteria_result, flow_fields):
        sys.exit(1)

    # Step 4: Hotel selection
    print_step(4, "Select hotel")
    entity_result = api_request(session_id, "PATCH", FLOWS, {
        "domain_entity": {"id": args.hotel_id},
    })
    if not print_result(entity_result, flow_fields):
        sys.exit(1)

    # Step 5: Guests
    print_step(5, "Add lead guest")
    guests_result = api_request(session_id, "PATCH", FLOWS, {
        "collected_inputs": [{"first_name": "Test", "last_name": "Traveler", "email": "traveler@example.com"}],
    })
    if not print_result(guests_result, flow_fields):
        sys.exit(1)

    gate_result = api_request(session_id, "GET", f"{FLOWS}/gates/payment")
    if not print_result(gate_result, ["step", "can_enter", "first_unmet_step"]):
        sys.exit(1)

    # Step 6: Payment
    print_step(6, "Add payment details")
    payment_result = api_request(session_id, "PATCH", FLOWS, {
        "payment_details": {"method": "card", "last4": "4242"},
    })
    if not print_result(payment_result, flow_fields):
        sys.exit(1)

    # Step 7: Complete
    print_step(7, "Complete flow")
    complete_result = api_request(session_id, "POST", f"{FLOWS}/complete")
    if not print_result(complete_result, flow_fields):
        sys.exit(1)
    print(f"\nFinal step: {complete_result['data']['state']['step']}")

    if args.keep:
        print("\n" + "="*60)
        print("FLOW COMPLETE (state kept)")
        print("="*60)
        return

    # Step 8: Clear
    print_step(8, "Clear flow")
    if not print_result(api_request(session_id, "DELETE", FLOWS)):
        sys.exit(1)

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
