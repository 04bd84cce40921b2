"""
Data Integrity Verification Script

Checks persisted orders and payments over the API:
- every order total equals the sum of price * quantity of its details
- no order detail has a quantity below 1
- reported revenue equals the sum of completed payments

Run from project root: python scripts/verify.py --token <admin-token>
"""

import argparse
import sys
from datetime import datetime
from decimal import Decimal

import httpx

API_BASE_URL = "http://localhost:8001"


def verify(token: str, base_url: str = API_BASE_URL) -> bool:
    """Run every integrity check; returns True when all pass."""

    print("=" * 60)
    print("DATA INTEGRITY VERIFICATION REPORT")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Target: {base_url}")
    print("=" * 60)

    headers = {"Authorization": f"Bearer {token}"}
    with httpx.Client(base_url=base_url, headers=headers, timeout=30.0) as client:
        try:
            orders = client.get("/orders").raise_for_status().json()["data"]
            payments = client.get("/payments").raise_for_status().json()["data"]
            revenue = Decimal(client.get("/payments/revenue/total").raise_for_status().json()["data"])
        except httpx.HTTPError as e:
            print(f"\nCould not load data: {e}")
            return False

    print(f"\nSTATISTICS:")
    print(f"   Total Orders: {len(orders)}")
    print(f"   Total Payments: {len(payments)}")

    ok = True

    mismatched = []
    bad_quantities = []
    for order in orders:
        expected = sum(
            (Decimal(d["price"]) * d["quantity"] for d in order["details"]),
            Decimal("0"),
        ).quantize(Decimal("0.01"))
        if Decimal(order["total_amount"]) != expected:
            mismatched.append((order["id"], order["total_amount"], expected))
        bad_quantities.extend(order["id"] for d in order["details"] if d["quantity"] < 1)

    if mismatched:
        ok = False
        print(f"\nOrder totals out of sync: {len(mismatched)}")
        for order_id, stored, expected in mismatched[:10]:
            print(f"   Order #{order_id}: stored {stored}, expected {expected}")
    else:
        print(f"\nAll order totals match their details")

    if bad_quantities:
        ok = False
        print(f"\nOrders with quantity < 1: {sorted(set(bad_quantities))}")
    else:
        print(f"All detail quantities valid")

    completed = sum(
        (Decimal(p["amount"]) for p in payments if p["status"] == "Completed"),
        Decimal("0"),
    ).quantize(Decimal("0.01"))
    if completed != revenue:
        ok = False
        print(f"\nRevenue mismatch: reported {revenue}, completed payments sum to {completed}")
    else:
        print(f"Revenue matches completed payments: ${revenue}")

    print("\n" + "=" * 60)
    print("VERIFICATION PASSED" if ok else "VERIFICATION FAILED")
    print("=" * 60)
    return ok


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Data Integrity Verification")
    parser.add_argument("--token", required=True, help="Admin bearer token")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    sys.exit(0 if verify(args.token, args.base_url) else 1)
