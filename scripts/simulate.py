"""
Concurrency Simulation Script

Fires concurrent orders at the API, records a payment against each one
and confirms it by transaction code, to exercise the order and payment
workflows under load.
Run from project root (after scripts/seed.py):

    python scripts/simulate.py --token <customer-or-staff-token> --orders 50
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from typing import Any, Optional

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
TABLES = list(range(1, 21))
PAYMENT_METHODS = ["Cash", "CreditCard", "EWallet", "BankTransfer"]


async def fetch_available_items(client: httpx.AsyncClient) -> list[dict]:
    """Available menu items from the public catalog."""
    response = await client.get(f"{API_BASE_URL}/menu-items")
    response.raise_for_status()
    return [i for i in response.json()["data"] if i["status"] == "Available"]


def generate_random_items(menu: list[dict]) -> list[dict]:
    """Random order lines drawn from the menu."""
    chosen = random.sample(menu, k=min(len(menu), random.randint(1, 4)))
    return [{"menu_item_id": item["id"], "quantity": random.randint(1, 3)} for item in chosen]


# =============================================================================
# SINGLE ORDER FLOW
# =============================================================================

async def place_and_settle(
    client: httpx.AsyncClient,
    menu: list[dict],
    order_num: int,
    settle: bool,
) -> dict[str, Any]:
    """Place one order, then optionally pay and verify it."""
    start_time = time.time()
    payload = {"table_id": random.choice(TABLES), "items": generate_random_items(menu)}

    try:
        response = await client.post(f"{API_BASE_URL}/orders", json=payload, timeout=30.0)
        if response.status_code != 201:
            return {
                "order_num": order_num,
                "success": False,
                "error": response.text[:100],
                "time": round(time.time() - start_time, 3),
            }
        order = response.json()["data"]
        result = {
            "order_num": order_num,
            "success": True,
            "order_id": order["id"],
            "total": float(order["total_amount"]),
            "verified": None,
        }

        if settle:
            result["verified"] = await settle_order(client, order)

        result["time"] = round(time.time() - start_time, 3)
        return result
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def settle_order(client: httpx.AsyncClient, order: dict) -> Optional[bool]:
    """Record a single full payment and confirm it through the verify webhook."""
    code = f"TXN-{uuid.uuid4().hex[:12].upper()}"
    method = random.choice(PAYMENT_METHODS)
    response = await client.post(
        f"{API_BASE_URL}/payments",
        json={
            "order_id": order["id"],
            "method": method,
            "amount": order["total_amount"],
            "details": [{"method": method, "amount": order["total_amount"], "transaction_code": code}],
        },
        timeout=30.0,
    )
    if response.status_code != 201:
        return None
    payment_id = response.json()["data"]["id"]

    response = await client.post(
        f"{API_BASE_URL}/payments/{payment_id}/verify",
        json={"transaction_code": code},
        timeout=30.0,
    )
    return response.status_code == 200 and response.json()["data"] is True


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(token: str, num_orders: int = TOTAL_ORDERS, settle: bool = True) -> dict[str, Any]:
    """
    Run the concurrency simulation.

    Args:
        token: Bearer token of the account placing orders
        num_orders: Number of orders to simulate
        settle: Also pay and verify every placed order
    """
    print("=" * 70)
    print("CONCURRENCY SIMULATION")
    print("=" * 70)
    print(f"Total Orders: {num_orders}")
    print(f"Target: {API_BASE_URL}")
    print(f"Settle payments: {settle}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    headers = {"Authorization": f"Bearer {token}"}
    start_time = time.time()

    async with httpx.AsyncClient(headers=headers) as client:
        menu = await fetch_available_items(client)
        if not menu:
            print("\nNo available menu items. Run scripts/seed.py first.")
            return {"total": num_orders, "successful": 0, "failed": num_orders}

        tasks = [place_and_settle(client, menu, i + 1, settle) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    verified = [r for r in successful if r.get("verified")]

    print("\n" + "=" * 70)
    print("SIMULATION RESULTS")
    print("=" * 70)
    print(f"\nSuccessful Orders: {len(successful)}/{num_orders}")
    print(f"Failed Orders: {len(failed)}/{num_orders}")
    if settle:
        print(f"Verified Payments: {len(verified)}/{len(successful)}")
    print(f"Total Time: {total_time}s")

    if successful:
        times = [r["time"] for r in successful]
        print(f"\nPerformance Metrics:")
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s")
        print(f"   Slowest: {max(times)}s")
        print(f"   Order Value: ${sum(r['total'] for r in successful):.2f}")

    if failed:
        print(f"\nFailed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("Next: python scripts/verify.py --token <admin-token>")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency Simulation Script")
    parser.add_argument("--token", required=True, help="Bearer token used to place orders")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--no-payments", action="store_true", help="Only place orders")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.base_url
    asyncio.run(run_simulation(args.token, num_orders=args.orders, settle=not args.no_payments))
