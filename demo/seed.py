#!/usr/bin/env python3
"""
Demo seed script — fills one tenant with a small household ledger.

Every record is created through the records API, so the seed exercises
the same foreign-key and uniqueness validation as any other client:
categories before accounts, groups before transaction categories, and
both legs of each transfer linked after they exist.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Another tenant or server:
    python demo/seed.py --tenant household-2 --base-url http://localhost:9000

Re-running against the same tenant fails with 409s: names are unique
per tenant. Use a fresh --tenant instead.
"""

import argparse
import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone

import httpx

BASE_URL = "http://localhost:8000"

ACCOUNT_CATEGORIES = [
    {"name": "Cash & Bank", "type": "Asset"},
    {"name": "Credit Cards", "type": "Liability"},
]

ACCOUNTS = [
    {"name": "Checking", "category": "Cash & Bank", "balance": 2400},
    {"name": "Savings", "category": "Cash & Bank", "balance": 9000},
    {"name": "Visa", "category": "Credit Cards", "balance": -350},
]

TRANSACTION_GROUPS = {
    "Essentials": ["Groceries", "Rent", "Utilities"],
    "Lifestyle": ["Dining", "Entertainment"],
    "Transfers": ["Internal Transfer"],
}

PURCHASES = [
    ("Groceries", "Farmers market"),
    ("Groceries", "Weekly shop"),
    ("Dining", "Coffee"),
    ("Dining", "Pizza night"),
    ("Entertainment", "Cinema"),
    ("Utilities", "Electric bill"),
]


def log(msg: str) -> None:
    print(f"  ✓ {msg}")


async def create(client: httpx.AsyncClient, entity: str, record: dict) -> dict:
    resp = await client.post(f"/records/{entity}", json=record)
    if resp.status_code >= 400:
        print(f"  ERROR creating {entity}: {resp.status_code} {resp.json().get('detail')}")
        resp.raise_for_status()
    return resp.json()


async def seed(base_url: str, tenant: str, months: int) -> None:
    print("\n========================================")
    print(f"  DEMO SEED — tenant {tenant}")
    print("========================================\n")

    async with httpx.AsyncClient(
        base_url=base_url, headers={"X-Tenant-ID": tenant, "X-User-ID": "demo-seed"}, timeout=30.0,
    ) as client:
        try:
            health = await client.get("/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {base_url}")
            print("  Start the server first: uvicorn budgeteer.main:app --reload\n")
            sys.exit(1)
        log(f"Server is up ({health.json()['storage_mode']} mode)")

        category_ids = {}
        for category in ACCOUNT_CATEGORIES:
            category_ids[category["name"]] = (await create(client, "accountcategories", category))["id"]
        log(f"{len(category_ids)} account categories")

        account_ids = {}
        for account in ACCOUNTS:
            created = await create(client, "accounts", {
                "name": account["name"],
                "balance": account["balance"],
                "categoryid": category_ids[account["category"]],
            })
            account_ids[account["name"]] = created["id"]
        log(f"{len(account_ids)} accounts")

        tx_category_ids = {}
        for group_name, categories in TRANSACTION_GROUPS.items():
            group = await create(client, "transactiongroups", {"name": group_name, "type": "Expense"})
            for name in categories:
                created = await create(client, "transactioncategories", {"name": name, "groupid": group["id"]})
                tx_category_ids[name] = created["id"]
        log(f"{len(TRANSACTION_GROUPS)} groups, {len(tx_category_ids)} transaction categories")

        now = datetime.now(timezone.utc)
        count = 0
        for month in range(months):
            for _ in range(random.randint(6, 12)):
                category, description = random.choice(PURCHASES)
                await create(client, "transactions", {
                    "description": description,
                    "amount": -round(random.uniform(4, 120), 2),
                    "type": "Expense",
                    "date": (now - timedelta(days=30 * month + random.randint(0, 27))).isoformat(),
                    "accountid": account_ids[random.choice(["Checking", "Visa"])],
                    "categoryid": tx_category_ids[category],
                })
                count += 1

            # Monthly savings transfer: create both legs, then link them
            amount = random.randint(200, 800)
            out_leg = await create(client, "transactions", {
                "description": "Monthly savings transfer",
                "amount": -amount,
                "type": "Transfer",
                "accountid": account_ids["Checking"],
                "categoryid": tx_category_ids["Internal Transfer"],
                "transferaccountid": account_ids["Savings"],
            })
            in_leg = await create(client, "transactions", {
                "description": "Monthly savings transfer",
                "amount": amount,
                "type": "Transfer",
                "accountid": account_ids["Savings"],
                "categoryid": tx_category_ids["Internal Transfer"],
                "transferaccountid": account_ids["Checking"],
                "transferid": out_leg["id"],
            })
            resp = await client.patch(f"/records/transactions/{out_leg['id']}", json={"transferid": in_leg["id"]})
            resp.raise_for_status()
            count += 2
        log(f"{count} transactions over {months} months")

        await create(client, "recurrings", {
            "name": "Rent",
            "amount": -1500,
            "sourceaccountid": account_ids["Checking"],
            "categoryid": tx_category_ids["Rent"],
            "recurrencerule": "FREQ=MONTHLY;BYMONTHDAY=1",
        })
        await create(client, "configurations", {"key": "currency", "table": "accounts", "value": "USD"})
        log("Rent recurring and currency configuration")

        preview = await client.get(f"/records/accounts/{account_ids['Checking']}/delete-preview")
        log(f"Deleting Checking would cascade to {len(preview.json()) - 1} records")

    print("\nDone.\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a Budgeteer tenant with demo data")
    parser.add_argument("--base-url", default=BASE_URL, help=f"API base URL (default {BASE_URL})")
    parser.add_argument("--tenant", default="demo-household", help="Tenant id to seed")
    parser.add_argument("--months", type=int, default=2, help="Months of transaction history")
    args = parser.parse_args()
    asyncio.run(seed(args.base_url, args.tenant, args.months))


if __name__ == "__main__":
    main()
