"""
Seed Script

Creates the schema, demo accounts, dining tables and a small menu, then
prints a bearer token per account for use with simulate.py and verify.py.
Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from restaurant_ops.auth import create_access_token
from restaurant_ops.core.security import hash_password
from restaurant_ops.database import async_session_maker, engine, init_db
from restaurant_ops.models import MenuItem, MenuItemStatus, RestaurantTable, StaffProfile, User, UserRole

DEMO_PASSWORD = "password123"

USERS = [
    {"full_name": "Alice Admin", "email": "admin@restaurant.local", "role": UserRole.ADMIN},
    {"full_name": "Sam Staff", "email": "staff@restaurant.local", "role": UserRole.STAFF},
    {"full_name": "Carl Customer", "email": "carl@example.com", "role": UserRole.CUSTOMER},
    {"full_name": "Dana Customer", "email": "dana@example.com", "role": UserRole.CUSTOMER},
]

MENU_ITEMS = [
    {"name": "Pizza Margherita", "price": "14.99", "category": "Pizza"},
    {"name": "Pepperoni Pizza", "price": "16.99", "category": "Pizza"},
    {"name": "Caesar Salad", "price": "8.99", "category": "Salad"},
    {"name": "Garlic Bread", "price": "5.99", "category": "Sides"},
    {"name": "Pasta Carbonara", "price": "13.99", "category": "Pasta"},
    {"name": "Tiramisu", "price": "7.99", "category": "Dessert"},
    {"name": "Coke", "price": "2.99", "category": "Drinks"},
    {"name": "Truffle Risotto", "price": "24.50", "category": "Pasta", "status": MenuItemStatus.OUT_OF_STOCK},
]


# Numbers 1-20; on a fresh database the ids match the numbers
TABLES = [
    {
        "table_number": n,
        "seats": 2 if n <= 6 else 4 if n <= 16 else 6,
        "location": "Terrace" if n > 16 else "Main hall",
    }
    for n in range(1, 21)
]


async def seed() -> None:
    print("=" * 60)
    print("SEEDING DEMO DATA")
    print("=" * 60)

    await init_db()

    async with async_session_maker() as session:
        users = []
        for entry in USERS:
            user = await session.scalar(select(User).where(User.email == entry["email"]))
            if user is None:
                user = User(password_hash=hash_password(DEMO_PASSWORD), **entry)
                if user.role == UserRole.STAFF:
                    user.staff_profile = StaffProfile(position="Waiter")
                session.add(user)
                print(f"   + user {entry['email']} ({entry['role'].value})")
            users.append(user)

        for entry in MENU_ITEMS:
            exists = await session.scalar(select(MenuItem).where(MenuItem.name == entry["name"]))
            if exists is None:
                session.add(MenuItem(
                    name=entry["name"],
                    price=Decimal(entry["price"]),
                    category=entry["category"],
                    status=entry.get("status", MenuItemStatus.AVAILABLE),
                ))
                print(f"   + menu item {entry['name']} ({entry['price']})")

        for entry in TABLES:
            exists = await session.scalar(
                select(RestaurantTable).where(RestaurantTable.table_number == entry["table_number"])
            )
            if exists is None:
                session.add(RestaurantTable(**entry))
                print(f"   + table {entry['table_number']} ({entry['seats']} seats)")

        await session.commit()

        print("\n" + "=" * 60)
        print("BEARER TOKENS")
        print("=" * 60)
        for user in users:
            token = create_access_token(user.id, user.role, user.full_name)
            print(f"{user.role.value:<9} {user.email:<26} {token}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
