from datetime import datetime

import pytest

from restaurant_ops.core.errors import ErrorKind
from restaurant_ops.core.security import verify_password
from restaurant_ops.models import TableStatus
from restaurant_ops.repositories import UserRepository
from restaurant_ops.schemas import (
    OrderItemRequest,
    PageParams,
    StaffCreate,
    StaffUpdate,
    TableCreate,
    TableUpdate,
)
from restaurant_ops.services import OrderService, StaffService, TableService

pytestmark = pytest.mark.anyio


def hire(email="wendy@test.local", position="Chef"):
    return StaffCreate(
        full_name="Wendy Cook",
        email=email,
        password="kitchen-secret",
        position=position,
    )


# =============================================================================
# TABLES
# =============================================================================

async def test_create_table_validates_fields_and_unique_number(session, seeded):
    service = TableService(session)

    created = await service.create_table(TableCreate(table_number=12, seats=4, location="Terrace"))
    assert created.success is True
    assert created.data.status == TableStatus.AVAILABLE

    crowded = await service.create_table(TableCreate(table_number=13, seats=21))
    assert crowded.error == ErrorKind.VALIDATION
    assert crowded.errors == ["Seats must be between 1 and 20"]

    negative = await service.create_table(TableCreate(table_number=0, seats=0))
    assert len(negative.errors) == 2

    duplicate = await service.create_table(TableCreate(table_number=12, seats=2))
    assert duplicate.error == ErrorKind.VALIDATION
    assert duplicate.message == "Table number 12 already exists"


async def test_update_table_rejects_taken_number(session, seeded):
    service = TableService(session)

    taken = await service.update_table(seeded.table_ids[0], TableUpdate(table_number=2))
    assert taken.message == "Table number 2 already exists"

    same = await service.update_table(seeded.table_ids[0], TableUpdate(table_number=1, seats=3))
    assert same.success is True
    assert same.data.seats == 3

    missing = await service.update_table(404, TableUpdate(seats=2))
    assert missing.error == ErrorKind.NOT_FOUND


async def test_reservation_workflow(session, seeded):
    service = TableService(session)
    table_id = seeded.table_ids[2]

    reserved = await service.reserve_table(table_id)
    assert reserved.data is True
    assert reserved.message == "Table 3 is now Reserved"

    again = await service.reserve_table(table_id)
    assert again.error == ErrorKind.BUSINESS_RULE
    assert again.data is False
    assert again.message == "Table 3 is Reserved, expected Available"

    released = await service.cancel_reservation(table_id)
    assert released.success is True
    assert (await service.get_table(table_id)).data.status == TableStatus.AVAILABLE

    not_reserved = await service.cancel_reservation(table_id)
    assert not_reserved.error == ErrorKind.BUSINESS_RULE

    missing = await service.reserve_table(404)
    assert missing.error == ErrorKind.NOT_FOUND
    assert missing.data is False


async def test_available_tables_filtered_by_seats(session, seeded):
    service = TableService(session)
    await service.update_table(seeded.table_ids[5], TableUpdate(status=TableStatus.OCCUPIED))

    everything = (await service.get_available()).data
    assert len(everything) == 7

    large = (await service.get_available(seats=5)).data
    assert [t.table_number for t in large] == [5, 7, 8]

    assert (await service.get_available(seats=0)).error == ErrorKind.VALIDATION


async def test_table_referenced_by_order_cannot_be_deleted(session, seeded):
    service = TableService(session)
    await OrderService(session).create_order(
        seeded.carl_id, seeded.table_ids[4], [OrderItemRequest(menu_item_id=seeded.pizza_id, quantity=1)]
    )

    refused = await service.delete_table(seeded.table_ids[4])
    assert refused.error == ErrorKind.BUSINESS_RULE

    assert (await service.delete_table(seeded.table_ids[7])).data is True
    assert len((await service.get_all()).data) == 7


async def test_table_search_and_pagination(session, seeded):
    service = TableService(session)
    await service.create_table(TableCreate(table_number=40, seats=2, location="Terrace"))

    found = (await service.search("terrace")).data
    assert [t.table_number for t in found] == [40]

    page = (await service.get_paginated(PageParams(page_size=3))).data
    assert page.total_records == 9
    assert page.total_pages == 3


# =============================================================================
# STAFF
# =============================================================================

async def test_hire_staff_creates_profile_and_hashes_password(session, seeded):
    service = StaffService(session)

    result = await service.create_staff(hire(email="Wendy@Test.Local"))

    assert result.success is True
    assert result.data.email == "wendy@test.local"
    assert result.data.position == "Chef"
    assert isinstance(result.data.hire_date, datetime)

    account = await UserRepository(session).get_by_id(result.data.id)
    assert verify_password("kitchen-secret", account.password_hash)


async def test_staff_email_is_unique_across_roles(session, seeded):
    service = StaffService(session)

    result = await service.create_staff(hire(email="carl@test.local"))

    assert result.error == ErrorKind.VALIDATION
    assert result.message == "Email carl@test.local is already registered"


async def test_update_staff_profile_and_email(session, seeded):
    service = StaffService(session)

    promoted = await service.update_staff(seeded.staff_id, StaffUpdate(position="Manager", phone="555-0101"))
    assert promoted.data.position == "Manager"
    assert promoted.data.phone == "555-0101"

    clash = await service.update_staff(seeded.staff_id, StaffUpdate(email="dana@test.local"))
    assert clash.error == ErrorKind.VALIDATION

    unchanged_email = await service.update_staff(seeded.staff_id, StaffUpdate(email="STAFF@test.local"))
    assert unchanged_email.success is True


async def test_staff_reads_exclude_other_roles(session, seeded):
    service = StaffService(session)

    assert (await service.get_staff(seeded.carl_id)).error == ErrorKind.NOT_FOUND
    assert (await service.update_staff(seeded.admin_id, StaffUpdate(position="Chef"))).error == ErrorKind.NOT_FOUND
    assert (await service.delete_staff(seeded.dana_id)).error == ErrorKind.NOT_FOUND
    assert [s.id for s in (await service.get_all()).data] == [seeded.staff_id]


async def test_staff_with_orders_cannot_be_deleted(session, seeded):
    service = StaffService(session)
    await OrderService(session).create_order(
        seeded.staff_id, None, [OrderItemRequest(menu_item_id=seeded.bread_id, quantity=1)]
    )

    refused = await service.delete_staff(seeded.staff_id)
    assert refused.error == ErrorKind.BUSINESS_RULE

    hired = (await service.create_staff(hire())).data
    assert (await service.delete_staff(hired.id)).data is True
    assert await UserRepository(session).exists(hired.id) is False


# =============================================================================
# ROUTES
# =============================================================================

async def test_table_routes_are_staff_only_and_writes_admin_only(client, headers, seeded):
    assert (await client.get("/tables", headers=headers.carl)).status_code == 403

    listing = await client.get("/tables", headers=headers.staff)
    assert listing.status_code == 200
    assert len(listing.json()["data"]) == 8

    payload = {"table_number": 30, "seats": 4, "location": "Bar"}
    assert (await client.post("/tables", json=payload, headers=headers.staff)).status_code == 403
    created = await client.post("/tables", json=payload, headers=headers.admin)
    assert created.status_code == 201

    table_id = created.json()["data"]["id"]
    assert (await client.post(f"/tables/{table_id}/reserve", headers=headers.staff)).status_code == 200
    assert (await client.post(f"/tables/{table_id}/reserve", headers=headers.staff)).status_code == 400
    assert (await client.post("/tables/404/reserve", headers=headers.staff)).status_code == 404

    available = await client.get("/tables/available", params={"seats": 6}, headers=headers.staff)
    assert [t["table_number"] for t in available.json()["data"]] == [5, 6, 7, 8]


async def test_staff_routes_are_admin_only(client, headers, seeded):
    assert (await client.get("/staff", headers=headers.staff)).status_code == 403

    payload = {
        "full_name": "Pat Host",
        "email": "pat@test.local",
        "password": "front-of-house",
        "position": "Host",
    }
    created = await client.post("/staff", json=payload, headers=headers.admin)
    assert created.status_code == 201
    body = created.json()["data"]
    assert body["position"] == "Host"
    assert "password" not in body and "password_hash" not in body

    duplicate = await client.post("/staff", json=payload, headers=headers.admin)
    assert duplicate.status_code == 400

    listing = await client.get("/staff", headers=headers.admin)
    assert {s["email"] for s in listing.json()["data"]} == {"staff@test.local", "pat@test.local"}
