import pytest

from restaurant_ops.core.errors import ErrorKind
from restaurant_ops.core.security import verify_password
from restaurant_ops.repositories import UserRepository
from restaurant_ops.routers.customers import get_guest_policy
from restaurant_ops.main import app
from restaurant_ops.schemas import CustomerCreate, OrderItemRequest, PageParams
from restaurant_ops.services import CustomerService, GuestAccountPolicy, OrderService
from restaurant_ops.services.menu import build_menu_service

pytestmark = pytest.mark.anyio


def fixed_policy(token="0001"):
    return GuestAccountPolicy(
        default_password="walk-in-pass",
        email_template="guest_{token}@walkin.test",
        token_factory=lambda: token,
    )


# =============================================================================
# MENU
# =============================================================================

async def test_menu_item_referenced_by_order_cannot_be_deleted(session, seeded):
    await OrderService(session).create_order(
        seeded.carl_id, 1, [OrderItemRequest(menu_item_id=seeded.pizza_id, quantity=1)]
    )
    service = build_menu_service(session)

    refused = await service.delete(seeded.pizza_id)
    assert refused.error == ErrorKind.BUSINESS_RULE

    removed = await service.delete(seeded.risotto_id)
    assert removed.data is True
    assert (await service.get_by_id(seeded.risotto_id)).error == ErrorKind.NOT_FOUND


async def test_menu_routes(client, headers, seeded):
    listing = await client.get("/menu-items")
    assert listing.status_code == 200
    assert len(listing.json()["data"]) == 3

    search = await client.get("/menu-items/search", params={"keyword": "bread"})
    assert [i["name"] for i in search.json()["data"]] == ["Garlic Bread"]

    new_item = {"name": "Lemonade", "price": "3.50", "category": "Drinks"}
    assert (await client.post("/menu-items", json=new_item, headers=headers.staff)).status_code == 403

    created = await client.post("/menu-items", json=new_item, headers=headers.admin)
    assert created.status_code == 201
    item_id = created.json()["data"]["id"]

    bad_price = await client.put(f"/menu-items/{item_id}", json={"price": "-2.00"}, headers=headers.admin)
    assert bad_price.status_code == 400

    sold_out = await client.put(f"/menu-items/{item_id}", json={"status": "OutOfStock"}, headers=headers.admin)
    assert sold_out.json()["data"]["status"] == "OutOfStock"

    assert (await client.get("/menu-items/999")).status_code == 404
    assert (await client.delete(f"/menu-items/{item_id}", headers=headers.admin)).status_code == 200


# =============================================================================
# CUSTOMERS
# =============================================================================

async def test_walk_in_customer_gets_placeholder_account(session, seeded):
    service = CustomerService(session, fixed_policy())

    result = await service.create_customer(CustomerCreate(full_name="Table Four Guest"))

    assert result.success is True
    assert result.data.email == ""
    stored = await UserRepository(session).get_by_id(result.data.id)
    assert stored.email == "guest_0001@walkin.test"
    assert verify_password("walk-in-pass", stored.password_hash)


async def test_registered_customer_keeps_email_and_duplicates_are_rejected(session, seeded):
    service = CustomerService(session, fixed_policy())

    created = await service.create_customer(CustomerCreate(full_name="Erin", email="Erin@Example.com"))
    assert created.data.email == "erin@example.com"

    duplicate = await service.create_customer(CustomerCreate(full_name="Other Erin", email="erin@example.com"))
    assert duplicate.error == ErrorKind.VALIDATION


async def test_email_taken_between_check_and_insert_is_a_validation_failure(session, seeded, monkeypatch):
    service = CustomerService(session, fixed_policy())

    async def lost_race(email):
        return False

    monkeypatch.setattr(service.repository, "email_exists", lost_race)

    result = await service.create_customer(CustomerCreate(full_name="Carl Again", email="carl@test.local"))

    assert result.success is False
    assert result.error == ErrorKind.VALIDATION
    assert result.message == "Email carl@test.local is already registered"
    # Session rolled back and still usable
    assert (await service.get_paginated(PageParams())).data.total_records == 2


async def test_customer_reads_exclude_staff_accounts(session, seeded):
    service = CustomerService(session, fixed_policy())

    assert (await service.get_customer(seeded.admin_id)).error == ErrorKind.NOT_FOUND
    assert (await service.get_customer(seeded.carl_id)).data.full_name == "Carl Customer"

    page = (await service.get_paginated(PageParams())).data
    assert page.total_records == 2
    assert len((await service.search("test.local")).data) == 2


def test_placeholder_detection():
    policy = fixed_policy()
    assert policy.is_placeholder("guest_abc@walkin.test")
    assert not policy.is_placeholder("guest_@walkin.test")
    assert not policy.is_placeholder("someone@walkin.test")
    assert not policy.is_placeholder(None)


async def test_customer_routes_use_injected_policy(client, headers, seeded):
    app.dependency_overrides[get_guest_policy] = lambda: fixed_policy("route")

    assert (await client.post("/customers", json={"full_name": "Guest"}, headers=headers.carl)).status_code == 403

    resp = await client.post("/customers", json={"full_name": "Guest", "email": ""}, headers=headers.staff)
    assert resp.status_code == 201
    assert resp.json()["data"]["email"] == ""

    again = await client.post("/customers", json={"full_name": "Guest 2"}, headers=headers.staff)
    # Same fixed token -> same placeholder email -> unique constraint
    assert again.status_code == 500

    dup = await client.post(
        "/customers", json={"full_name": "Carl Again", "email": "carl@test.local"}, headers=headers.staff
    )
    assert dup.status_code == 400

    listing = await client.get("/customers/paginated", headers=headers.admin)
    assert listing.json()["data"]["total_records"] == 3
