from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.repositories import MenuItemRepository
from restaurant_ops.schemas import MenuItemCreate, MenuItemResponse, MenuItemUpdate, PageParams
from restaurant_ops.services.base import GenericService, ServiceHooks
from restaurant_ops.services.menu import build_menu_service

pytestmark = pytest.mark.anyio


class BrokenRepository:
    """Every call fails the way a lost database connection does."""

    entity_name = "Widget"

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    get_by_id = get_all = get_paginated = search = count = _fail

    async def exists(self, entity_id):
        self._fail()


async def test_infrastructure_fault_becomes_failed_result():
    service = GenericService(BrokenRepository(), ServiceHooks(to_dto=lambda e: e), "Widget")

    result = await service.get_by_id(1)

    assert result.success is False
    assert result.error == ErrorKind.INFRASTRUCTURE
    assert result.message == "An error occurred while retrieving Widget"
    assert "connection refused" in result.errors[0]


async def test_every_operation_is_guarded():
    service = GenericService(BrokenRepository(), ServiceHooks(to_dto=lambda e: e), "Widget")

    for call in (
        service.get_all(),
        service.count(),
        service.exists(3),
        service.search("x"),
        service.get_paginated(PageParams()),
        service.update(1, object()),
        service.delete(1),
    ):
        result = await call
        assert result.error == ErrorKind.INFRASTRUCTURE


async def test_envelope_for_found_and_missing(session, seeded):
    service = build_menu_service(session)

    found = await service.get_by_id(seeded.pizza_id)
    assert found.success is True
    assert isinstance(found.data, MenuItemResponse)
    assert found.data.price == Decimal("10.00")

    missing = await service.get_by_id(404)
    assert missing.success is False
    assert missing.error == ErrorKind.NOT_FOUND
    assert missing.message == "MenuItem with ID 404 not found"


async def test_blank_keyword_is_validation_failure_not_delegated(session, seeded):
    service = build_menu_service(session)

    result = await service.search("  ")
    assert result.error == ErrorKind.VALIDATION

    page = await service.search_paginated(None, PageParams())
    assert page.error == ErrorKind.VALIDATION


async def test_paginated_envelope_metadata(session, seeded):
    service = build_menu_service(session)

    result = await service.get_paginated(PageParams(page_number=2, page_size=2))
    page = result.data

    assert page.total_records == 3
    assert page.total_pages == 2
    assert page.has_previous is True
    assert page.has_next is False
    assert len(page.items) == 1


async def test_default_hooks_always_pass(session, seeded):
    repo = MenuItemRepository(session)
    service = GenericService(
        repo,
        ServiceHooks(
            to_dto=MenuItemResponse.model_validate,
            to_entity=lambda p: repo.model(name=p.name, price=p.price),
        ),
    )

    result = await service.create(MenuItemCreate(name="Soup", price=Decimal("4.00")))
    assert result.success is True
    assert service.entity_name == "MenuItem"


async def test_custom_hook_refusal_is_returned_untouched(session, seeded):
    async def refuse(*args):
        return ServiceResult.fail(ErrorKind.BUSINESS_RULE, "Menu is frozen")

    service = GenericService(
        MenuItemRepository(session),
        ServiceHooks(to_dto=MenuItemResponse.model_validate, apply_update=lambda e, p: None, validate_update=refuse),
    )

    result = await service.update(seeded.pizza_id, MenuItemUpdate(price=Decimal("1.00")))
    assert result.error == ErrorKind.BUSINESS_RULE
    assert result.message == "Menu is frozen"


async def test_menu_validation_hooks(session, seeded):
    service = build_menu_service(session)

    bad_price = await service.create(MenuItemCreate(name="Free Lunch", price=Decimal("0")))
    assert bad_price.error == ErrorKind.VALIDATION
    assert "Price must be greater than zero" in bad_price.errors

    blank_name = await service.update(seeded.pizza_id, MenuItemUpdate(name="   "))
    assert blank_name.error == ErrorKind.VALIDATION

    renamed = await service.update(seeded.pizza_id, MenuItemUpdate(name="Pizza Napoletana"))
    assert renamed.success is True
    assert renamed.data.name == "Pizza Napoletana"
    assert renamed.data.price == Decimal("10.00")
