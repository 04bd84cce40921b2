"""
Menu Catalog

``MenuCatalog`` is the read-only lookup the order workflow uses for current
price and availability. ``build_menu_service`` wires catalog CRUD on top of
the generic service with menu-specific validation.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.models import MenuItem
from restaurant_ops.repositories.menu import MenuItemRepository
from restaurant_ops.schemas import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from restaurant_ops.services.base import GenericService, ServiceHooks

logger = logging.getLogger(__name__)


class MenuCatalog:
    """Current price and availability of catalog items."""

    def __init__(self, repository: MenuItemRepository):
        self.repository = repository

    async def get_menu_item(self, menu_item_id: int) -> Optional[MenuItem]:
        return await self.repository.get_by_id(menu_item_id)


def _check_fields(name: Optional[str], price: Optional[Decimal]) -> Optional[ServiceResult]:
    errors = []
    if name is not None and not name.strip():
        errors.append("Name must not be blank")
    if price is not None and price <= 0:
        errors.append("Price must be greater than zero")
    if errors:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid menu item", errors=errors)
    return None


def _to_entity(payload: MenuItemCreate) -> MenuItem:
    return MenuItem(
        name=payload.name.strip(),
        description=payload.description,
        price=payload.price,
        category=payload.category,
        status=payload.status,
    )


def _apply_update(item: MenuItem, payload: MenuItemUpdate) -> None:
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(item, field, value.strip() if field == "name" else value)


def menu_hooks(repository: MenuItemRepository) -> ServiceHooks[MenuItem, MenuItemResponse]:
    async def validate_create(payload: MenuItemCreate):
        return _check_fields(payload.name, payload.price)

    async def validate_update(item_id: int, payload: MenuItemUpdate, item: MenuItem):
        return _check_fields(payload.name, payload.price)

    async def validate_delete(item_id: int, item: MenuItem):
        # Order history keeps pointing at the item
        if await repository.is_referenced(item_id):
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE,
                f"MenuItem with ID {item_id} is referenced by existing orders and cannot be deleted",
            )
        return None

    return ServiceHooks(
        to_dto=MenuItemResponse.model_validate,
        to_entity=_to_entity,
        apply_update=_apply_update,
        validate_create=validate_create,
        validate_update=validate_update,
        validate_delete=validate_delete,
    )


def build_menu_service(session: AsyncSession) -> GenericService[MenuItem, MenuItemResponse]:
    repository = MenuItemRepository(session)
    return GenericService(repository, menu_hooks(repository), "MenuItem")
