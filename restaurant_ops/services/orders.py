"""
Order Workflow Engine

Creates orders from requested lines, snapshots current menu prices into
the order details and keeps ``total_amount`` equal to the sum of
price * quantity. Status workflow:

    Pending -> InProgress -> Completed
    Pending/InProgress -> Cancelled

Completed and Cancelled are terminal. Only Pending orders may have their
items replaced or be cancelled; the operator status update accepts any
move away from a non-terminal status.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.models import MenuItemStatus, Order, OrderDetail, OrderStatus
from restaurant_ops.repositories.menu import MenuItemRepository
from restaurant_ops.repositories.orders import OrderRepository
from restaurant_ops.repositories.tables import TableRepository
from restaurant_ops.repositories.users import UserRepository
from restaurant_ops.schemas import OrderItemRequest, OrderResponse, Page, PageParams
from restaurant_ops.services.access import UNRESTRICTED, AccessScope, can_see
from restaurant_ops.services.base import GenericService, ServiceHooks, infrastructure_guard
from restaurant_ops.services.menu import MenuCatalog

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def order_total(details: Sequence[OrderDetail]) -> Decimal:
    """Sum of price * quantity over the given details."""
    total = sum((Decimal(str(d.price)) * d.quantity for d in details), Decimal("0"))
    return total.quantize(CENT)


class OrderService:
    """Order lifecycle: placement, item replacement, cancellation and status moves."""

    entity_name = "Order"

    def __init__(self, session: AsyncSession, catalog: Optional[MenuCatalog] = None):
        self.repository = OrderRepository(session)
        self.users = UserRepository(session)
        self.tables = TableRepository(session)
        self.catalog = catalog or MenuCatalog(MenuItemRepository(session))
        self.crud = GenericService(
            self.repository,
            ServiceHooks(to_dto=OrderResponse.model_validate),
            self.entity_name,
        )

    # =========================================================================
    # LINE ITEMS
    # =========================================================================

    async def _build_details(self, items: Sequence[OrderItemRequest]) -> ServiceResult[List[OrderDetail]]:
        """
        Validate every requested line and snapshot its current price.

        Nothing is persisted here; the first bad line aborts the whole set.
        """
        if not items:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Order must contain at least one item")

        details = []
        for line in items:
            if line.quantity < 1:
                return ServiceResult.fail(
                    ErrorKind.VALIDATION,
                    f"Quantity for MenuItem with ID {line.menu_item_id} must be at least 1",
                )
            item = await self.catalog.get_menu_item(line.menu_item_id)
            if item is None:
                return ServiceResult.not_found("MenuItem", line.menu_item_id)
            if item.status != MenuItemStatus.AVAILABLE:
                return ServiceResult.fail(
                    ErrorKind.BUSINESS_RULE,
                    f"MenuItem '{item.name}' (ID {item.id}) is not available",
                )
            details.append(
                OrderDetail(
                    menu_item_id=item.id,
                    menu_item=item,
                    quantity=line.quantity,
                    price=item.price,
                )
            )
        return ServiceResult.ok(details)

    async def _visible_order(self, order_id: int, scope: AccessScope) -> Optional[Order]:
        order = await self.repository.get_by_id(order_id)
        if order is None or not can_see(scope, order.user_id):
            return None
        return order

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    @infrastructure_guard("creating")
    async def create_order(
        self,
        user_id: Optional[int],
        table_id: Optional[int],
        items: Sequence[OrderItemRequest],
    ) -> ServiceResult[OrderResponse]:
        if user_id is not None and not await self.users.exists(user_id):
            return ServiceResult.not_found("User", user_id)
        if table_id is not None and not await self.tables.exists(table_id):
            return ServiceResult.not_found("Table", table_id)

        built = await self._build_details(items)
        if not built.success:
            logger.warning(f"Order creation refused: {built.message}")
            return built.cast()

        order = Order(
            user_id=user_id,
            table_id=table_id,
            status=OrderStatus.PENDING,
            total_amount=order_total(built.data),
            details=built.data,
        )
        order = await self.repository.create(order)
        logger.info(f"Order #{order.id} placed: {len(order.details)} lines, total {order.total_amount}")
        return ServiceResult.ok(OrderResponse.model_validate(order), "Order created successfully")

    @infrastructure_guard("updating")
    async def update_order(
        self,
        order_id: int,
        items: Sequence[OrderItemRequest],
        scope: AccessScope = UNRESTRICTED,
    ) -> ServiceResult[OrderResponse]:
        """Replace the whole item list of a pending order and recompute its total."""
        order = await self._visible_order(order_id, scope)
        if order is None:
            return ServiceResult.not_found(self.entity_name, order_id)
        if order.status != OrderStatus.PENDING:
            logger.warning(f"Order #{order_id} update refused: status is {order.status.value}")
            return ServiceResult.fail(ErrorKind.BUSINESS_RULE, "Only pending orders can be updated")

        built = await self._build_details(items)
        if not built.success:
            logger.warning(f"Order #{order_id} update refused: {built.message}")
            return built.cast()

        order.details = built.data
        order.total_amount = order_total(built.data)
        updated = await self.repository.update(order)
        if updated is None:
            return ServiceResult.not_found(self.entity_name, order_id)
        return ServiceResult.ok(OrderResponse.model_validate(updated), "Order updated successfully")

    @infrastructure_guard("cancelling")
    async def cancel_order(
        self,
        order_id: int,
        requesting_user_id: Optional[int],
        is_customer_request: bool,
    ) -> ServiceResult[bool]:
        """
        Cancel a pending order.

        A customer may only cancel their own order. Missing and foreign
        orders share the same caller-facing message; only ``error`` differs.
        """
        order = await self.repository.get_by_id(order_id)
        if order is None:
            return ServiceResult.fail(
                ErrorKind.NOT_FOUND, "Cannot cancel order",
                errors=[f"Order with ID {order_id} not found"], data=False,
            )
        if is_customer_request and order.user_id != requesting_user_id:
            logger.warning(f"User {requesting_user_id} tried to cancel order #{order_id} owned by {order.user_id}")
            return ServiceResult.fail(
                ErrorKind.AUTHORIZATION, "Cannot cancel order",
                errors=["Order does not belong to the requesting user"], data=False,
            )
        if order.status != OrderStatus.PENDING:
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE, "Only pending orders can be cancelled", data=False,
            )

        order.status = OrderStatus.CANCELLED
        await self.repository.update(order)
        logger.info(f"Order #{order_id} cancelled")
        return ServiceResult.ok(True, "Order cancelled successfully")

    @infrastructure_guard("updating")
    async def update_order_status(self, order_id: int, new_status: OrderStatus) -> ServiceResult[OrderResponse]:
        """Operator move to any status, refused once the order is terminal."""
        order = await self.repository.get_by_id(order_id)
        if order is None:
            return ServiceResult.not_found(self.entity_name, order_id)
        if order.status.is_terminal:
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE,
                f"Order with ID {order_id} is {order.status.value} and can no longer change status",
            )

        previous = order.status
        order.status = new_status
        updated = await self.repository.update(order)
        logger.info(f"Order #{order_id} status {previous.value} -> {new_status.value}")
        return ServiceResult.ok(OrderResponse.model_validate(updated), "Order status updated successfully")

    # =========================================================================
    # READS
    # =========================================================================

    @infrastructure_guard("retrieving")
    async def get_order_by_id(self, order_id: int, scope: AccessScope = UNRESTRICTED) -> ServiceResult[OrderResponse]:
        order = await self._visible_order(order_id, scope)
        if order is None:
            return ServiceResult.not_found(self.entity_name, order_id)
        return ServiceResult.ok(OrderResponse.model_validate(order), "Order retrieved successfully")

    @infrastructure_guard("retrieving")
    async def get_order_status(self, order_id: int, scope: AccessScope = UNRESTRICTED) -> ServiceResult[str]:
        order = await self._visible_order(order_id, scope)
        if order is None:
            return ServiceResult.not_found(self.entity_name, order_id)
        return ServiceResult.ok(order.status.value, "Order status retrieved successfully")

    async def get_all_orders(self) -> ServiceResult[List[OrderResponse]]:
        return await self.crud.get_all()

    async def get_paginated(self, params: PageParams) -> ServiceResult[Page[OrderResponse]]:
        return await self.crud.get_paginated(params)

    async def search(self, keyword: Optional[str]) -> ServiceResult[List[OrderResponse]]:
        return await self.crud.search(keyword)

    async def search_paginated(self, keyword: Optional[str], params: PageParams) -> ServiceResult[Page[OrderResponse]]:
        return await self.crud.search_paginated(keyword, params)

    async def count(self) -> ServiceResult[int]:
        return await self.crud.count()
