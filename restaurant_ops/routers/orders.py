"""
Order Routes

    POST /orders                      any authenticated user
    GET  /orders                      staff/admin
    GET  /orders/paginated            staff/admin
    GET  /orders/search               staff/admin
    GET  /orders/search/paginated     staff/admin
    GET  /orders/{id}                 owner or staff/admin
    PUT  /orders/{id}                 staff/admin
    PUT  /orders/{id}/cancel          owner (customers) or staff/admin
    GET  /orders/{id}/status          owner or staff/admin
    PUT  /orders/{id}/status          staff/admin
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import CurrentUser, access_scope_for, get_current_user, require_staff
from restaurant_ops.database import get_db
from restaurant_ops.routers.responses import page_params, respond
from restaurant_ops.schemas import (
    ApiResponse,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    OrderUpdate,
    Page,
    PageParams,
)
from restaurant_ops.services.orders import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.post(
    "",
    response_model=ApiResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
async def create_order(
    payload: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """
    Place an order for a table.

    Customers always order for themselves; staff may pass ``user_id`` to
    order on behalf of a customer. Unknown or unavailable menu items fail
    the whole order with 400.
    """
    owner_id = user.id
    if not user.is_customer and payload.user_id is not None:
        owner_id = payload.user_id
    result = await service.create_order(owner_id, payload.table_id, payload.items)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.get("", response_model=ApiResponse[List[OrderResponse]], dependencies=[Depends(require_staff)])
async def list_orders(service: OrderService = Depends(get_order_service)):
    return respond(await service.get_all_orders())


@router.get("/paginated", response_model=ApiResponse[Page[OrderResponse]], dependencies=[Depends(require_staff)])
async def list_orders_paginated(
    params: PageParams = Depends(page_params),
    service: OrderService = Depends(get_order_service),
):
    return respond(await service.get_paginated(params))


@router.get("/search", response_model=ApiResponse[List[OrderResponse]], dependencies=[Depends(require_staff)])
async def search_orders(
    keyword: Optional[str] = Query(None, description="Order id, table id or customer name"),
    service: OrderService = Depends(get_order_service),
):
    return respond(await service.search(keyword))


@router.get(
    "/search/paginated",
    response_model=ApiResponse[Page[OrderResponse]],
    dependencies=[Depends(require_staff)],
)
async def search_orders_paginated(
    keyword: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    service: OrderService = Depends(get_order_service),
):
    return respond(await service.search_paginated(keyword, params))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Customers get 404 for orders they do not own."""
    return respond(await service.get_order_by_id(order_id, access_scope_for(user)))


@router.put("/{order_id}", response_model=ApiResponse[OrderResponse], dependencies=[Depends(require_staff)])
async def update_order(
    order_id: int,
    payload: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    """Replace the items of a pending order."""
    result = await service.update_order(order_id, payload.items)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.put("/{order_id}/cancel", response_model=ApiResponse[bool])
async def cancel_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    result = await service.cancel_order(order_id, user.id, is_customer_request=user.is_customer)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.get("/{order_id}/status", response_model=ApiResponse[str])
async def get_order_status(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return respond(await service.get_order_status(order_id, access_scope_for(user)))


@router.put("/{order_id}/status", response_model=ApiResponse[OrderResponse])
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    user: CurrentUser = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    logger.info(f"User {user.id} moving order #{order_id} to {payload.status.value}")
    return respond(await service.update_order_status(order_id, payload.status))
