"""
Payment Routes

Verification is unauthenticated so payment providers can call it as a
webhook. Revenue, statistics, status changes and deletion are admin only.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import (
    CurrentUser,
    access_scope_for,
    get_current_user,
    require_admin,
    require_staff,
)
from restaurant_ops.database import get_db
from restaurant_ops.models import PaymentStatus
from restaurant_ops.routers.responses import page_params, raise_for_failure, respond
from restaurant_ops.schemas import (
    ApiResponse,
    Page,
    PageParams,
    PaymentCreate,
    PaymentResponse,
    PaymentStatistics,
    PaymentStatusUpdate,
    PaymentVerifyRequest,
)
from restaurant_ops.services.orders import OrderService
from restaurant_ops.services.payments import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


@router.post(
    "",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
async def create_payment(
    payload: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
):
    """Record a payment against an existing order (partial payments allowed)."""
    result = await service.create_payment(payload)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.get("", response_model=ApiResponse[List[PaymentResponse]], dependencies=[Depends(require_staff)])
async def list_payments(service: PaymentService = Depends(get_payment_service)):
    return respond(await service.get_all_payments())


@router.get("/paginated", response_model=ApiResponse[Page[PaymentResponse]], dependencies=[Depends(require_staff)])
async def list_payments_paginated(
    params: PageParams = Depends(page_params),
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.get_paginated(params))


@router.get("/search", response_model=ApiResponse[List[PaymentResponse]], dependencies=[Depends(require_staff)])
async def search_by_transaction_code(
    transaction_code: Optional[str] = Query(None, description="Substring of a transaction code"),
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.search_by_transaction_code(transaction_code))


@router.get(
    "/search/paginated",
    response_model=ApiResponse[Page[PaymentResponse]],
    dependencies=[Depends(require_staff)],
)
async def search_payments_paginated(
    keyword: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.search_paginated(keyword, params))


@router.get("/date-range", response_model=ApiResponse[List[PaymentResponse]], dependencies=[Depends(require_staff)])
async def payments_by_date_range(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments dated within [start_date, end_date]."""
    return respond(await service.get_payments_by_date_range(start_date, end_date))


@router.get("/revenue/total", response_model=ApiResponse[Decimal], dependencies=[Depends(require_admin)])
async def total_revenue(service: PaymentService = Depends(get_payment_service)):
    return respond(await service.get_total_revenue())


@router.get("/statistics", response_model=ApiResponse[PaymentStatistics], dependencies=[Depends(require_admin)])
async def payment_statistics(service: PaymentService = Depends(get_payment_service)):
    return respond(await service.get_statistics())


@router.get("/order/{order_id}", response_model=ApiResponse[List[PaymentResponse]])
async def payments_for_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest first. Customers only see payments of their own orders."""
    raise_for_failure(await OrderService(db).get_order_by_id(order_id, access_scope_for(user)))
    return respond(await PaymentService(db).get_payments_by_order(order_id))


@router.get("/status/{payment_status}", response_model=ApiResponse[List[PaymentResponse]], dependencies=[Depends(require_staff)])
async def payments_by_status(
    payment_status: PaymentStatus,
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.get_payments_by_status(payment_status))


@router.get("/{payment_id}", response_model=ApiResponse[PaymentResponse], dependencies=[Depends(get_current_user)])
async def get_payment(
    payment_id: int,
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.get_payment_by_id(payment_id))


@router.put("/{payment_id}/status", response_model=ApiResponse[PaymentResponse])
async def update_payment_status(
    payment_id: int,
    payload: PaymentStatusUpdate,
    user: CurrentUser = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    logger.info(f"Admin {user.id} setting payment #{payment_id} to {payload.status.value}")
    result = await service.update_payment_status(payment_id, payload.status)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.post("/{payment_id}/verify", response_model=ApiResponse[bool])
async def verify_payment(
    payment_id: int,
    payload: PaymentVerifyRequest,
    service: PaymentService = Depends(get_payment_service),
):
    result = await service.verify_payment(payment_id, payload.transaction_code)
    return respond(result, failure_status=status.HTTP_400_BAD_REQUEST)


@router.delete("/{payment_id}", response_model=ApiResponse[bool], dependencies=[Depends(require_admin)])
async def delete_payment(
    payment_id: int,
    service: PaymentService = Depends(get_payment_service),
):
    return respond(await service.delete_payment(payment_id))
