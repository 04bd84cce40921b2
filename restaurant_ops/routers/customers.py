"""
Customer Routes (staff/admin)

Registering a customer without an email creates a walk-in account.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import require_staff
from restaurant_ops.database import get_db
from restaurant_ops.routers.responses import page_params, respond
from restaurant_ops.schemas import (
    ApiResponse,
    CustomerCreate,
    CustomerResponse,
    Page,
    PageParams,
)
from restaurant_ops.services.customers import CustomerService, GuestAccountPolicy, default_guest_policy

router = APIRouter(prefix="/customers", tags=["Customers"], dependencies=[Depends(require_staff)])


def get_guest_policy() -> GuestAccountPolicy:
    return default_guest_policy()


def get_customer_service(
    db: AsyncSession = Depends(get_db),
    policy: GuestAccountPolicy = Depends(get_guest_policy),
) -> CustomerService:
    return CustomerService(db, policy)


@router.post("", response_model=ApiResponse[CustomerResponse], status_code=status.HTTP_201_CREATED)
async def create_customer(payload: CustomerCreate, service: CustomerService = Depends(get_customer_service)):
    return respond(await service.create_customer(payload))


@router.get("", response_model=ApiResponse[List[CustomerResponse]])
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    return respond(await service.get_all())


@router.get("/paginated", response_model=ApiResponse[Page[CustomerResponse]])
async def list_customers_paginated(
    params: PageParams = Depends(page_params),
    service: CustomerService = Depends(get_customer_service),
):
    return respond(await service.get_paginated(params))


@router.get("/search", response_model=ApiResponse[List[CustomerResponse]])
async def search_customers(
    keyword: Optional[str] = Query(None, description="Name, email or phone"),
    service: CustomerService = Depends(get_customer_service),
):
    return respond(await service.search(keyword))


@router.get("/{customer_id}", response_model=ApiResponse[CustomerResponse])
async def get_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    return respond(await service.get_customer(customer_id))
