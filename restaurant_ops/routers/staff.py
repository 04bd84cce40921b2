"""
Staff Routes (admin only)

Hiring creates a Staff account with its profile; the password is hashed
before storage.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import require_admin
from restaurant_ops.database import get_db
from restaurant_ops.routers.responses import page_params, respond
from restaurant_ops.schemas import (
    ApiResponse,
    Page,
    PageParams,
    StaffCreate,
    StaffResponse,
    StaffUpdate,
)
from restaurant_ops.services.staff import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"], dependencies=[Depends(require_admin)])


def get_staff_service(db: AsyncSession = Depends(get_db)) -> StaffService:
    return StaffService(db)


@router.post("", response_model=ApiResponse[StaffResponse], status_code=status.HTTP_201_CREATED)
async def create_staff(payload: StaffCreate, service: StaffService = Depends(get_staff_service)):
    return respond(await service.create_staff(payload))


@router.get("", response_model=ApiResponse[List[StaffResponse]])
async def list_staff(service: StaffService = Depends(get_staff_service)):
    return respond(await service.get_all())


@router.get("/paginated", response_model=ApiResponse[Page[StaffResponse]])
async def list_staff_paginated(
    params: PageParams = Depends(page_params),
    service: StaffService = Depends(get_staff_service),
):
    return respond(await service.get_paginated(params))


@router.get("/search", response_model=ApiResponse[List[StaffResponse]])
async def search_staff(
    keyword: Optional[str] = Query(None, description="Name, email or phone"),
    service: StaffService = Depends(get_staff_service),
):
    return respond(await service.search(keyword))


@router.get("/search/paginated", response_model=ApiResponse[Page[StaffResponse]])
async def search_staff_paginated(
    keyword: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    service: StaffService = Depends(get_staff_service),
):
    return respond(await service.search_paginated(keyword, params))


@router.get("/{staff_id}", response_model=ApiResponse[StaffResponse])
async def get_staff(staff_id: int, service: StaffService = Depends(get_staff_service)):
    return respond(await service.get_staff(staff_id))


@router.put("/{staff_id}", response_model=ApiResponse[StaffResponse])
async def update_staff(
    staff_id: int,
    payload: StaffUpdate,
    service: StaffService = Depends(get_staff_service),
):
    return respond(await service.update_staff(staff_id, payload))


@router.delete("/{staff_id}", response_model=ApiResponse[bool])
async def delete_staff(staff_id: int, service: StaffService = Depends(get_staff_service)):
    return respond(await service.delete_staff(staff_id))
