"""
Menu Catalog Routes

Reads are public; creating, editing and deleting items is admin only.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import require_admin
from restaurant_ops.database import get_db
from restaurant_ops.routers.responses import page_params, respond
from restaurant_ops.schemas import (
    ApiResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    Page,
    PageParams,
)
from restaurant_ops.services.base import GenericService
from restaurant_ops.services.menu import build_menu_service

router = APIRouter(prefix="/menu-items", tags=["Menu"])


def get_menu_service(db: AsyncSession = Depends(get_db)) -> GenericService:
    return build_menu_service(db)


@router.get("", response_model=ApiResponse[List[MenuItemResponse]])
async def list_menu_items(service: GenericService = Depends(get_menu_service)):
    return respond(await service.get_all())


@router.get("/paginated", response_model=ApiResponse[Page[MenuItemResponse]])
async def list_menu_items_paginated(
    params: PageParams = Depends(page_params),
    service: GenericService = Depends(get_menu_service),
):
    return respond(await service.get_paginated(params))


@router.get("/search", response_model=ApiResponse[List[MenuItemResponse]])
async def search_menu_items(
    keyword: Optional[str] = Query(None, description="Name, description or category"),
    service: GenericService = Depends(get_menu_service),
):
    return respond(await service.search(keyword))


@router.get("/{item_id}", response_model=ApiResponse[MenuItemResponse])
async def get_menu_item(item_id: int, service: GenericService = Depends(get_menu_service)):
    return respond(await service.get_by_id(item_id))


@router.post(
    "",
    response_model=ApiResponse[MenuItemResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_menu_item(payload: MenuItemCreate, service: GenericService = Depends(get_menu_service)):
    return respond(await service.create(payload))


@router.put("/{item_id}", response_model=ApiResponse[MenuItemResponse], dependencies=[Depends(require_admin)])
async def update_menu_item(
    item_id: int,
    payload: MenuItemUpdate,
    service: GenericService = Depends(get_menu_service),
):
    return respond(await service.update(item_id, payload))


@router.delete("/{item_id}", response_model=ApiResponse[bool], dependencies=[Depends(require_admin)])
async def delete_menu_item(item_id: int, service: GenericService = Depends(get_menu_service)):
    """Items referenced by past orders cannot be deleted (400)."""
    return respond(await service.delete(item_id))
