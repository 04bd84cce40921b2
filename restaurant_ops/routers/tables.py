"""
Restaurant Table Routes (staff/admin)

    GET    /tables                        list
    GET    /tables/available?seats=       free tables, optionally by party size
    POST   /tables/{id}/reserve           Available -> Reserved
    POST   /tables/{id}/cancel-reservation Reserved -> Available
    POST/PUT/DELETE                       admin only
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.auth import require_admin, require_staff
from restaurant_ops.database import get_db
from restaurant_ops.routers.responses import page_params, respond
from restaurant_ops.schemas import (
    ApiResponse,
    Page,
    PageParams,
    TableCreate,
    TableResponse,
    TableUpdate,
)
from restaurant_ops.services.tables import TableService

router = APIRouter(prefix="/tables", tags=["Tables"], dependencies=[Depends(require_staff)])


def get_table_service(db: AsyncSession = Depends(get_db)) -> TableService:
    return TableService(db)


@router.get("", response_model=ApiResponse[List[TableResponse]])
async def list_tables(service: TableService = Depends(get_table_service)):
    return respond(await service.get_all())


@router.get("/paginated", response_model=ApiResponse[Page[TableResponse]])
async def list_tables_paginated(
    params: PageParams = Depends(page_params),
    service: TableService = Depends(get_table_service),
):
    return respond(await service.get_paginated(params))


@router.get("/available", response_model=ApiResponse[List[TableResponse]])
async def available_tables(
    seats: Optional[int] = Query(None, description="Minimum number of seats"),
    service: TableService = Depends(get_table_service),
):
    return respond(await service.get_available(seats))


@router.get("/search", response_model=ApiResponse[List[TableResponse]])
async def search_tables(
    keyword: Optional[str] = Query(None, description="Table number or location"),
    service: TableService = Depends(get_table_service),
):
    return respond(await service.search(keyword))


@router.get("/search/paginated", response_model=ApiResponse[Page[TableResponse]])
async def search_tables_paginated(
    keyword: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    service: TableService = Depends(get_table_service),
):
    return respond(await service.search_paginated(keyword, params))


@router.get("/{table_id}", response_model=ApiResponse[TableResponse])
async def get_table(table_id: int, service: TableService = Depends(get_table_service)):
    return respond(await service.get_table(table_id))


@router.post(
    "",
    response_model=ApiResponse[TableResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_table(payload: TableCreate, service: TableService = Depends(get_table_service)):
    return respond(await service.create_table(payload))


@router.put("/{table_id}", response_model=ApiResponse[TableResponse], dependencies=[Depends(require_admin)])
async def update_table(
    table_id: int,
    payload: TableUpdate,
    service: TableService = Depends(get_table_service),
):
    return respond(await service.update_table(table_id, payload))


@router.delete("/{table_id}", response_model=ApiResponse[bool], dependencies=[Depends(require_admin)])
async def delete_table(table_id: int, service: TableService = Depends(get_table_service)):
    """Tables referenced by orders cannot be deleted (400)."""
    return respond(await service.delete_table(table_id))


@router.post("/{table_id}/reserve", response_model=ApiResponse[bool])
async def reserve_table(table_id: int, service: TableService = Depends(get_table_service)):
    return respond(await service.reserve_table(table_id))


@router.post("/{table_id}/cancel-reservation", response_model=ApiResponse[bool])
async def cancel_reservation(table_id: int, service: TableService = Depends(get_table_service)):
    return respond(await service.cancel_reservation(table_id))
