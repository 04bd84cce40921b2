"""
Restaurant Tables

Table CRUD on top of the generic service plus the reservation workflow:

    Available -> Reserved   (reserve)
    Reserved  -> Available  (cancel reservation)

Occupied is set by staff through a regular update. Tables referenced by
orders cannot be deleted.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.models import RestaurantTable, TableStatus
from restaurant_ops.repositories.orders import OrderRepository
from restaurant_ops.repositories.tables import TableRepository
from restaurant_ops.schemas import (
    MAX_SEATS,
    Page,
    PageParams,
    TableCreate,
    TableResponse,
    TableUpdate,
)
from restaurant_ops.services.base import GenericService, ServiceHooks, infrastructure_guard

logger = logging.getLogger(__name__)


def _check_fields(table_number: Optional[int], seats: Optional[int]) -> Optional[ServiceResult]:
    errors = []
    if table_number is not None and table_number <= 0:
        errors.append("Table number must be greater than zero")
    if seats is not None and not 1 <= seats <= MAX_SEATS:
        errors.append(f"Seats must be between 1 and {MAX_SEATS}")
    if errors:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid table", errors=errors)
    return None


def _number_taken(table_number: int) -> ServiceResult:
    return ServiceResult.fail(ErrorKind.VALIDATION, f"Table number {table_number} already exists")


def _to_entity(payload: TableCreate) -> RestaurantTable:
    return RestaurantTable(
        table_number=payload.table_number,
        seats=payload.seats,
        location=payload.location,
        status=TableStatus.AVAILABLE,
    )


def _apply_update(table: RestaurantTable, payload: TableUpdate) -> None:
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(table, field, value)


class TableService:
    """Dining tables and their reservations."""

    entity_name = "Table"

    def __init__(self, session: AsyncSession):
        self.repository = TableRepository(session)
        self.orders = OrderRepository(session)
        self.crud = GenericService(
            self.repository,
            ServiceHooks(
                to_dto=TableResponse.model_validate,
                to_entity=_to_entity,
                apply_update=_apply_update,
                validate_create=self._validate_create,
                validate_update=self._validate_update,
                validate_delete=self._validate_delete,
                on_conflict=self._on_conflict,
            ),
            self.entity_name,
        )

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    async def _validate_create(self, payload: TableCreate) -> Optional[ServiceResult]:
        refusal = _check_fields(payload.table_number, payload.seats)
        if refusal is None and await self.repository.get_by_number(payload.table_number) is not None:
            refusal = _number_taken(payload.table_number)
        return refusal

    async def _validate_update(
        self, table_id: int, payload: TableUpdate, table: RestaurantTable
    ) -> Optional[ServiceResult]:
        refusal = _check_fields(payload.table_number, payload.seats)
        if refusal is None and payload.table_number not in (None, table.table_number):
            if await self.repository.get_by_number(payload.table_number) is not None:
                refusal = _number_taken(payload.table_number)
        return refusal

    async def _validate_delete(self, table_id: int, table: RestaurantTable) -> Optional[ServiceResult]:
        if await self.orders.count_for_table(table_id) > 0:
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE,
                f"Table with ID {table_id} is referenced by existing orders and cannot be deleted",
            )
        return None

    def _on_conflict(self, payload) -> Optional[ServiceResult]:
        if payload.table_number is None:
            return None
        return _number_taken(payload.table_number)

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create_table(self, payload: TableCreate) -> ServiceResult[TableResponse]:
        return await self.crud.create(payload)

    async def update_table(self, table_id: int, payload: TableUpdate) -> ServiceResult[TableResponse]:
        return await self.crud.update(table_id, payload)

    async def delete_table(self, table_id: int) -> ServiceResult[bool]:
        return await self.crud.delete(table_id)

    async def get_table(self, table_id: int) -> ServiceResult[TableResponse]:
        return await self.crud.get_by_id(table_id)

    async def get_all(self) -> ServiceResult[List[TableResponse]]:
        return await self.crud.get_all()

    async def get_paginated(self, params: PageParams) -> ServiceResult[Page[TableResponse]]:
        return await self.crud.get_paginated(params)

    async def search(self, keyword: Optional[str]) -> ServiceResult[List[TableResponse]]:
        return await self.crud.search(keyword)

    async def search_paginated(self, keyword: Optional[str], params: PageParams) -> ServiceResult[Page[TableResponse]]:
        return await self.crud.search_paginated(keyword, params)

    @infrastructure_guard("retrieving")
    async def get_available(self, seats: Optional[int] = None) -> ServiceResult[List[TableResponse]]:
        """Available tables, optionally only those seating at least ``seats``."""
        if seats is not None and seats < 1:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Seats must be at least 1")
        if seats is None:
            tables = await self.repository.get_by_status(TableStatus.AVAILABLE)
        else:
            tables = await self.repository.get_with_seats(seats)
        return ServiceResult.ok(
            [TableResponse.model_validate(t) for t in tables],
            f"Found {len(tables)} available tables",
        )

    # =========================================================================
    # RESERVATIONS
    # =========================================================================

    async def reserve_table(self, table_id: int) -> ServiceResult[bool]:
        return await self._move(table_id, TableStatus.AVAILABLE, TableStatus.RESERVED)

    async def cancel_reservation(self, table_id: int) -> ServiceResult[bool]:
        return await self._move(table_id, TableStatus.RESERVED, TableStatus.AVAILABLE)

    @infrastructure_guard("updating")
    async def _move(self, table_id: int, expected: TableStatus, target: TableStatus) -> ServiceResult[bool]:
        table = await self.repository.get_by_id(table_id)
        if table is None:
            return ServiceResult.fail(
                ErrorKind.NOT_FOUND, f"Table with ID {table_id} not found", data=False,
            )
        if table.status != expected:
            logger.warning(
                f"Table #{table_id} cannot become {target.value}: status is {table.status.value}"
            )
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE,
                f"Table {table.table_number} is {table.status.value}, expected {expected.value}",
                data=False,
            )

        table.status = target
        await self.repository.update(table)
        logger.info(f"Table #{table_id} {expected.value} -> {target.value}")
        return ServiceResult.ok(True, f"Table {table.table_number} is now {target.value}")
