"""Restaurant table persistence."""

from typing import List, Optional

from sqlalchemy import select

from restaurant_ops.models import RestaurantTable, TableStatus
from restaurant_ops.repositories.base import BaseRepository


class TableRepository(BaseRepository[RestaurantTable]):
    model = RestaurantTable
    search_fields = ("table_number", "location")

    async def get_by_number(self, table_number: int) -> Optional[RestaurantTable]:
        stmt = select(RestaurantTable).where(RestaurantTable.table_number == table_number)
        return await self.session.scalar(stmt)

    async def get_by_status(self, status: TableStatus) -> List[RestaurantTable]:
        stmt = (
            select(RestaurantTable)
            .where(RestaurantTable.status == status)
            .order_by(RestaurantTable.table_number)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_with_seats(self, seats: int) -> List[RestaurantTable]:
        """Available tables seating at least ``seats`` guests, smallest first."""
        stmt = (
            select(RestaurantTable)
            .where(RestaurantTable.status == TableStatus.AVAILABLE, RestaurantTable.seats >= seats)
            .order_by(RestaurantTable.seats, RestaurantTable.table_number)
        )
        return list((await self.session.execute(stmt)).scalars().all())
