"""Menu item persistence."""

from sqlalchemy import func, select

from restaurant_ops.models import MenuItem, OrderDetail
from restaurant_ops.repositories.base import BaseRepository


class MenuItemRepository(BaseRepository[MenuItem]):
    model = MenuItem
    search_fields = ("name", "description", "category")

    async def is_referenced(self, menu_item_id: int) -> bool:
        """True when any order detail points at this item."""
        stmt = (
            select(func.count())
            .select_from(OrderDetail)
            .where(OrderDetail.menu_item_id == menu_item_id)
        )
        return (await self.session.scalar(stmt)) > 0
