"""
Order persistence.

Keyword search matches the order id, the table id (both in string form)
or the owning user's display name. Every query loads the owner and the
details together with their menu items.
"""

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import selectinload

from restaurant_ops.models import Order, OrderDetail, User
from restaurant_ops.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    model = Order

    def _load_options(self):
        return (
            selectinload(Order.user),
            selectinload(Order.details).selectinload(OrderDetail.menu_item),
        )

    def _search_statement(self, keyword: str):
        pattern = f"%{keyword.lower()}%"
        return self._scoped(
            select(Order)
            .outerjoin(User, Order.user_id == User.id)
            .where(
                or_(
                    cast(Order.id, String).like(pattern),
                    cast(Order.table_id, String).like(pattern),
                    func.lower(User.full_name).like(pattern),
                )
            )
        )

    async def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        return await self.session.scalar(stmt)

    async def count_for_table(self, table_id: int) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.table_id == table_id)
        return await self.session.scalar(stmt)
