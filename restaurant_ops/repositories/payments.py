"""
Payment persistence plus the reconciliation queries: by order, by status,
by transaction code, by date range and per-status aggregates.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy import func, select

from restaurant_ops.models import Payment, PaymentDetail, PaymentStatus
from restaurant_ops.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    model = Payment
    search_fields = ("amount",)

    def _search_conditions(self, keyword: str):
        pattern = f"%{keyword.lower()}%"
        conditions = super()._search_conditions(keyword)
        conditions.append(
            Payment.details.any(func.lower(PaymentDetail.transaction_code).like(pattern))
        )
        return conditions

    async def get_by_order(self, order_id: int) -> List[Payment]:
        """Payments of one order, newest first."""
        logger.info(f"Getting payments for order ID: {order_id}")
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_by_status(self, status: PaymentStatus) -> List[Payment]:
        logger.info(f"Getting payments with status: {status.value}")
        stmt = (
            select(Payment)
            .where(Payment.status == status)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def search_by_transaction_code(self, code: str) -> List[Payment]:
        """Payments owning a detail whose transaction code contains ``code``."""
        code = self._require_keyword(code)
        logger.info(f"Searching payments by transaction code: {code}")
        stmt = (
            select(Payment)
            .where(Payment.details.any(PaymentDetail.transaction_code.contains(code)))
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_by_date_range(self, start: datetime, end: datetime) -> List[Payment]:
        """Inclusive on both bounds."""
        logger.info(f"Getting payments between {start} and {end}")
        stmt = (
            select(Payment)
            .where(Payment.payment_date >= start, Payment.payment_date <= end)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def totals_by_status(self) -> Dict[PaymentStatus, Tuple[Decimal, int]]:
        """Sum and count of amounts per status; absent statuses report zero."""
        stmt = select(
            Payment.status,
            func.coalesce(func.sum(Payment.amount), 0),
            func.count(Payment.id),
        ).group_by(Payment.status)
        totals = {status: (Decimal("0.00"), 0) for status in PaymentStatus}
        for status, total, count in (await self.session.execute(stmt)).all():
            totals[status] = (Decimal(str(total)).quantize(Decimal("0.01")), count)
        return totals

    async def total_revenue(self) -> Decimal:
        """Sum of completed payment amounts."""
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.COMPLETED
        )
        total = await self.session.scalar(stmt)
        return Decimal(str(total)).quantize(Decimal("0.01"))
