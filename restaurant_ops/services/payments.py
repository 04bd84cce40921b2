"""
Payment Reconciliation Engine

Records payments against existing orders, tracks transaction codes per
payment detail, confirms payments by code and aggregates revenue.

Payment statuses (Pending, Completed, Failed) carry no terminal lock:
an administrator may move a payment between any of them. Payments never
change the status of their order.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.models import Payment, PaymentDetail, PaymentStatus, as_utc
from restaurant_ops.repositories.orders import OrderRepository
from restaurant_ops.repositories.payments import PaymentRepository
from restaurant_ops.schemas import (
    Page,
    PageParams,
    PaymentCreate,
    PaymentResponse,
    PaymentStatistics,
)
from restaurant_ops.services.base import GenericService, ServiceHooks, infrastructure_guard

logger = logging.getLogger(__name__)


def check_transaction_code(payment: Payment, transaction_code: Optional[str]) -> bool:
    """Pure check: does any detail of ``payment`` carry exactly this code."""
    if not transaction_code:
        return False
    return any(d.transaction_code == transaction_code for d in payment.details)


def _to_entity(payload: PaymentCreate) -> Payment:
    return Payment(
        order_id=payload.order_id,
        method=payload.method,
        amount=payload.amount,
        status=PaymentStatus.PENDING,
        details=[
            PaymentDetail(
                method=d.method,
                amount=d.amount,
                transaction_code=d.transaction_code,
                provider=d.provider,
                extra_info=d.extra_info,
            )
            for d in payload.details
        ],
    )


class PaymentService:
    """Payment creation, settlement status and reconciliation queries."""

    entity_name = "Payment"

    def __init__(self, session: AsyncSession):
        self.repository = PaymentRepository(session)
        self.orders = OrderRepository(session)
        self.crud = GenericService(
            self.repository,
            ServiceHooks(
                to_dto=PaymentResponse.model_validate,
                to_entity=_to_entity,
                validate_create=self._validate_create,
            ),
            self.entity_name,
        )

    async def _validate_create(self, payload: PaymentCreate) -> Optional[ServiceResult]:
        if not await self.orders.exists(payload.order_id):
            return ServiceResult.not_found("Order", payload.order_id)
        if payload.amount <= 0:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Payment amount must be greater than zero")
        return None

    @staticmethod
    def _dtos(payments: List[Payment]) -> List[PaymentResponse]:
        return [PaymentResponse.model_validate(p) for p in payments]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_payment(self, payload: PaymentCreate) -> ServiceResult[PaymentResponse]:
        """
        Persist a Pending payment with one detail per supplied tuple.

        The amount is not compared with the order total; several partial
        payments may reference the same order.
        """
        result = await self.crud.create(payload)
        if result.success:
            logger.info(f"Payment #{result.data.id} recorded for order #{payload.order_id}: {payload.amount}")
        return result

    @infrastructure_guard("updating")
    async def update_payment_status(self, payment_id: int, new_status: PaymentStatus) -> ServiceResult[PaymentResponse]:
        payment = await self.repository.get_by_id(payment_id)
        if payment is None:
            return ServiceResult.not_found(self.entity_name, payment_id)

        previous = payment.status
        payment.status = new_status
        updated = await self.repository.update(payment)
        logger.info(f"Payment #{payment_id} status {previous.value} -> {new_status.value}")
        return ServiceResult.ok(PaymentResponse.model_validate(updated), "Payment status updated successfully")

    @infrastructure_guard("verifying")
    async def verify_payment(self, payment_id: int, transaction_code: str) -> ServiceResult[bool]:
        """
        Confirm a payment by transaction code.

        On an exact match against any detail the payment becomes Completed.
        Re-verifying an already completed payment with the same code
        succeeds again. Unknown payment or code returns False.
        """
        payment = await self.repository.get_by_id(payment_id)
        if payment is None:
            return ServiceResult.fail(
                ErrorKind.NOT_FOUND, "Payment verification failed",
                errors=[f"Payment with ID {payment_id} not found"], data=False,
            )
        if not check_transaction_code(payment, transaction_code):
            logger.warning(f"Payment #{payment_id} verification failed: transaction code mismatch")
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE, "Payment verification failed",
                errors=["Transaction code does not match any payment detail"], data=False,
            )

        payment.status = PaymentStatus.COMPLETED
        await self.repository.update(payment)
        logger.info(f"Payment #{payment_id} verified and completed")
        return ServiceResult.ok(True, "Payment verified successfully")

    async def delete_payment(self, payment_id: int) -> ServiceResult[bool]:
        return await self.crud.delete(payment_id)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_payment_by_id(self, payment_id: int) -> ServiceResult[PaymentResponse]:
        return await self.crud.get_by_id(payment_id)

    async def get_all_payments(self) -> ServiceResult[List[PaymentResponse]]:
        return await self.crud.get_all()

    async def get_paginated(self, params: PageParams) -> ServiceResult[Page[PaymentResponse]]:
        return await self.crud.get_paginated(params)

    async def search_paginated(self, keyword: Optional[str], params: PageParams) -> ServiceResult[Page[PaymentResponse]]:
        return await self.crud.search_paginated(keyword, params)

    @infrastructure_guard("retrieving")
    async def get_payments_by_order(self, order_id: int) -> ServiceResult[List[PaymentResponse]]:
        payments = await self.repository.get_by_order(order_id)
        return ServiceResult.ok(self._dtos(payments), f"Retrieved {len(payments)} payments for order {order_id}")

    @infrastructure_guard("retrieving")
    async def get_payments_by_status(self, status: PaymentStatus) -> ServiceResult[List[PaymentResponse]]:
        payments = await self.repository.get_by_status(status)
        return ServiceResult.ok(self._dtos(payments), f"Retrieved {len(payments)} {status.value} payments")

    @infrastructure_guard("searching")
    async def search_by_transaction_code(self, transaction_code: Optional[str]) -> ServiceResult[List[PaymentResponse]]:
        if not transaction_code or not transaction_code.strip():
            return ServiceResult.fail(ErrorKind.VALIDATION, "Transaction code is required")
        payments = await self.repository.search_by_transaction_code(transaction_code)
        return ServiceResult.ok(self._dtos(payments), f"Found {len(payments)} payments")

    @infrastructure_guard("retrieving")
    async def get_payments_by_date_range(self, start: datetime, end: datetime) -> ServiceResult[List[PaymentResponse]]:
        """Inclusive UTC range. Bounds without a timezone are read as UTC."""
        start, end = as_utc(start), as_utc(end)
        if start > end:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Start date must be before or equal to end date")
        payments = await self.repository.get_by_date_range(start, end)
        return ServiceResult.ok(self._dtos(payments), f"Retrieved {len(payments)} payments")

    @infrastructure_guard("calculating")
    async def get_total_revenue(self) -> ServiceResult[Decimal]:
        revenue = await self.repository.total_revenue()
        return ServiceResult.ok(revenue, "Total revenue calculated successfully")

    @infrastructure_guard("calculating")
    async def get_statistics(self) -> ServiceResult[PaymentStatistics]:
        """Fresh per-status sums and counts; nothing is cached."""
        totals = await self.repository.totals_by_status()
        completed, count_completed = totals[PaymentStatus.COMPLETED]
        pending, count_pending = totals[PaymentStatus.PENDING]
        failed, count_failed = totals[PaymentStatus.FAILED]
        stats = PaymentStatistics(
            total_completed=completed,
            total_pending=pending,
            total_failed=failed,
            count_completed=count_completed,
            count_pending=count_pending,
            count_failed=count_failed,
            total_revenue=completed,
            generated_at=datetime.now(timezone.utc),
        )
        return ServiceResult.ok(stats, "Payment statistics generated successfully")
