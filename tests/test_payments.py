from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from restaurant_ops.core.errors import ErrorKind
from restaurant_ops.models import OrderStatus, PaymentMethod, PaymentStatus
from restaurant_ops.repositories import PaymentRepository
from restaurant_ops.schemas import OrderItemRequest, PaymentCreate, PaymentDetailCreate
from restaurant_ops.services import OrderService, PaymentService, check_transaction_code

pytestmark = pytest.mark.anyio


@pytest.fixture
async def order(session, seeded):
    result = await OrderService(session).create_order(
        seeded.carl_id, 3, [OrderItemRequest(menu_item_id=seeded.pizza_id, quantity=2)]
    )
    return result.data


def payment_for(order_id, amount="15.00", code="TXN-001", method=PaymentMethod.CREDIT_CARD):
    return PaymentCreate(
        order_id=order_id,
        method=method,
        amount=Decimal(amount),
        details=[
            PaymentDetailCreate(method=method, amount=Decimal(amount), transaction_code=code, provider="Stripe"),
        ],
    )


async def test_create_payment_starts_pending_with_details(session, order):
    result = await PaymentService(session).create_payment(payment_for(order.id))

    assert result.success is True
    payment = result.data
    assert payment.status == PaymentStatus.PENDING
    assert payment.amount == Decimal("15.00")
    assert payment.details[0].transaction_code == "TXN-001"
    assert payment.details[0].provider == "Stripe"


async def test_create_payment_requires_existing_order_and_positive_amount(session, order):
    service = PaymentService(session)

    missing = await service.create_payment(payment_for(9999))
    assert missing.error == ErrorKind.NOT_FOUND
    assert missing.message == "Order with ID 9999 not found"

    zero = await service.create_payment(payment_for(order.id, amount="0"))
    assert zero.error == ErrorKind.VALIDATION

    assert await PaymentRepository(session).count() == 0


async def test_partial_payments_against_one_order_are_allowed(session, order):
    service = PaymentService(session)

    await service.create_payment(payment_for(order.id, amount="5.00", code="A"))
    await service.create_payment(payment_for(order.id, amount="50.00", code="B"))

    payments = (await service.get_payments_by_order(order.id)).data
    assert len(payments) == 2
    # Newest first
    assert payments[0].details[0].transaction_code == "B"


async def test_verify_with_unknown_code_leaves_payment_pending(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    result = await service.verify_payment(payment.id, "TXN-999")

    assert result.success is False
    assert result.data is False
    assert (await service.get_payment_by_id(payment.id)).data.status == PaymentStatus.PENDING


async def test_verify_is_an_idempotent_confirm(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    first = await service.verify_payment(payment.id, "TXN-001")
    second = await service.verify_payment(payment.id, "TXN-001")

    assert first.data is True
    assert second.data is True
    assert (await service.get_payment_by_id(payment.id)).data.status == PaymentStatus.COMPLETED


async def test_verify_missing_payment_returns_false(session, seeded):
    result = await PaymentService(session).verify_payment(31337, "TXN-001")
    assert result.success is False
    assert result.data is False
    assert result.error == ErrorKind.NOT_FOUND


async def test_verify_requires_exact_code(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id, code="TXN-12345"))).data

    assert (await service.verify_payment(payment.id, "TXN-123")).data is False

    entity = await PaymentRepository(session).get_by_id(payment.id)
    assert check_transaction_code(entity, "TXN-12345") is True
    assert check_transaction_code(entity, "txn-12345") is False
    assert check_transaction_code(entity, "") is False


async def test_verification_does_not_touch_order_status(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data
    await service.verify_payment(payment.id, "TXN-001")

    status = await OrderService(session).get_order_status(order.id)
    assert status.data == OrderStatus.PENDING.value


async def test_update_status_of_missing_payment(session, seeded):
    service = PaymentService(session)

    result = await service.update_payment_status(404, PaymentStatus.COMPLETED)

    assert result.error == ErrorKind.NOT_FOUND
    assert await PaymentRepository(session).count() == 0


async def test_status_moves_freely_between_completed_and_failed(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    failed = await service.update_payment_status(payment.id, PaymentStatus.FAILED)
    reopened = await service.update_payment_status(payment.id, PaymentStatus.COMPLETED)

    assert failed.data.status == PaymentStatus.FAILED
    assert reopened.data.status == PaymentStatus.COMPLETED


async def test_queries_by_status_code_and_date_range(session, order):
    service = PaymentService(session)
    first = (await service.create_payment(payment_for(order.id, code="CARD-AAA"))).data
    await service.create_payment(payment_for(order.id, code="CASH-BBB"))
    await service.update_payment_status(first.id, PaymentStatus.FAILED)

    failed = (await service.get_payments_by_status(PaymentStatus.FAILED)).data
    assert [p.id for p in failed] == [first.id]

    by_code = (await service.search_by_transaction_code("CARD")).data
    assert [p.id for p in by_code] == [first.id]
    assert (await service.search_by_transaction_code(" ")).error == ErrorKind.VALIDATION

    now = datetime.now(timezone.utc)
    in_range = (await service.get_payments_by_date_range(now - timedelta(hours=1), now + timedelta(hours=1))).data
    assert len(in_range) == 2
    future = (await service.get_payments_by_date_range(now + timedelta(days=1), now + timedelta(days=2))).data
    assert future == []

    reversed_range = await service.get_payments_by_date_range(now, now - timedelta(days=1))
    assert reversed_range.error == ErrorKind.VALIDATION


async def test_date_range_bounds_are_inclusive(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    stamp = payment.payment_date
    result = (await service.get_payments_by_date_range(stamp, stamp)).data
    assert [p.id for p in result] == [payment.id]


async def test_revenue_and_statistics_are_computed_fresh(session, order):
    service = PaymentService(session)
    a = (await service.create_payment(payment_for(order.id, amount="15.00", code="A"))).data
    b = (await service.create_payment(payment_for(order.id, amount="10.00", code="B"))).data
    await service.create_payment(payment_for(order.id, amount="7.50", code="C"))
    await service.verify_payment(a.id, "A")
    await service.update_payment_status(b.id, PaymentStatus.FAILED)

    assert (await service.get_total_revenue()).data == Decimal("15.00")

    stats = (await service.get_statistics()).data
    assert stats.total_completed == Decimal("15.00")
    assert stats.total_failed == Decimal("10.00")
    assert stats.total_pending == Decimal("7.50")
    assert (stats.count_completed, stats.count_failed, stats.count_pending) == (1, 1, 1)
    assert stats.total_revenue == Decimal("15.00")

    await service.update_payment_status(b.id, PaymentStatus.COMPLETED)
    later = (await service.get_statistics()).data
    assert later.total_revenue == Decimal("25.00")
    assert later.generated_at >= stats.generated_at


async def test_statistics_with_no_payments(session, seeded):
    stats = (await PaymentService(session).get_statistics()).data
    assert stats.total_revenue == Decimal("0.00")
    assert stats.count_pending == 0


async def test_delete_payment_keeps_order(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    assert (await service.delete_payment(payment.id)).data is True
    assert (await service.delete_payment(payment.id)).error == ErrorKind.NOT_FOUND
    assert (await OrderService(session).get_order_by_id(order.id)).success is True


async def test_date_range_accepts_mixed_naive_and_aware_bounds(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    now = datetime.now(timezone.utc)
    naive_start = (now - timedelta(hours=1)).replace(tzinfo=None)

    mixed = await service.get_payments_by_date_range(naive_start, now + timedelta(hours=1))
    assert mixed.success is True
    assert [p.id for p in mixed.data] == [payment.id]

    reversed_mixed = await service.get_payments_by_date_range(now, naive_start)
    assert reversed_mixed.error == ErrorKind.VALIDATION


async def test_date_range_normalizes_offsets_to_utc(session, order):
    service = PaymentService(session)
    payment = (await service.create_payment(payment_for(order.id))).data

    plus_five = timezone(timedelta(hours=5))
    now_local = datetime.now(plus_five)
    around = await service.get_payments_by_date_range(
        now_local - timedelta(minutes=30), now_local + timedelta(minutes=30)
    )
    assert [p.id for p in around.data] == [payment.id]

    # Five hours ahead once read as UTC wall time
    shifted = await service.get_payments_by_date_range(
        now_local.replace(tzinfo=None) - timedelta(minutes=30),
        now_local.replace(tzinfo=None) + timedelta(minutes=30),
    )
    assert shifted.data == []
