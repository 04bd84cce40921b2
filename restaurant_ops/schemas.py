"""
Pydantic Schemas for Request/Response Validation

Covers:
- Pagination parameters and page envelope
- Uniform API response envelope
- Menu items, tables, orders, payments, customers and staff

Money fields are Decimal end to end; they serialize as strings in JSON.

Version: 1.0.0
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from restaurant_ops.models import (
    MenuItemStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    TableStatus,
    UserRole,
)

T = TypeVar("T")

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


# =============================================================================
# PAGINATION
# =============================================================================

class PageParams(BaseModel):
    """
    Page request. Out-of-range values are clamped, never rejected:
    page_number < 1 becomes 1, page_size < 1 becomes the default and
    page_size > 100 becomes 100.
    """
    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: Optional[str] = None
    descending: bool = False

    @field_validator("page_number")
    @classmethod
    def clamp_page_number(cls, v: int) -> int:
        return v if v >= 1 else DEFAULT_PAGE_NUMBER

    @field_validator("page_size")
    @classmethod
    def clamp_page_size(cls, v: int) -> int:
        if v < 1:
            return DEFAULT_PAGE_SIZE
        return min(v, MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.page_size


class Page(BaseModel, Generic[T]):
    """One page of results plus navigation metadata."""
    items: List[T]
    page_number: int
    page_size: int
    total_records: int
    total_pages: int
    has_previous: bool
    has_next: bool

    @classmethod
    def build(cls, items: List[T], page_number: int, page_size: int, total_records: int) -> "Page[T]":
        total_pages = math.ceil(total_records / page_size) if page_size else 0
        return cls(
            items=items,
            page_number=page_number,
            page_size=page_size,
            total_records=total_records,
            total_pages=total_pages,
            has_previous=page_number > 1,
            has_next=page_number < total_pages,
        )


class ApiResponse(BaseModel, Generic[T]):
    """Standard success envelope returned by every route."""
    success: bool = True
    message: str = ""
    data: Optional[T] = None
    errors: List[str] = Field(default_factory=list)


# =============================================================================
# MENU ITEMS
# =============================================================================

class MenuItemCreate(BaseModel):
    """Request schema for adding a catalog item."""
    name: str = Field(..., max_length=100, examples=["Pizza Margherita"])
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., max_digits=10, decimal_places=2, examples=["14.99"])
    category: Optional[str] = Field(None, max_length=50, examples=["Pizza"])
    status: MenuItemStatus = MenuItemStatus.AVAILABLE


class MenuItemUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, max_length=50)
    status: Optional[MenuItemStatus] = None


class MenuItemResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    category: Optional[str]
    status: MenuItemStatus

    class Config:
        from_attributes = True


# =============================================================================
# TABLES
# =============================================================================

MAX_SEATS = 20


class TableCreate(BaseModel):
    """Request schema for adding a dining table."""
    table_number: int = Field(..., examples=[12])
    seats: int = Field(..., examples=[4])
    location: Optional[str] = Field(None, max_length=100, examples=["Terrace"])


class TableUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    table_number: Optional[int] = None
    seats: Optional[int] = None
    location: Optional[str] = Field(None, max_length=100)
    status: Optional[TableStatus] = None


class TableResponse(BaseModel):
    id: int
    table_number: int
    seats: int
    status: TableStatus
    location: Optional[str]

    class Config:
        from_attributes = True


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemRequest(BaseModel):
    """Single requested line: which item and how many."""
    menu_item_id: int = Field(..., examples=[1])
    quantity: int = Field(..., ge=1, le=99, examples=[2])


class OrderCreate(BaseModel):
    """
    Request schema for placing an order.

    user_id is only honoured for staff/admin callers placing an order on
    behalf of a customer; customers always order for themselves.
    """
    table_id: Optional[int] = Field(None, examples=[4])
    user_id: Optional[int] = Field(None, examples=[3])
    items: List[OrderItemRequest] = Field(..., min_length=1)


class OrderUpdate(BaseModel):
    """Replaces the whole item list of a pending order."""
    items: List[OrderItemRequest] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderDetailResponse(BaseModel):
    id: int
    menu_item_id: int
    menu_item_name: Optional[str] = None
    quantity: int
    price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Response schema for a single order with its details."""
    id: int
    user_id: Optional[int]
    user_name: Optional[str] = None
    table_id: Optional[int]
    created_at: datetime
    status: OrderStatus
    total_amount: Decimal
    details: List[OrderDetailResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


# =============================================================================
# PAYMENTS
# =============================================================================

class PaymentDetailCreate(BaseModel):
    method: PaymentMethod = PaymentMethod.CASH
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    transaction_code: Optional[str] = Field(None, max_length=100, examples=["TXN-20240115-0001"])
    provider: Optional[str] = Field(None, max_length=100, examples=["Stripe"])
    extra_info: Optional[str] = Field(None, max_length=1000)


class PaymentCreate(BaseModel):
    """
    Request schema for recording a payment against an order.

    The amount is not checked against the order total and details need
    not add up to it; partial payments are allowed.
    """
    order_id: int = Field(..., examples=[1])
    method: PaymentMethod = PaymentMethod.CASH
    amount: Decimal = Field(..., max_digits=10, decimal_places=2, examples=["25.00"])
    details: List[PaymentDetailCreate] = Field(default_factory=list)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class PaymentVerifyRequest(BaseModel):
    transaction_code: str = Field(..., min_length=1, max_length=100)


class PaymentDetailResponse(BaseModel):
    id: int
    method: PaymentMethod
    amount: Decimal
    transaction_code: Optional[str]
    provider: Optional[str]
    extra_info: Optional[str]

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: int
    order_id: int
    method: PaymentMethod
    amount: Decimal
    status: PaymentStatus
    payment_date: datetime
    details: List[PaymentDetailResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PaymentStatistics(BaseModel):
    """Aggregate snapshot computed on request."""
    total_completed: Decimal
    total_pending: Decimal
    total_failed: Decimal
    count_completed: int
    count_pending: int
    count_failed: int
    total_revenue: Decimal
    generated_at: datetime


# =============================================================================
# CUSTOMERS
# =============================================================================

class CustomerCreate(BaseModel):
    """
    Request schema for registering a customer.

    Leave email empty for a walk-in guest; a placeholder account is generated.
    """
    full_name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    email: Optional[str] = Field(None, max_length=255, examples=["jane@example.com"])
    phone: Optional[str] = Field(None, max_length=20, examples=["555-123-4567"])

    @field_validator("email")
    @classmethod
    def blank_email_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip().lower()


class CustomerResponse(BaseModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str]
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# STAFF
# =============================================================================

class StaffCreate(BaseModel):
    """Request schema for hiring a staff member."""
    full_name: str = Field(..., min_length=1, max_length=100, examples=["Sam Waiter"])
    email: str = Field(..., min_length=3, max_length=255, examples=["sam@restaurant.local"])
    password: str = Field(..., min_length=8, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    position: str = Field(..., min_length=1, max_length=50, examples=["Waiter", "Chef", "Manager"])
    hire_date: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class StaffUpdate(BaseModel):
    """Partial update of a staff account and its profile."""
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    position: Optional[str] = Field(None, min_length=1, max_length=50)
    hire_date: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v is not None else None


class StaffResponse(BaseModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str]
    role: UserRole
    position: Optional[str] = None
    hire_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# SYSTEM
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    version: str
    timestamp: datetime
