"""
SQLAlchemy Database Models

Restaurant operations entities:
- Users with roles (Admin, Staff, Customer) and staff profiles
- Restaurant tables with reservation status
- Menu catalog items
- Orders with snapshot-priced order details
- Payments with per-detail transaction codes

Version: 1.0.0
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship

from restaurant_ops.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Aware UTC copy of ``value``; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, enum.Enum):
    """Account roles used for authorization."""
    ADMIN = "Admin"
    STAFF = "Staff"
    CUSTOMER = "Customer"


class MenuItemStatus(str, enum.Enum):
    """Availability of a catalog item."""
    AVAILABLE = "Available"
    OUT_OF_STOCK = "OutOfStock"


class OrderStatus(str, enum.Enum):
    """
    Order status workflow.

    PENDING is initial; COMPLETED and CANCELLED are terminal.
    """
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class TableStatus(str, enum.Enum):
    """Seating state of a restaurant table."""
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    RESERVED = "Reserved"


class PaymentStatus(str, enum.Enum):
    """Settlement state of a payment. No terminal lock."""
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    CREDIT_CARD = "CreditCard"
    BANK_TRANSFER = "BankTransfer"
    E_WALLET = "EWallet"
    VOUCHER = "Voucher"


# =============================================================================
# USERS
# =============================================================================

class User(Base):
    """Account that places orders or operates the restaurant."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(Enum(UserRole), default=UserRole.CUSTOMER, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    staff_profile = relationship(
        "StaffProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def position(self):
        return self.staff_profile.position if self.staff_profile is not None else None

    @property
    def hire_date(self):
        return self.staff_profile.hire_date if self.staff_profile is not None else None

    def __repr__(self):
        return f"<User #{self.id} - {self.full_name} - {self.role.value}>"


class StaffProfile(Base):
    """Employment details of a Staff account."""
    __tablename__ = "staff_profiles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    position = Column(String(50), nullable=False)
    hire_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="staff_profile")


# =============================================================================
# MENU CATALOG
# =============================================================================

class MenuItem(Base):
    """
    Catalog item. Orders copy its price at creation time and keep
    only the id, so later price changes never touch history.
    """
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=True, index=True)
    status = Column(
        Enum(MenuItemStatus),
        default=MenuItemStatus.AVAILABLE,
        nullable=False
    )

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


# =============================================================================
# TABLES
# =============================================================================

class RestaurantTable(Base):
    """Dining table. Orders may reference one; takeaway orders do not."""
    __tablename__ = "restaurant_tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_number = Column(Integer, nullable=False, unique=True, index=True)
    seats = Column(Integer, nullable=False)
    status = Column(
        Enum(TableStatus),
        default=TableStatus.AVAILABLE,
        nullable=False,
        index=True
    )
    location = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<RestaurantTable #{self.id} - number {self.table_number} - {self.status.value}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Order aggregate root.

    total_amount always equals the sum of price * quantity over details.
    Details are replaced wholesale on update and deleted with the order.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    table_id = Column(Integer, ForeignKey("restaurant_tables.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)

    user = relationship("User", lazy="selectin")
    details = relationship(
        "OrderDetail",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderDetail.id",
    )

    @property
    def user_name(self):
        return self.user.full_name if self.user is not None else None

    def __repr__(self):
        return f"<Order #{self.id} - table {self.table_id} - {self.status.value}>"


class OrderDetail(Base):
    """Line item with its unit price captured when the order was placed."""
    __tablename__ = "order_details"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="details")
    menu_item = relationship("MenuItem", lazy="selectin")

    @property
    def menu_item_name(self):
        return self.menu_item.name if self.menu_item is not None else None


# =============================================================================
# PAYMENTS
# =============================================================================

class Payment(Base):
    """
    Settlement against an order. Several payments may reference the same
    order; the two aggregates share no cascade.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    method = Column(Enum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    details = relationship(
        "PaymentDetail",
        back_populates="payment",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PaymentDetail.id",
    )

    def __repr__(self):
        return f"<Payment #{self.id} - order {self.order_id} - {self.amount} - {self.status.value}>"


class PaymentDetail(Base):
    """Unit of reconciliation: one method/amount with an optional transaction code."""
    __tablename__ = "payment_details"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    method = Column(Enum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_code = Column(String(100), nullable=True, index=True)
    provider = Column(String(100), nullable=True)
    extra_info = Column(Text, nullable=True)

    payment = relationship("Payment", back_populates="details")
