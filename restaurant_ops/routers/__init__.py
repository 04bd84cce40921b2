"""HTTP routers mounted by the application."""

from restaurant_ops.routers import customers, menu, orders, payments, staff, tables

__all__ = ["customers", "menu", "orders", "payments", "staff", "tables"]
