"""
Services Module

Domain services built by composing the generic service with
entity-specific hooks.

Usage:
    from restaurant_ops.services import OrderService

    result = await OrderService(session).create_order(user_id, table_id, items)
    if not result.success:
        ...
"""

from restaurant_ops.services.access import UNRESTRICTED, AccessScope, OwnedBy, Unrestricted, can_see
from restaurant_ops.services.base import GenericService, ServiceHooks, infrastructure_guard
from restaurant_ops.services.customers import CustomerService, GuestAccountPolicy
from restaurant_ops.services.menu import MenuCatalog, build_menu_service
from restaurant_ops.services.orders import OrderService, order_total
from restaurant_ops.services.payments import PaymentService, check_transaction_code
from restaurant_ops.services.staff import StaffService
from restaurant_ops.services.tables import TableService

__all__ = [
    "UNRESTRICTED",
    "AccessScope",
    "OwnedBy",
    "Unrestricted",
    "can_see",
    "GenericService",
    "ServiceHooks",
    "infrastructure_guard",
    "CustomerService",
    "GuestAccountPolicy",
    "MenuCatalog",
    "build_menu_service",
    "OrderService",
    "order_total",
    "PaymentService",
    "check_transaction_code",
    "StaffService",
    "TableService",
]
