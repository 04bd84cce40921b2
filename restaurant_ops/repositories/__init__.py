"""
Repositories Module

Generic CRUD/pagination/search repository and its per-entity specializations.
"""

from restaurant_ops.repositories.base import BaseRepository, PageSlice
from restaurant_ops.repositories.menu import MenuItemRepository
from restaurant_ops.repositories.orders import OrderRepository
from restaurant_ops.repositories.payments import PaymentRepository
from restaurant_ops.repositories.tables import TableRepository
from restaurant_ops.repositories.users import CustomerRepository, RoleRepository, StaffRepository, UserRepository

__all__ = [
    "BaseRepository",
    "PageSlice",
    "MenuItemRepository",
    "OrderRepository",
    "PaymentRepository",
    "TableRepository",
    "CustomerRepository",
    "RoleRepository",
    "StaffRepository",
    "UserRepository",
]
