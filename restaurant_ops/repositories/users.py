"""User account persistence."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from restaurant_ops.models import User, UserRole
from restaurant_ops.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User
    search_fields = ("full_name", "email", "phone")

    async def get_by_email(self, email: str) -> Optional[User]:
        """Lookup across every role; emails are unique system-wide."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.session.scalar(stmt)

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None


class RoleRepository(UserRepository):
    """
    Users restricted to one role.

    Reads, existence checks, updates and deletes all ignore accounts of
    other roles, so an id belonging to another role behaves as absent.
    """

    role: UserRole

    def _scoped(self, stmt):
        return stmt.where(User.role == self.role)


class CustomerRepository(RoleRepository):
    role = UserRole.CUSTOMER


class StaffRepository(RoleRepository):
    role = UserRole.STAFF

    def _load_options(self):
        return (selectinload(User.staff_profile),)
