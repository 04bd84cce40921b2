"""
Staff Accounts

Admins hire, edit and remove staff. Each staff account carries a profile
with its position and hire date. Emails are unique across every role.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.core.security import hash_password
from restaurant_ops.models import StaffProfile, User, UserRole, utcnow
from restaurant_ops.repositories.orders import OrderRepository
from restaurant_ops.repositories.users import StaffRepository
from restaurant_ops.schemas import Page, PageParams, StaffCreate, StaffResponse, StaffUpdate
from restaurant_ops.services.base import GenericService, ServiceHooks

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("position", "hire_date")


def _email_taken(email: str) -> ServiceResult:
    return ServiceResult.fail(ErrorKind.VALIDATION, f"Email {email} is already registered")


def _to_entity(payload: StaffCreate) -> User:
    return User(
        full_name=payload.full_name.strip(),
        email=payload.email,
        phone=payload.phone,
        role=UserRole.STAFF,
        password_hash=hash_password(payload.password),
        staff_profile=StaffProfile(
            position=payload.position.strip(),
            hire_date=payload.hire_date or utcnow(),
        ),
    )


def _apply_update(user: User, payload: StaffUpdate) -> None:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if user.staff_profile is None:
        user.staff_profile = StaffProfile(position=changes.get("position", "Staff"))
    for field, value in changes.items():
        target = user.staff_profile if field in PROFILE_FIELDS else user
        setattr(target, field, value.strip() if isinstance(value, str) else value)


class StaffService:
    """Staff account management on top of the generic service."""

    entity_name = "Staff"

    def __init__(self, session: AsyncSession):
        self.repository = StaffRepository(session)
        self.orders = OrderRepository(session)
        self.crud = GenericService(
            self.repository,
            ServiceHooks(
                to_dto=StaffResponse.model_validate,
                to_entity=_to_entity,
                apply_update=_apply_update,
                validate_create=self._validate_create,
                validate_update=self._validate_update,
                validate_delete=self._validate_delete,
                on_conflict=self._on_conflict,
            ),
            self.entity_name,
        )

    async def _validate_create(self, payload: StaffCreate) -> Optional[ServiceResult]:
        if await self.repository.email_exists(payload.email):
            return _email_taken(payload.email)
        return None

    async def _validate_update(self, staff_id: int, payload: StaffUpdate, user: User) -> Optional[ServiceResult]:
        if payload.email is not None and payload.email != user.email.lower():
            if await self.repository.email_exists(payload.email):
                return _email_taken(payload.email)
        return None

    async def _validate_delete(self, staff_id: int, user: User) -> Optional[ServiceResult]:
        # Orders keep pointing at the account that placed them
        if await self.orders.count_for_user(staff_id) > 0:
            return ServiceResult.fail(
                ErrorKind.BUSINESS_RULE,
                f"Staff with ID {staff_id} owns existing orders and cannot be deleted",
            )
        return None

    @staticmethod
    def _on_conflict(payload: Union[StaffCreate, StaffUpdate]) -> Optional[ServiceResult]:
        if payload.email is None:
            return None
        return _email_taken(payload.email)

    async def create_staff(self, payload: StaffCreate) -> ServiceResult[StaffResponse]:
        result = await self.crud.create(payload)
        if result.success:
            logger.info(f"Staff #{result.data.id} hired as {result.data.position}")
        return result

    async def update_staff(self, staff_id: int, payload: StaffUpdate) -> ServiceResult[StaffResponse]:
        return await self.crud.update(staff_id, payload)

    async def delete_staff(self, staff_id: int) -> ServiceResult[bool]:
        return await self.crud.delete(staff_id)

    async def get_staff(self, staff_id: int) -> ServiceResult[StaffResponse]:
        return await self.crud.get_by_id(staff_id)

    async def get_all(self) -> ServiceResult[List[StaffResponse]]:
        return await self.crud.get_all()

    async def get_paginated(self, params: PageParams) -> ServiceResult[Page[StaffResponse]]:
        return await self.crud.get_paginated(params)

    async def search(self, keyword: Optional[str]) -> ServiceResult[List[StaffResponse]]:
        return await self.crud.search(keyword)

    async def search_paginated(self, keyword: Optional[str], params: PageParams) -> ServiceResult[Page[StaffResponse]]:
        return await self.crud.search_paginated(keyword, params)
