"""
Customer Accounts

Staff register customers at the counter. A customer without an email is a
walk-in guest: the account gets a placeholder email and a default password
from the injected ``GuestAccountPolicy``. Placeholder emails are never
shown back to clients.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.core.config import get_settings
from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.core.security import hash_password
from restaurant_ops.models import User, UserRole
from restaurant_ops.repositories.users import CustomerRepository
from restaurant_ops.schemas import CustomerCreate, CustomerResponse
from restaurant_ops.services.base import GenericService, ServiceHooks

logger = logging.getLogger(__name__)

TOKEN_PLACEHOLDER = "{token}"


def _random_token() -> str:
    return uuid.uuid4().hex[:16]


@dataclass(frozen=True)
class GuestAccountPolicy:
    """
    How walk-in accounts are generated.

    Attributes:
        default_password: Initial password of every generated account
        email_template: Placeholder email pattern containing ``{token}``
        token_factory: Produces the unique part of the placeholder email
    """
    default_password: str
    email_template: str
    token_factory: Callable[[], str] = field(default=_random_token, compare=False)

    def placeholder_email(self) -> str:
        return self.email_template.replace(TOKEN_PLACEHOLDER, self.token_factory())

    def is_placeholder(self, email: Optional[str]) -> bool:
        if not email:
            return False
        prefix, _, suffix = self.email_template.partition(TOKEN_PLACEHOLDER)
        return email.startswith(prefix) and email.endswith(suffix) and len(email) > len(prefix) + len(suffix)


def default_guest_policy() -> GuestAccountPolicy:
    settings = get_settings()
    return GuestAccountPolicy(
        default_password=settings.guest_default_password,
        email_template=settings.guest_email_template,
    )


class CustomerService:
    """Customer registration and lookup on top of the generic service."""

    entity_name = "Customer"

    def __init__(self, session: AsyncSession, policy: Optional[GuestAccountPolicy] = None):
        self.policy = policy or default_guest_policy()
        self.repository = CustomerRepository(session)
        self.crud = GenericService(
            self.repository,
            ServiceHooks(
                to_dto=self.to_dto,
                to_entity=self.to_entity,
                validate_create=self.validate_create,
                on_conflict=self.on_conflict,
            ),
            self.entity_name,
        )

    def to_dto(self, user: User) -> CustomerResponse:
        dto = CustomerResponse.model_validate(user)
        if self.policy.is_placeholder(dto.email):
            dto.email = ""
        return dto

    def to_entity(self, payload: CustomerCreate) -> User:
        email = payload.email
        if email is None:
            email = self.policy.placeholder_email()
            logger.info(f"Generating walk-in account for {payload.full_name}")
        return User(
            full_name=payload.full_name.strip(),
            email=email,
            phone=payload.phone,
            role=UserRole.CUSTOMER,
            password_hash=hash_password(self.policy.default_password),
        )

    async def validate_create(self, payload: CustomerCreate) -> Optional[ServiceResult]:
        if payload.email is not None and await self.repository.email_exists(payload.email):
            return self._email_taken(payload.email)
        return None

    def on_conflict(self, payload: CustomerCreate) -> Optional[ServiceResult]:
        # Placeholder collisions stay INFRASTRUCTURE
        if payload.email is None:
            return None
        return self._email_taken(payload.email)

    @staticmethod
    def _email_taken(email: str) -> ServiceResult:
        return ServiceResult.fail(ErrorKind.VALIDATION, f"Email {email} is already registered")

    async def create_customer(self, payload: CustomerCreate) -> ServiceResult[CustomerResponse]:
        return await self.crud.create(payload)

    async def get_customer(self, customer_id: int) -> ServiceResult[CustomerResponse]:
        return await self.crud.get_by_id(customer_id)

    async def get_all(self):
        return await self.crud.get_all()

    async def get_paginated(self, params):
        return await self.crud.get_paginated(params)

    async def search(self, keyword: Optional[str]):
        return await self.crud.search(keyword)
