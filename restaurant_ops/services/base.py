"""
Generic Service

Wraps a repository with DTO mapping, validation hooks and the uniform
``ServiceResult`` envelope. Domain services compose a ``GenericService``
with a ``ServiceHooks`` capability set instead of subclassing it.

Expected outcomes (not found, validation, business rules) come back as
failed results. Database faults raised below are caught by
``infrastructure_guard``, logged with their traceback and returned as a
generic INFRASTRUCTURE failure that still carries the raw message in
``errors``.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.repositories.base import BaseRepository, PageSlice
from restaurant_ops.schemas import Page, PageParams

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")
DtoT = TypeVar("DtoT")

# A validation hook returns None to accept, or a failed result to refuse.
Validator = Callable[..., Awaitable[Optional[ServiceResult]]]


async def always_valid(*args: Any) -> Optional[ServiceResult]:
    return None


def infrastructure_guard(action: str):
    """
    Convert SQLAlchemy faults raised by a service coroutine into an
    INFRASTRUCTURE result.

    Args:
        action: Verb phrase used in the message, e.g. "creating"
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            entity = getattr(self, "entity_name", "record")
            try:
                return await func(self, *args, **kwargs)
            except SQLAlchemyError as exc:
                logger.exception(f"Database error while {action} {entity}")
                return ServiceResult.fail(
                    ErrorKind.INFRASTRUCTURE,
                    f"An error occurred while {action} {entity}",
                    errors=[str(exc)],
                )
        return wrapper
    return decorator


@dataclass
class ServiceHooks(Generic[ModelT, DtoT]):
    """
    Entity-specific capabilities plugged into ``GenericService``.

    Attributes:
        to_dto: Entity -> response model
        to_entity: Create payload -> new (unsaved) entity; omit when creation is custom
        apply_update: Copies an update payload onto an existing entity
        validate_create: ``(payload)``
        validate_update: ``(entity_id, payload, entity)``
        validate_delete: ``(entity_id, entity)``
        on_conflict: ``(payload)`` called when a write hits a unique or
            foreign key constraint; returns the refusal to report, or None
            to let the fault through as INFRASTRUCTURE
    """
    to_dto: Callable[[ModelT], DtoT]
    to_entity: Optional[Callable[[Any], ModelT]] = None
    apply_update: Optional[Callable[[ModelT, Any], None]] = None
    validate_create: Validator = always_valid
    validate_update: Validator = always_valid
    validate_delete: Validator = always_valid
    on_conflict: Optional[Callable[[Any], Optional[ServiceResult]]] = None


class GenericService(Generic[ModelT, DtoT]):
    """Uniform CRUD service over one repository."""

    def __init__(self, repository: BaseRepository, hooks: ServiceHooks, entity_name: Optional[str] = None):
        self.repository = repository
        self.hooks = hooks
        self.entity_name = entity_name or repository.entity_name

    def to_page(self, page: PageSlice) -> Page[DtoT]:
        return Page.build(
            [self.hooks.to_dto(e) for e in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_records=page.total_records,
        )

    def _conflict(self, payload: Any) -> Optional[ServiceResult]:
        if self.hooks.on_conflict is None:
            return None
        return self.hooks.on_conflict(payload)

    def keyword_missing(self) -> ServiceResult:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Search keyword is required")

    # =========================================================================
    # READS
    # =========================================================================

    @infrastructure_guard("retrieving")
    async def get_by_id(self, entity_id: int) -> ServiceResult[DtoT]:
        entity = await self.repository.get_by_id(entity_id)
        if entity is None:
            return ServiceResult.not_found(self.entity_name, entity_id)
        return ServiceResult.ok(self.hooks.to_dto(entity), f"{self.entity_name} retrieved successfully")

    @infrastructure_guard("retrieving")
    async def get_all(self) -> ServiceResult[List[DtoT]]:
        entities = await self.repository.get_all()
        return ServiceResult.ok(
            [self.hooks.to_dto(e) for e in entities],
            f"Retrieved {len(entities)} {self.entity_name} records",
        )

    @infrastructure_guard("retrieving")
    async def get_paginated(self, params: PageParams) -> ServiceResult[Page[DtoT]]:
        page = await self.repository.get_paginated(params)
        return ServiceResult.ok(self.to_page(page), f"{self.entity_name} page retrieved successfully")

    @infrastructure_guard("searching")
    async def search(self, keyword: Optional[str]) -> ServiceResult[List[DtoT]]:
        if not keyword or not keyword.strip():
            return self.keyword_missing()
        entities = await self.repository.search(keyword)
        return ServiceResult.ok(
            [self.hooks.to_dto(e) for e in entities],
            f"Found {len(entities)} {self.entity_name} records",
        )

    @infrastructure_guard("searching")
    async def search_paginated(self, keyword: Optional[str], params: PageParams) -> ServiceResult[Page[DtoT]]:
        if not keyword or not keyword.strip():
            return self.keyword_missing()
        page = await self.repository.search_paginated(keyword, params)
        return ServiceResult.ok(self.to_page(page), f"Found {page.total_records} {self.entity_name} records")

    @infrastructure_guard("checking")
    async def exists(self, entity_id: int) -> ServiceResult[bool]:
        return ServiceResult.ok(await self.repository.exists(entity_id))

    @infrastructure_guard("counting")
    async def count(self) -> ServiceResult[int]:
        return ServiceResult.ok(await self.repository.count())

    # =========================================================================
    # WRITES
    # =========================================================================

    @infrastructure_guard("creating")
    async def create(self, payload: Any) -> ServiceResult[DtoT]:
        refusal = await self.hooks.validate_create(payload)
        if refusal is not None:
            logger.warning(f"{self.entity_name} creation refused: {refusal.message}")
            return refusal
        try:
            entity = await self.repository.create(self.hooks.to_entity(payload))
        except IntegrityError:
            refusal = self._conflict(payload)
            if refusal is None:
                raise
            logger.warning(f"{self.entity_name} creation hit a constraint: {refusal.message}")
            return refusal
        return ServiceResult.ok(self.hooks.to_dto(entity), f"{self.entity_name} created successfully")

    @infrastructure_guard("updating")
    async def update(self, entity_id: int, payload: Any) -> ServiceResult[DtoT]:
        entity = await self.repository.get_by_id(entity_id)
        if entity is None:
            return ServiceResult.not_found(self.entity_name, entity_id)
        refusal = await self.hooks.validate_update(entity_id, payload, entity)
        if refusal is not None:
            logger.warning(f"{self.entity_name} {entity_id} update refused: {refusal.message}")
            return refusal
        self.hooks.apply_update(entity, payload)
        try:
            updated = await self.repository.update(entity)
        except IntegrityError:
            refusal = self._conflict(payload)
            if refusal is None:
                raise
            logger.warning(f"{self.entity_name} {entity_id} update hit a constraint: {refusal.message}")
            return refusal
        if updated is None:
            return ServiceResult.not_found(self.entity_name, entity_id)
        return ServiceResult.ok(self.hooks.to_dto(updated), f"{self.entity_name} updated successfully")

    @infrastructure_guard("deleting")
    async def delete(self, entity_id: int) -> ServiceResult[bool]:
        entity = await self.repository.get_by_id(entity_id)
        if entity is None:
            return ServiceResult.not_found(self.entity_name, entity_id)
        refusal = await self.hooks.validate_delete(entity_id, entity)
        if refusal is not None:
            logger.warning(f"{self.entity_name} {entity_id} deletion refused: {refusal.message}")
            return refusal
        deleted = await self.repository.delete(entity_id)
        if not deleted:
            return ServiceResult.not_found(self.entity_name, entity_id)
        return ServiceResult.ok(True, f"{self.entity_name} deleted successfully")
