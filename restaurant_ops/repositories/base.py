"""
Generic Repository

One CRUD + pagination + keyword search implementation shared by every
entity type. Concrete repositories declare their model, which columns a
keyword search looks at and, where needed, the loader options and row
scope applied to every query.

Every mutation commits immediately and returns the entity re-read with
its loader options, so relationships are ready to serialize outside an
async context. Persistence errors are not swallowed: the session is
rolled back and the SQLAlchemy error propagates.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_ops.database import Base
from restaurant_ops.schemas import PageParams

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class PageSlice(Generic[ModelT]):
    """Raw page of entities as returned by a repository."""
    items: List[ModelT]
    page_number: int
    page_size: int
    total_records: int


class BaseRepository(Generic[ModelT]):
    """
    Generic repository over a single mapped model.

    Attributes:
        model: Mapped class handled by this repository
        search_fields: Column names matched (case-insensitive substring)
            by ``search``; ``id`` is always matched in string form
    """

    model: Type[ModelT]
    search_fields: Sequence[str] = ()

    def __init__(self, session: AsyncSession, model: Optional[Type[ModelT]] = None):
        self.session = session
        if model is not None:
            self.model = model
        self.entity_name = self.model.__name__

    # =========================================================================
    # QUERY SHAPING
    # =========================================================================

    def _scoped(self, stmt):
        """Narrow a statement over ``model`` to the rows this repository may touch."""
        return stmt

    def _load_options(self) -> Sequence[Any]:
        """Loader options for relationships read after the query returns."""
        return ()

    def _with_options(self, stmt):
        return stmt.options(*self._load_options())

    async def _fetch(self, entity_id: int) -> Optional[ModelT]:
        stmt = self._with_options(
            self._scoped(select(self.model).where(self.model.id == entity_id))
        ).execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_by_id(self, entity_id: int) -> Optional[ModelT]:
        logger.info(f"Getting {self.entity_name} by ID: {entity_id}")
        entity = await self._fetch(entity_id)
        if entity is None:
            logger.warning(f"{self.entity_name} with ID {entity_id} not found")
        return entity

    async def get_all(self) -> List[ModelT]:
        logger.info(f"Getting all {self.entity_name} records")
        stmt = self._with_options(self._scoped(select(self.model))).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_paginated(self, params: PageParams) -> PageSlice[ModelT]:
        logger.info(
            f"Getting paginated {self.entity_name}: page {params.page_number}, "
            f"size {params.page_size}"
        )
        return await self._paginate(self._scoped(select(self.model)), params)

    async def search(self, keyword: str) -> List[ModelT]:
        keyword = self._require_keyword(keyword)
        logger.info(f"Searching {self.entity_name} with keyword: {keyword}")
        stmt = self._with_options(self._search_statement(keyword)).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().unique().all())

    async def search_paginated(self, keyword: str, params: PageParams) -> PageSlice[ModelT]:
        keyword = self._require_keyword(keyword)
        logger.info(
            f"Searching paginated {self.entity_name} with keyword: {keyword}, "
            f"page {params.page_number}, size {params.page_size}"
        )
        return await self._paginate(self._search_statement(keyword), params)

    async def exists(self, entity_id: int) -> bool:
        stmt = self._scoped(
            select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        )
        return (await self.session.scalar(stmt)) > 0

    async def count(self) -> int:
        return await self.session.scalar(self._scoped(select(func.count()).select_from(self.model)))

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create(self, entity: ModelT) -> ModelT:
        logger.info(f"Creating new {self.entity_name}")
        self.session.add(entity)
        await self._commit()
        entity = await self._fetch(entity.id)
        logger.info(f"{self.entity_name} created successfully with ID: {entity.id}")
        return entity

    async def update(self, entity: ModelT) -> Optional[ModelT]:
        """Persist changes to an existing entity. Returns None if its id is absent."""
        logger.info(f"Updating {self.entity_name} with ID: {entity.id}")
        try:
            # Pending changes are flushed by this query
            found = await self.exists(entity.id)
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        if not found:
            logger.warning(f"{self.entity_name} with ID {entity.id} not found for update")
            return None
        entity = await self.session.merge(entity)
        await self._commit()
        entity = await self._fetch(entity.id)
        logger.info(f"{self.entity_name} with ID {entity.id} updated successfully")
        return entity

    async def delete(self, entity_id: int) -> bool:
        logger.info(f"Deleting {self.entity_name} with ID: {entity_id}")
        entity = await self._fetch(entity_id)
        if entity is None:
            logger.warning(f"{self.entity_name} with ID {entity_id} not found for deletion")
            return False
        await self.session.delete(entity)
        await self._commit()
        logger.info(f"{self.entity_name} with ID {entity_id} deleted successfully")
        return True

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

    @staticmethod
    def _require_keyword(keyword: Optional[str]) -> str:
        if keyword is None or not keyword.strip():
            raise ValueError("Search keyword must not be empty")
        return keyword.strip()

    def _search_conditions(self, keyword: str) -> List[Any]:
        pattern = f"%{keyword.lower()}%"
        conditions = [cast(self.model.id, String).like(pattern)]
        for name in self.search_fields:
            column = getattr(self.model, name)
            conditions.append(func.lower(cast(column, String)).like(pattern))
        return conditions

    def _search_statement(self, keyword: str):
        return self._scoped(select(self.model).where(or_(*self._search_conditions(keyword))))

    def _order_clause(self, params: PageParams):
        column = self.model.id
        if params.sort_by:
            columns = self.model.__table__.columns
            # Unknown sort fields fall back to id
            match = next((c for c in columns if c.name.lower() == params.sort_by.lower()), None)
            if match is not None:
                column = getattr(self.model, match.key)
        return column.desc() if params.descending else column.asc()

    async def _paginate(self, stmt, params: PageParams) -> PageSlice[ModelT]:
        total = await self.session.scalar(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        )
        page_stmt = (
            self._with_options(stmt)
            .order_by(self._order_clause(params), self.model.id)
            .offset(params.skip)
            .limit(params.page_size)
        )
        result = await self.session.execute(page_stmt)
        return PageSlice(
            items=list(result.scalars().unique().all()),
            page_number=params.page_number,
            page_size=params.page_size,
            total_records=total,
        )
