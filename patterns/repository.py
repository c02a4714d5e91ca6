"""Async repository pattern for database access.

Provides a generic base repository with parameterized batch lookups and
translation of driver errors into one repository error type. Verticals subclass this to add
domain-specific queries.

Example: SqlCatalogStore extending BaseRepository.
"""

from typing import Any, Collection, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


class RepositoryError(Exception):
    """Raised when the underlying database call fails.

    Subclasses of BaseRepository may set `error_class` to raise a
    domain-specific subclass instead.
    """


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with batch id lookups + error translation.

    Subclass and set `model` to your SQLAlchemy model::

        class OptionRepository(BaseRepository[PartOption]):
            model = PartOption

            async def for_part_type(self, part_type_id: int):
                stmt = select(self.model).where(
                    self.model.part_type_id == part_type_id,
                )
                return await self.fetch_all(stmt)

    All statements go through `fetch_all`/`fetch_one`/`execute`, which turn
    SQLAlchemy failures into `error_class`.
    """

    model: type[ModelT]
    error_class: type[Exception] = RepositoryError

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- Execution helpers --

    async def execute(self, stmt: Any):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self.error_class(
                f"{self.__class__.__name__} query failed: {exc}"
            ) from exc

    async def fetch_all(self, stmt: Select) -> list[Any]:
        result = await self.execute(stmt)
        return list(result.scalars().all())

    async def fetch_one(self, stmt: Select) -> Any | None:
        result = await self.execute(stmt)
        return result.scalar_one_or_none()

    # -- Batch get --

    async def get_many(self, item_ids: Collection[int], *criteria: Any) -> list[ModelT]:
        """Get rows for a set of primary keys, ordered by id.

        An empty id collection returns [] without touching the database.
        """
        if not item_ids:
            return []
        stmt = (
            select(self.model)
            .where(self.model.id.in_(list(item_ids)), *criteria)
            .order_by(self.model.id)
        )
        return await self.fetch_all(stmt)
