"""Async repository pattern for database access.

Provides a generic base repository with get/list/create operations,
offset pagination, and exact-match filters. Each Boardcamp model gets a
subclass that adds its domain-specific queries.

Example: GameRepository extending BaseRepository.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with get/list/create + pagination.

    Subclass and set `model` to your SQLAlchemy model::

        class CustomerRepository(BaseRepository[Customer]):
            model = Customer

            async def search(self, cpf_prefix: str | None = None):
                stmt = select(self.model)
                if cpf_prefix:
                    stmt = stmt.where(self.model.cpf.startswith(cpf_prefix))
                result = await self.session.execute(stmt)
                return [r.to_dict() for r in result.scalars().all()]

    The repository never commits; the caller owns the transaction.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- List with pagination --

    async def list(
        self,
        offset: int = 0,
        limit: int = 50,
        filters: dict[str, Any] | None = None,
    ) -> list[dict]:
        """List rows ordered by id, with optional exact-match filters."""
        stmt = select(self.model)

        if filters:
            for col_name, value in filters.items():
                if hasattr(self.model, col_name) and value is not None:
                    stmt = stmt.where(getattr(self.model, col_name) == value)

        stmt = stmt.order_by(self.model.id).offset(offset).limit(limit)

        result = await self.session.execute(stmt)
        return [row.to_dict() for row in result.scalars().all()]

    # -- Get by ID --

    async def get_model(self, item_id: int, for_update: bool = False) -> ModelT | None:
        """Load the ORM object, optionally locking its row until commit."""
        stmt = select(self.model).where(self.model.id == item_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, item_id: int) -> dict | None:
        """Get a single row by ID."""
        row = await self.get_model(item_id)
        return row.to_dict() if row else None

    async def exists_by(self, **criteria: Any) -> bool:
        """True when at least one row matches every column == value pair."""
        stmt = select(self.model.id)
        for col_name, value in criteria.items():
            stmt = stmt.where(getattr(self.model, col_name) == value)
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    # -- Create --

    async def create(self, data: dict[str, Any]) -> dict:
        """Insert a new row and flush so its id is populated."""
        item = self.model(**data)
        self.session.add(item)
        await self.session.flush()
        return item.to_dict()
